"""
Ownership arbitration for shared objects.

Each object is either unowned or owned by exactly one connection. The
arbiter is the only code that writes ``owner_id``; every check-and-set
runs under that object's lock so two pickups can never both succeed.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Any, Iterable, List, Optional

from .models import SharedObject, default_objects
from ..core.error_handlers import NotObjectOwner, ObjectNotFound, ObjectOwnedByAnotherUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArbitrationResult:
    """Outcome of an accepted request.

    ``update`` is the object_update payload captured while the lock was
    held; ``changed`` is False for a no-op that must not be broadcast.
    """
    object_id: str
    update: Dict[str, Any]
    changed: bool = True


class OwnershipArbiter:
    """Test-and-set gate over the shared object table."""

    def __init__(self, objects: Optional[Iterable[SharedObject]] = None):
        self.objects: Dict[str, SharedObject] = {}
        self._locks: Dict[str, threading.Lock] = {}
        for obj in (default_objects() if objects is None else objects):
            self.objects[obj.object_id] = obj
            self._locks[obj.object_id] = threading.Lock()

    def __len__(self) -> int:
        return len(self.objects)

    def _lookup(self, object_id: str):
        obj = self.objects.get(object_id)
        if obj is None:
            raise ObjectNotFound(object_id)
        return obj, self._locks[object_id]

    def owner_of(self, object_id: str) -> Optional[str]:
        obj, lock = self._lookup(object_id)
        with lock:
            return obj.owner_id

    def pickup(self, object_id: str, requester: str) -> ArbitrationResult:
        """
        Grant ``requester`` exclusive ownership.

        Raises:
            ObjectNotFound: no such object.
            ObjectOwnedByAnotherUser: someone else holds it.
        """
        obj, lock = self._lookup(object_id)
        with lock:
            if obj.owner_id is None:
                obj.owner_id = requester
                logger.info(f"Connection {requester} picked up {object_id}")
                return ArbitrationResult(object_id, obj.to_update())
            if obj.owner_id == requester:
                # Re-pickup by the holder changes nothing
                return ArbitrationResult(object_id, obj.to_update(), changed=False)
            raise ObjectOwnedByAnotherUser(object_id, obj.owner_id)

    def move(self, object_id: str, requester: str, x: float, y: float) -> ArbitrationResult:
        """Reposition an object the requester owns."""
        obj, lock = self._lookup(object_id)
        with lock:
            if obj.owner_id != requester:
                raise NotObjectOwner(object_id, requester)
            obj.x = x
            obj.y = y
            return ArbitrationResult(object_id, obj.to_update())

    def drop(self, object_id: str, requester: str, x: float, y: float) -> ArbitrationResult:
        """Set the final position and release ownership."""
        obj, lock = self._lookup(object_id)
        with lock:
            if obj.owner_id != requester:
                raise NotObjectOwner(object_id, requester)
            obj.x = x
            obj.y = y
            obj.owner_id = None
            logger.info(f"Connection {requester} dropped {object_id} at ({x}, {y})")
            return ArbitrationResult(object_id, obj.to_update())

    def release_all(self, requester: str) -> List[ArbitrationResult]:
        """
        Release every object held by ``requester``.

        Ownership is re-checked under each lock, so an object that another
        connection acquired in the meantime is left alone.
        """
        released = []
        for object_id, obj in self.objects.items():
            with self._locks[object_id]:
                if obj.owner_id != requester:
                    continue
                obj.owner_id = None
                released.append(ArbitrationResult(object_id, obj.to_update()))
        if released:
            logger.info(
                f"Released {len(released)} object(s) held by {requester}: "
                f"{', '.join(r.object_id for r in released)}"
            )
        return released

    def reset(self) -> List[Dict[str, Any]]:
        """Clear every owner and return a fresh snapshot."""
        for object_id, obj in self.objects.items():
            with self._locks[object_id]:
                obj.owner_id = None
        logger.info("All object ownership cleared")
        return self.snapshot()

    def snapshot(self) -> List[Dict[str, Any]]:
        result = []
        for object_id, obj in self.objects.items():
            with self._locks[object_id]:
                result.append(obj.to_dict())
        return result

    def summaries(self) -> List[Dict[str, Any]]:
        result = []
        for object_id, obj in self.objects.items():
            with self._locks[object_id]:
                result.append(obj.to_update())
        return result
