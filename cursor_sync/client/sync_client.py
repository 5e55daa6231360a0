"""
Socket.IO client for the cursor sync protocol.

Turns a raw pointer stream into throttled cursor_move reports, mirrors
the shared object table, drives drags through pickup/object_move/drop
and feeds remote cursor deltas into the interpolation engine.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import socketio

from .interpolation import InterpolationEngine, Point, clamp
from ..collaboration.events import MessageType
from ..collaboration.throttle import Throttle
from ..core.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class DragState:
    """The one drag in progress, updated in place between emits."""
    object_id: Optional[str] = None
    offset: Tuple[float, float] = (0.0, 0.0)

    @property
    def active(self) -> bool:
        return self.object_id is not None

    def clear(self):
        self.object_id = None
        self.offset = (0.0, 0.0)


class CursorSyncClient:
    """Client side of the synchronization protocol."""

    def __init__(
        self,
        url: str,
        display_name: Optional[str] = None,
        settings: Optional[Settings] = None,
        sio: Optional[socketio.AsyncClient] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        self.url = url
        self.display_name = display_name
        self.settings = settings or get_settings()
        self.clock = clock or time.monotonic
        self.sio = sio or socketio.AsyncClient(
            reconnection=True,
            reconnection_delay=1,
            reconnection_delay_max=5,
            reconnection_attempts=5
        )

        self.engine = InterpolationEngine(self.settings.interpolation_window_ms / 1000.0, clock=self.clock)
        self.cursor_throttle = Throttle(self.settings.throttle_interval_ms / 1000.0, clock=self.clock)
        self.object_throttle = Throttle(self.settings.object_move_throttle_ms / 1000.0, clock=self.clock)

        self.self_id: Optional[str] = None
        self.color: Optional[str] = None
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.drag = DragState()
        self.last_reject: Optional[Dict[str, Any]] = None
        self._seq = 0

        self._setup_handlers()

    def _setup_handlers(self):
        self.sio.on('connect', self._on_connect)
        self.sio.on('disconnect', self._on_disconnect)
        self.sio.on(MessageType.INIT.value, self._on_init)
        self.sio.on(MessageType.CURSOR_UPDATE.value, self._on_cursor_update)
        self.sio.on(MessageType.USER_JOINED.value, self._on_user_joined)
        self.sio.on(MessageType.USER_LEFT.value, self._on_user_left)
        self.sio.on(MessageType.OBJECT_UPDATE.value, self._on_object_update)
        self.sio.on(MessageType.OBJECT_REJECT.value, self._on_object_reject)

    # Connection lifecycle

    async def connect(self):
        await self.sio.connect(self.url)

    async def disconnect(self):
        await self.sio.disconnect()

    async def _on_connect(self):
        logger.info(f"Connected to {self.url}")
        if self.display_name:
            await self.sio.emit(MessageType.JOIN.value, {"displayName": self.display_name})

    async def _on_disconnect(self, *args):
        # Server state is rebuilt from the next init snapshot
        logger.info(f"Disconnected from {self.url}")
        self.drag.clear()

    # Outbound

    def _bounded(self, value: float) -> float:
        return clamp(value, self.settings.coord_min, self.settings.coord_max)

    async def move_pointer(self, x: float, y: float) -> bool:
        """Report the local pointer; returns False when the throttle dropped it."""
        if not self.cursor_throttle.allow("cursor"):
            return False

        payload = {
            "x": round(self._bounded(x)),
            "y": round(self._bounded(y)),
            "timestamp": int(time.time() * 1000),
            "seq": self._seq
        }
        self._seq += 1
        await self.sio.emit(MessageType.CURSOR_MOVE.value, payload)
        return True

    async def begin_drag(self, object_id: str, offset: Tuple[float, float] = (0.0, 0.0)) -> bool:
        """Ask for ownership of ``object_id`` and start tracking the drag."""
        obj = self.objects.get(object_id)
        if obj is None:
            return False
        if obj.get("ownerId") not in (None, self.self_id):
            logger.debug(f"Cannot drag {object_id}: owned by {obj['ownerId']}")
            return False

        self.drag.object_id = object_id
        self.drag.offset = offset
        await self.sio.emit(MessageType.PICKUP.value, {"objectId": object_id})
        return True

    async def drag_to(self, pointer_x: float, pointer_y: float) -> bool:
        """Move the dragged object under the pointer once ownership is confirmed."""
        if not self.drag.active:
            return False
        obj = self.objects.get(self.drag.object_id)
        if obj is None or obj.get("ownerId") != self.self_id:
            return False

        obj["x"] = self._bounded(pointer_x - self.drag.offset[0])
        obj["y"] = self._bounded(pointer_y - self.drag.offset[1])

        if not self.object_throttle.allow(self.drag.object_id):
            return False
        await self.sio.emit(
            MessageType.OBJECT_MOVE.value,
            {"objectId": self.drag.object_id, "x": obj["x"], "y": obj["y"]}
        )
        return True

    async def end_drag(self) -> bool:
        """Drop the dragged object at its current local position."""
        if not self.drag.active:
            return False
        object_id = self.drag.object_id
        self.drag.clear()
        self.object_throttle.forget(object_id)

        obj = self.objects.get(object_id)
        if obj is None:
            return False
        await self.sio.emit(MessageType.DROP.value, {"objectId": object_id, "x": obj["x"], "y": obj["y"]})
        return True

    # Inbound

    async def _on_init(self, data: Dict[str, Any]):
        if "selfId" in data:
            self.self_id = data["selfId"]
            self.color = data.get("color")
            self.engine.clear()
            for user in data.get("users", []):
                self.engine.seed(user["connectionId"], user["x"], user["y"],
                                 user.get("displayName", ""), user.get("color", ""))
        else:
            # Administrative reset: ownership is gone, including ours
            self.drag.clear()
        self.objects = {obj["objectId"]: dict(obj) for obj in data.get("objects", [])}

    async def _on_cursor_update(self, data: Dict[str, Any]):
        self.engine.on_update(
            data["connectionId"], data["x"], data["y"],
            seq=data.get("seq"),
            display_name=data.get("displayName"),
            color=data.get("color")
        )

    async def _on_user_joined(self, data: Dict[str, Any]):
        connection_id = data["connectionId"]
        if connection_id in self.engine:
            # Re-announcement after a rename keeps the cursor where it is
            self.engine.cursors[connection_id].display_name = data.get("displayName", "")
            return
        self.engine.seed(connection_id, data["x"], data["y"],
                         data.get("displayName", ""), data.get("color", ""))

    async def _on_user_left(self, data: Dict[str, Any]):
        self.engine.remove(data["connectionId"])

    async def _on_object_update(self, data: Dict[str, Any]):
        obj = self.objects.get(data["objectId"])
        if obj is None:
            return
        dragging_this = self.drag.object_id == data["objectId"] and data.get("ownerId") == self.self_id
        if not dragging_this:
            # Own drag echoes would pull the object back to a stale position
            obj["x"] = data["x"]
            obj["y"] = data["y"]
        obj["ownerId"] = data.get("ownerId")

        if self.drag.object_id == data["objectId"] and data.get("ownerId") not in (None, self.self_id):
            self.drag.clear()

    async def _on_object_reject(self, data: Dict[str, Any]):
        logger.warning(f"Object action rejected: {data.get('reason')}")
        self.last_reject = data
        if self.drag.object_id == data.get("objectId"):
            self.drag.clear()

    def render_positions(self, now: Optional[float] = None) -> Dict[str, Point]:
        """Smoothed remote cursor positions for the current frame."""
        return self.engine.tick(now)
