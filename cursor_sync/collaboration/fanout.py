"""
Fan-out of protocol messages to registered connections.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from .events import MessageType
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """The subset of ``socketio.AsyncServer`` the fan-out needs."""

    async def emit(self, event: str, data: Any = None, to: str = None, **kwargs) -> None:
        ...


class FanOut:
    """Sends messages to one connection or to all of them minus an exclusion set.

    Sends are fire-and-forget: a failing recipient is logged and skipped,
    nothing is retried and no acknowledgement is awaited.
    """

    def __init__(self, transport: Transport, registry: ConnectionRegistry):
        self.transport = transport
        self.registry = registry
        self.stats = {
            "messages_sent": 0,
            "send_failures": 0
        }

    async def send(self, connection_id: str, message_type: MessageType, payload: Dict[str, Any]) -> bool:
        """Unicast to a single connection."""
        try:
            await self.transport.emit(message_type.value, payload, to=connection_id)
        except Exception as e:
            self.stats["send_failures"] += 1
            logger.warning(f"Error sending {message_type.value} to {connection_id}: {e}")
            return False
        self.stats["messages_sent"] += 1
        return True

    async def broadcast(
        self,
        message_type: MessageType,
        payload: Dict[str, Any],
        exclude: Iterable[str] = (),
        origin: Optional[str] = None
    ) -> int:
        """
        Send to every registered connection not in ``exclude``; returns the delivery count.

        When ``origin`` is given the broadcast stops as soon as that connection
        is no longer registered, so nothing it caused reaches a recipient after
        its user_left.
        """
        excluded = frozenset(exclude)
        recipients = [cid for cid in self.registry.connection_ids() if cid not in excluded]

        sent_count = 0
        for connection_id in recipients:
            if origin is not None and origin not in self.registry:
                break
            if await self.send(connection_id, message_type, payload):
                sent_count += 1
        return sent_count
