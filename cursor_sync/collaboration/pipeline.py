"""
Position broadcast pipeline: validate, throttle, apply and relay cursor moves.
"""
import logging
import time
from typing import Any, Optional

from .events import MessageType, create_cursor_update
from .fanout import FanOut
from .registry import ConnectionRegistry
from .throttle import Throttle
from .validation import CursorMovePayload, parse_payload
from ..core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class PositionBroadcastPipeline:
    """Relays each connection's accepted position updates to everyone else."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        throttle: Throttle,
        fanout: FanOut,
        settings: Optional[Settings] = None
    ):
        self.registry = registry
        self.throttle = throttle
        self.fanout = fanout
        self.settings = settings or get_settings()
        self.stats = {
            "accepted": 0,
            "dropped_invalid": 0,
            "dropped_throttled": 0
        }

    async def submit(self, connection_id: str, data: Any) -> bool:
        """
        Process one cursor_move from ``connection_id``.

        Returns True when the update was accepted and relayed. Malformed
        payloads are checked before the throttle so they never use up the
        connection's slot for the interval.
        """
        user = self.registry.get(connection_id)
        if user is None:
            return False

        payload = parse_payload(CursorMovePayload, data, self.settings)
        if payload is None:
            self.stats["dropped_invalid"] += 1
            logger.debug(f"Dropped invalid cursor_move from {connection_id}: {data!r}")
            return False

        if not self.throttle.allow(connection_id):
            self.stats["dropped_throttled"] += 1
            return False

        user.x = payload.x
        user.y = payload.y
        user.last_update_seq = payload.seq
        user.last_update_at = time.time()
        self.stats["accepted"] += 1

        # Never echoed back: the sender already knows where its cursor is
        await self.fanout.broadcast(
            MessageType.CURSOR_UPDATE,
            create_cursor_update(user, payload.timestamp, payload.seq),
            exclude={connection_id},
            origin=connection_id
        )
        return True

    def forget(self, connection_id: str):
        self.throttle.forget(connection_id)
