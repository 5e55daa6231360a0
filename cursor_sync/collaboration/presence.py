"""
Presence lifecycle: snapshot on connect, join/leave deltas, release on disconnect.
"""
import logging
from typing import Any, Optional

from .events import (
    MessageType,
    create_init_payload,
    create_user_joined,
    create_user_left,
)
from .fanout import FanOut
from .models import User
from .ownership import OwnershipArbiter
from .pipeline import PositionBroadcastPipeline
from .registry import ConnectionRegistry
from .validation import JoinPayload, parse_payload

logger = logging.getLogger(__name__)


class PresenceManager:
    """Creates and destroys user records and tells everyone else about it."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        arbiter: OwnershipArbiter,
        fanout: FanOut,
        pipeline: PositionBroadcastPipeline
    ):
        self.registry = registry
        self.arbiter = arbiter
        self.fanout = fanout
        self.pipeline = pipeline
        self.stats = {
            "total_connections": 0,
            "disconnections": 0
        }

    async def connect(self, connection_id: str) -> User:
        """
        Register a connection, send it the full snapshot, then announce it.

        The init snapshot is the only full-state transfer; everything after
        it is a delta.
        """
        user = self.registry.add(connection_id)
        self.stats["total_connections"] += 1

        snapshot = create_init_payload(
            self_id=connection_id,
            color=user.color,
            users=self.registry.others(connection_id),
            objects=self.arbiter.snapshot()
        )
        await self.fanout.send(connection_id, MessageType.INIT, snapshot)
        if connection_id not in self.registry:
            # Disconnected while the snapshot was in flight; user_left already went out
            logger.debug(f"Connection {connection_id} left before it was announced")
            return user

        await self.fanout.broadcast(
            MessageType.USER_JOINED, create_user_joined(user),
            exclude={connection_id}, origin=connection_id
        )

        logger.info(f"[CONNECT] {user.display_name} ({connection_id}) joined with color {user.color}")
        return user

    async def join(self, connection_id: str, data: Any) -> Optional[User]:
        """Apply a display name to an existing record and re-announce it."""
        payload = parse_payload(JoinPayload, data)
        if payload is None:
            logger.debug(f"Dropped invalid join from {connection_id}: {data!r}")
            return None

        user = self.registry.rename(connection_id, payload.display_name)
        if user is None:
            return None

        await self.fanout.broadcast(
            MessageType.USER_JOINED, create_user_joined(user),
            exclude={connection_id}, origin=connection_id
        )
        logger.info(f"[JOIN] {connection_id} is now {user.display_name}")
        return user

    async def disconnect(self, connection_id: str) -> Optional[User]:
        """
        Tear down a connection.

        The record is removed and its objects released before anything is
        awaited, so no later message from this connection is honoured and
        no stale move/drop can reclaim an object. Each release is broadcast,
        followed by user_left.
        """
        user = self.registry.remove(connection_id)
        self.pipeline.forget(connection_id)
        if user is None:
            return None
        self.stats["disconnections"] += 1

        try:
            try:
                released = self.arbiter.release_all(connection_id)
            except Exception:
                logger.exception(f"Failed to release objects held by {connection_id}")
                raise

            for result in released:
                await self.fanout.broadcast(MessageType.OBJECT_UPDATE, result.update)
        finally:
            await self.fanout.broadcast(MessageType.USER_LEFT, create_user_left(connection_id))

        logger.info(f"[DISCONNECT] {user.display_name} ({connection_id}) left")
        return user
