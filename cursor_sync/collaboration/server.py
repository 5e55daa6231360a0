"""
Socket.IO server for cursor presence and shared-object manipulation.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

import socketio

from .events import (
    INBOUND_MESSAGES,
    MessageType,
    create_object_reject,
    create_reset_payload,
)
from .fanout import FanOut, Transport
from .models import SharedObject
from .ownership import OwnershipArbiter
from .pipeline import PositionBroadcastPipeline
from .presence import PresenceManager
from .registry import ConnectionRegistry
from .throttle import Throttle
from .validation import DropPayload, ObjectMovePayload, PickupPayload, parse_payload
from ..core.config import Settings, get_settings
from ..core.error_handlers import ArbitrationError, UnknownConnection

logger = logging.getLogger(__name__)


@dataclass
class ServerContext:
    """All mutable server state, passed explicitly into every handler."""
    registry: ConnectionRegistry
    arbiter: OwnershipArbiter
    throttle: Throttle
    fanout: FanOut
    pipeline: PositionBroadcastPipeline
    presence: PresenceManager
    settings: Settings

    @classmethod
    def create(
        cls,
        transport: Transport,
        settings: Optional[Settings] = None,
        objects: Optional[Iterable[SharedObject]] = None,
        clock: Optional[Callable[[], float]] = None
    ) -> "ServerContext":
        settings = settings or get_settings()
        registry = ConnectionRegistry()
        arbiter = OwnershipArbiter(objects)
        throttle = Throttle(settings.throttle_interval_ms / 1000.0, clock=clock)
        fanout = FanOut(transport, registry)
        pipeline = PositionBroadcastPipeline(registry, throttle, fanout, settings)
        presence = PresenceManager(registry, arbiter, fanout, pipeline)
        return cls(registry, arbiter, throttle, fanout, pipeline, presence, settings)


Handler = Callable[[ServerContext, str, Any], Awaitable[None]]


# Inbound message handlers

async def handle_join(ctx: ServerContext, sid: str, data: Any):
    await ctx.presence.join(sid, data)


async def handle_cursor_move(ctx: ServerContext, sid: str, data: Any):
    await ctx.pipeline.submit(sid, data)


async def handle_pickup(ctx: ServerContext, sid: str, data: Any):
    """Arbitrate a pickup; rejections go back to the requester only."""
    payload = parse_payload(PickupPayload, data, ctx.settings)
    if payload is None:
        logger.debug(f"Dropped invalid pickup from {sid}: {data!r}")
        return

    try:
        if sid not in ctx.registry:
            raise UnknownConnection(payload.object_id, sid)
        result = ctx.arbiter.pickup(payload.object_id, sid)
    except ArbitrationError as e:
        logger.debug(f"Rejected pickup of {e.object_id} by {sid}: {e.reason}")
        await ctx.fanout.send(sid, MessageType.OBJECT_REJECT, create_object_reject(e.object_id, e.reason))
        return

    if result.changed:
        await ctx.fanout.broadcast(MessageType.OBJECT_UPDATE, result.update, origin=sid)


async def handle_object_move(ctx: ServerContext, sid: str, data: Any):
    """Relay a drag step from the owner. Not rate limited on the server."""
    payload = parse_payload(ObjectMovePayload, data, ctx.settings)
    if payload is None:
        logger.debug(f"Dropped invalid object_move from {sid}: {data!r}")
        return

    try:
        result = ctx.arbiter.move(payload.object_id, sid, payload.x, payload.y)
    except ArbitrationError as e:
        # Stale or racing message, e.g. crossing a disconnect-triggered release
        logger.debug(f"Ignored object_move of {e.object_id} from {sid}: {e.reason}")
        return

    await ctx.fanout.broadcast(MessageType.OBJECT_UPDATE, result.update, origin=sid)


async def handle_drop(ctx: ServerContext, sid: str, data: Any):
    payload = parse_payload(DropPayload, data, ctx.settings)
    if payload is None:
        logger.debug(f"Dropped invalid drop from {sid}: {data!r}")
        return

    try:
        result = ctx.arbiter.drop(payload.object_id, sid, payload.x, payload.y)
    except ArbitrationError as e:
        logger.debug(f"Ignored drop of {e.object_id} from {sid}: {e.reason}")
        return

    await ctx.fanout.broadcast(MessageType.OBJECT_UPDATE, result.update, origin=sid)


HANDLERS: Dict[MessageType, Handler] = {
    MessageType.JOIN: handle_join,
    MessageType.CURSOR_MOVE: handle_cursor_move,
    MessageType.PICKUP: handle_pickup,
    MessageType.OBJECT_MOVE: handle_object_move,
    MessageType.DROP: handle_drop,
}


def _check_handlers(handlers: Dict[MessageType, Handler]):
    missing = INBOUND_MESSAGES - handlers.keys()
    extra = handlers.keys() - INBOUND_MESSAGES
    if missing or extra:
        raise RuntimeError(
            f"Handler table mismatch: missing={sorted(m.value for m in missing)}, "
            f"unexpected={sorted(m.value for m in extra)}"
        )


_check_handlers(HANDLERS)


class CursorSyncServer:
    """Binds the synchronization core to a python-socketio server."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sio: Optional[socketio.AsyncServer] = None,
        objects: Optional[Iterable[SharedObject]] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        self.settings = settings or get_settings()
        self.sio = sio or socketio.AsyncServer(
            async_mode='asgi',
            cors_allowed_origins=self.settings.allowed_origins,
            logger=False,
            engineio_logger=False
        )
        self.context = ServerContext.create(self.sio, self.settings, objects=objects, clock=clock)
        self.stats = {
            "total_events_processed": 0,
            "handler_errors": 0
        }
        self._setup_handlers()

    def _setup_handlers(self):
        """Register lifecycle handlers and one handler per inbound message type."""
        self.sio.on('connect', self.on_connect)
        self.sio.on('disconnect', self.on_disconnect)
        for message_type in HANDLERS:
            self.sio.on(message_type.value, self._bind(message_type))

    def _bind(self, message_type: MessageType):
        async def _handler(sid, data=None):
            await self.dispatch(message_type, sid, data)
        _handler.__name__ = f"on_{message_type.value}"
        return _handler

    async def on_connect(self, sid: str, environ: Dict[str, Any] = None, auth: Any = None):
        """Handle client connection."""
        try:
            await self.context.presence.connect(sid)
        except Exception:
            # A refused connection must not leave a record behind
            self.context.registry.remove(sid)
            self.context.pipeline.forget(sid)
            logger.exception(f"Connection setup failed for {sid}")
            return False

    async def on_disconnect(self, sid: str, reason: Any = None):
        """Handle client disconnection."""
        try:
            await self.context.presence.disconnect(sid)
        except Exception:
            self.stats["handler_errors"] += 1
            logger.exception(f"Disconnect cleanup failed for {sid}")

    async def dispatch(self, message_type: MessageType, sid: str, data: Any):
        """Route an inbound message to its handler."""
        handler = HANDLERS[message_type]
        try:
            await handler(self.context, sid, data)
            self.stats["total_events_processed"] += 1
        except Exception:
            self.stats["handler_errors"] += 1
            logger.exception(f"Error handling {message_type.value} from {sid}")

    async def reset(self) -> Dict[str, Any]:
        """Clear all ownership and push a fresh object snapshot to everyone."""
        objects = self.context.arbiter.reset()
        await self.context.fanout.broadcast(MessageType.INIT, create_reset_payload(objects))
        return {"success": True, "message": "Objects reset"}

    def get_stats(self) -> Dict[str, Any]:
        """Read-only summary of connections and objects."""
        registry = self.context.registry
        return {
            "connectedUsers": len(registry),
            "totalObjects": len(self.context.arbiter),
            "users": [user.summary() for user in registry.users.values()],
            "objects": self.context.arbiter.summaries()
        }
