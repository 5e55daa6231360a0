"""
Real-time state synchronization for shared cursors and movable objects.

This module provides:
- Payload validation for every client message
- A connection registry with presence join/leave deltas
- Exclusive ownership arbitration for shared objects
- A throttled cursor position broadcast pipeline
- The Socket.IO server that wires them together
"""

from .events import MessageType
from .fanout import FanOut
from .models import SharedObject, User
from .ownership import ArbitrationResult, OwnershipArbiter
from .pipeline import PositionBroadcastPipeline
from .presence import PresenceManager
from .registry import ConnectionRegistry
from .server import CursorSyncServer, ServerContext
from .throttle import Throttle
from .validation import validate_position_update

__all__ = [
    "MessageType",
    "FanOut",
    "SharedObject",
    "User",
    "ArbitrationResult",
    "OwnershipArbiter",
    "PositionBroadcastPipeline",
    "PresenceManager",
    "ConnectionRegistry",
    "CursorSyncServer",
    "ServerContext",
    "Throttle",
    "validate_position_update",
]
