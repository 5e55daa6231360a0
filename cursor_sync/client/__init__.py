"""
Client side of the synchronization protocol.
"""

from .interpolation import InterpolationEngine, RemoteCursorView, clamp, distance, lerp
from .sync_client import CursorSyncClient, DragState

__all__ = [
    "InterpolationEngine",
    "RemoteCursorView",
    "clamp",
    "distance",
    "lerp",
    "CursorSyncClient",
    "DragState",
]
