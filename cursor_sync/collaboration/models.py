"""
Authoritative server-side records for connected users and shared objects.
"""
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List


@dataclass
class User:
    """Live user record, one per active connection."""
    connection_id: str
    display_name: str
    color: str
    x: float = 0
    y: float = 0
    last_update_seq: Optional[int] = None
    last_update_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Presence shape used by init and user_joined."""
        return {
            'connectionId': self.connection_id,
            'displayName': self.display_name,
            'color': self.color,
            'x': self.x,
            'y': self.y
        }

    def summary(self) -> Dict[str, Any]:
        return {
            'connectionId': self.connection_id,
            'displayName': self.display_name,
            'x': self.x,
            'y': self.y
        }


@dataclass
class SharedObject:
    """A movable object with at most one owning connection."""
    object_id: str
    x: float
    y: float
    width: float
    height: float
    color: str
    owner_id: Optional[str] = None

    def to_update(self) -> Dict[str, Any]:
        """Delta shape broadcast as object_update."""
        return {
            'objectId': self.object_id,
            'x': self.x,
            'y': self.y,
            'ownerId': self.owner_id
        }

    def to_dict(self) -> Dict[str, Any]:
        """Full shape used in init snapshots."""
        return {
            **self.to_update(),
            'width': self.width,
            'height': self.height,
            'color': self.color
        }


USER_COLORS = [
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#FFA07A",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E2",
    "#F8B88B",
    "#A9DFBF",
]


def default_objects() -> List[SharedObject]:
    """The fixed object set created at process start."""
    return [
        SharedObject(object_id="obj-1", x=200, y=200, width=40, height=40, color="#FF6B6B"),
        SharedObject(object_id="obj-2", x=500, y=300, width=40, height=40, color="#4ECDC4"),
        SharedObject(object_id="obj-3", x=800, y=150, width=40, height=40, color="#45B7D1"),
    ]
