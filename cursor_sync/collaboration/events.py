"""
Protocol message definitions for cursor and object synchronization.
"""
from enum import Enum
from typing import Dict, Any, Iterable, List, Optional

from .models import User


class MessageType(Enum):
    """Every Socket.IO event the protocol knows about."""

    # Client to server
    JOIN = "join"
    CURSOR_MOVE = "cursor_move"
    PICKUP = "pickup"
    OBJECT_MOVE = "object_move"
    DROP = "drop"

    # Server to client
    INIT = "init"
    CURSOR_UPDATE = "cursor_update"
    USER_JOINED = "user_joined"
    USER_LEFT = "user_left"
    OBJECT_UPDATE = "object_update"
    OBJECT_REJECT = "object_reject"


INBOUND_MESSAGES = frozenset({
    MessageType.JOIN,
    MessageType.CURSOR_MOVE,
    MessageType.PICKUP,
    MessageType.OBJECT_MOVE,
    MessageType.DROP,
})


# Payload constructors for server-to-client messages

def create_init_payload(
    self_id: str,
    color: str,
    users: Iterable[User],
    objects: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """Full snapshot sent once to a newly connected client."""
    return {
        "selfId": self_id,
        "color": color,
        "users": [user.to_dict() for user in users],
        "objects": objects
    }


def create_reset_payload(objects: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Object-only snapshot broadcast after an administrative reset."""
    return {"objects": objects}


def create_cursor_update(user: User, timestamp: Any, seq: Any) -> Dict[str, Any]:
    return {
        "connectionId": user.connection_id,
        "x": user.x,
        "y": user.y,
        "displayName": user.display_name,
        "color": user.color,
        "timestamp": timestamp,
        "seq": seq
    }


def create_user_joined(user: User) -> Dict[str, Any]:
    return user.to_dict()


def create_user_left(connection_id: str) -> Dict[str, Any]:
    return {"connectionId": connection_id}


def create_object_reject(object_id: Optional[str], reason: str) -> Dict[str, Any]:
    return {"objectId": object_id, "reason": reason}
