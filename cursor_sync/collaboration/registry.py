"""
Connection registry: one live user record per active connection.
"""
import logging
import random
from typing import Dict, List, Optional, Sequence

from .models import User, USER_COLORS

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Holds the User record of every connected client, keyed by connection id."""

    def __init__(self, colors: Sequence[str] = USER_COLORS, rng: Optional[random.Random] = None):
        self.users: Dict[str, User] = {}
        self.colors = list(colors)
        self._rng = rng or random.Random()

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self.users

    def __len__(self) -> int:
        return len(self.users)

    def _pick_color(self) -> str:
        return self._rng.choice(self.colors)

    def add(self, connection_id: str) -> User:
        """Create the record for a new connection at position (0, 0)."""
        if connection_id in self.users:
            raise ValueError(f"Connection {connection_id} is already registered")

        user = User(
            connection_id=connection_id,
            display_name=f"User {connection_id[:5]}",
            color=self._pick_color()
        )
        self.users[connection_id] = user
        logger.debug(f"Registered connection {connection_id} with color {user.color}")
        return user

    def remove(self, connection_id: str) -> Optional[User]:
        """Drop a connection's record; returns it, or None if it was not registered."""
        return self.users.pop(connection_id, None)

    def get(self, connection_id: str) -> Optional[User]:
        return self.users.get(connection_id)

    def rename(self, connection_id: str, display_name: str) -> Optional[User]:
        """Apply a display name in place."""
        user = self.users.get(connection_id)
        if user:
            user.display_name = display_name
        return user

    def connection_ids(self) -> List[str]:
        return list(self.users)

    def others(self, connection_id: str) -> List[User]:
        """Every live user except ``connection_id``."""
        return [user for cid, user in self.users.items() if cid != connection_id]
