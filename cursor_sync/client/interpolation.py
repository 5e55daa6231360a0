"""
Client-side smoothing of remote cursor positions.

Cursor deltas arrive roughly every throttle interval while the display
refreshes much faster. Each remote cursor blends from where it was drawn
when the latest delta arrived towards the delivered position, over a fixed
window. Blending from the drawn position rather than the previous raw
target keeps a cursor from jumping when deltas outpace the window.
"""
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

Point = Tuple[float, float]


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation with ``t`` clamped to [0, 1]."""
    t = clamp(t, 0.0, 1.0)
    if t == 1.0:
        return end
    # Rounding must not carry the result past either endpoint
    return clamp(start + (end - start) * t, min(start, end), max(start, end))


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


@dataclass
class RemoteCursorView:
    """Display-side projection of one remote user's cursor. Not authoritative."""
    connection_id: str
    prior_position: Point
    target_position: Point
    target_received_at: float
    display_name: str = ""
    color: str = ""
    last_seq: Optional[float] = None

    def progress(self, now: float, window: float) -> float:
        if window <= 0:
            return 1.0
        return clamp((now - self.target_received_at) / window, 0.0, 1.0)

    def position_at(self, now: float, window: float) -> Point:
        t = self.progress(now, window)
        return (
            lerp(self.prior_position[0], self.target_position[0], t),
            lerp(self.prior_position[1], self.target_position[1], t),
        )


class InterpolationEngine:
    """Tracks remote cursor targets and yields smoothed positions per render tick.

    Purely a consumer of the broadcast stream: it never sends anything.
    Times are in seconds from ``clock`` (monotonic by default).
    """

    def __init__(self, window: float = 0.05, clock: Optional[Callable[[], float]] = None):
        if window < 0:
            raise ValueError("window must be non-negative")
        self.window = window
        self.clock = clock or time.monotonic
        self.cursors: Dict[str, RemoteCursorView] = {}

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self.cursors

    def __len__(self) -> int:
        return len(self.cursors)

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now

    def seed(
        self,
        connection_id: str,
        x: float,
        y: float,
        display_name: str = "",
        color: str = "",
        now: Optional[float] = None
    ) -> RemoteCursorView:
        """Place a cursor without interpolating (snapshot or join)."""
        view = RemoteCursorView(
            connection_id=connection_id,
            prior_position=(x, y),
            target_position=(x, y),
            target_received_at=self._now(now),
            display_name=display_name,
            color=color
        )
        self.cursors[connection_id] = view
        return view

    def on_update(
        self,
        connection_id: str,
        x: float,
        y: float,
        seq: Optional[float] = None,
        display_name: Optional[str] = None,
        color: Optional[str] = None,
        now: Optional[float] = None
    ) -> bool:
        """
        Apply a position delta.

        Returns False when the delta is older than one already applied for
        this cursor (out-of-order delivery) and was discarded.
        """
        now = self._now(now)
        view = self.cursors.get(connection_id)

        if view is None:
            view = self.seed(connection_id, x, y, display_name or "", color or "", now=now)
            view.last_seq = seq
            return True

        if seq is not None and view.last_seq is not None and seq <= view.last_seq:
            return False

        view.prior_position = view.position_at(now, self.window)
        view.target_position = (x, y)
        view.target_received_at = now
        if seq is not None:
            view.last_seq = seq
        if display_name:
            view.display_name = display_name
        if color:
            view.color = color
        return True

    def remove(self, connection_id: str) -> bool:
        return self.cursors.pop(connection_id, None) is not None

    def clear(self):
        self.cursors.clear()

    def position(self, connection_id: str, now: Optional[float] = None) -> Optional[Point]:
        view = self.cursors.get(connection_id)
        if view is None:
            return None
        return view.position_at(self._now(now), self.window)

    def tick(self, now: Optional[float] = None) -> Dict[str, Point]:
        """Displayed position of every remote cursor, for the rendering sink."""
        now = self._now(now)
        return {cid: view.position_at(now, self.window) for cid, view in self.cursors.items()}
