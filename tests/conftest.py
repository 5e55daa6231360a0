"""
Pytest configuration and shared fixtures for the cursor sync tests.
"""

import asyncio

import pytest
from typing import Any, Callable, Dict, List, Optional, Tuple

from cursor_sync.collaboration.server import CursorSyncServer
from cursor_sync.core.config import Settings


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeSocketServer:
    """Records handler registrations and emits in place of socketio.AsyncServer."""

    def __init__(self):
        self.handlers: Dict[str, Callable] = {}
        self.sent: List[Tuple[str, Any, Optional[str]]] = []
        self.failing: set = set()
        self.yield_on_emit = False

    def on(self, event: str, handler: Callable = None, namespace: str = None):
        self.handlers[event] = handler

    async def emit(self, event: str, data: Any = None, to: str = None, **kwargs):
        if self.yield_on_emit:
            # Let other handlers run mid-send, as a real socket write can
            await asyncio.sleep(0)
        if to in self.failing:
            raise ConnectionError(f"{to} is unreachable")
        self.sent.append((event, data, to))

    async def trigger(self, event: str, sid: str, *args):
        return await self.handlers[event](sid, *args)

    def received(self, sid: str, event: Optional[str] = None) -> List[Any]:
        """Payloads delivered to ``sid``, optionally filtered by event name."""
        return [data for name, data, to in self.sent if to == sid and (event is None or name == event)]

    def events_for(self, sid: str) -> List[str]:
        return [name for name, _, to in self.sent if to == sid]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def settings():
    """Settings with the protocol defaults pinned."""
    return Settings(
        throttle_interval_ms=50,
        interpolation_window_ms=50,
        object_move_throttle_ms=30,
        coord_min=0,
        coord_max=10000,
        environment="testing"
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sio():
    return FakeSocketServer()


@pytest.fixture
def sync_server(settings, fake_sio, clock):
    """Server wired to the fake transport and clock."""
    return CursorSyncServer(settings=settings, sio=fake_sio, clock=clock)


@pytest.fixture
async def two_users(sync_server, fake_sio):
    """Connections A and B, both connected, with the handshake traffic cleared."""
    await fake_sio.trigger("connect", "A", {})
    await fake_sio.trigger("connect", "B", {})
    fake_sio.clear()
    return "A", "B"


@pytest.fixture
def cursor_move():
    """Factory for well-formed cursor_move payloads."""
    def _make(x: float = 100, y: float = 200, seq: int = 1, timestamp: int = 1700000000000) -> Dict[str, Any]:
        return {"x": x, "y": y, "timestamp": timestamp, "seq": seq}
    return _make
