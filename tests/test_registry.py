"""
Tests for the connection registry and fan-out.
"""

import random

import pytest

from cursor_sync.collaboration.events import MessageType
from cursor_sync.collaboration.fanout import FanOut
from cursor_sync.collaboration.models import USER_COLORS
from cursor_sync.collaboration.registry import ConnectionRegistry


@pytest.fixture
def registry():
    return ConnectionRegistry(rng=random.Random(7))


class TestConnectionRegistry:
    """Test suite for ConnectionRegistry."""

    def test_add_creates_user_at_origin(self, registry):
        user = registry.add("abc123xyz")

        assert (user.x, user.y) == (0, 0)
        assert user.display_name == "User abc12"
        assert user.color in USER_COLORS
        assert "abc123xyz" in registry

    def test_duplicate_add_is_rejected(self, registry):
        registry.add("A")

        with pytest.raises(ValueError):
            registry.add("A")

    def test_remove_returns_record_once(self, registry):
        registry.add("A")

        assert registry.remove("A").connection_id == "A"
        assert registry.remove("A") is None
        assert len(registry) == 0

    def test_rename_unknown_connection(self, registry):
        assert registry.rename("ghost", "Ada") is None

    def test_others_excludes_the_asker(self, registry):
        for cid in ("A", "B", "C"):
            registry.add(cid)

        assert [u.connection_id for u in registry.others("B")] == ["A", "C"]


class TestFanOut:
    """Test suite for FanOut."""

    async def test_broadcast_honours_exclusions(self, registry, fake_sio):
        for cid in ("A", "B", "C"):
            registry.add(cid)
        fanout = FanOut(fake_sio, registry)

        delivered = await fanout.broadcast(MessageType.USER_LEFT, {"connectionId": "Z"}, exclude={"B"})

        assert delivered == 2
        assert [to for _, _, to in fake_sio.sent] == ["A", "C"]

    async def test_failed_send_is_counted_and_skipped(self, registry, fake_sio):
        registry.add("A")
        registry.add("B")
        fake_sio.failing.add("A")
        fanout = FanOut(fake_sio, registry)

        delivered = await fanout.broadcast(MessageType.OBJECT_UPDATE, {"objectId": "obj-1"})

        assert delivered == 1
        assert fanout.stats == {"messages_sent": 1, "send_failures": 1}
        assert fake_sio.received("B", "object_update") == [{"objectId": "obj-1"}]

    async def test_send_to_single_connection(self, registry, fake_sio):
        fanout = FanOut(fake_sio, registry)

        assert await fanout.send("A", MessageType.OBJECT_REJECT, {"reason": "not found"}) is True
        assert fake_sio.sent == [("object_reject", {"reason": "not found"}, "A")]

    async def test_broadcast_stops_once_origin_leaves(self, registry, fake_sio):
        for cid in ("A", "B", "C"):
            registry.add(cid)
        fanout = FanOut(fake_sio, registry)
        original_emit = fake_sio.emit

        async def emit_then_drop_origin(event, data=None, to=None, **kwargs):
            await original_emit(event, data, to=to, **kwargs)
            registry.remove("A")

        fake_sio.emit = emit_then_drop_origin

        delivered = await fanout.broadcast(
            MessageType.CURSOR_UPDATE, {"connectionId": "A"}, exclude={"A"}, origin="A"
        )

        assert delivered == 1
        assert [to for _, _, to in fake_sio.sent] == ["B"]
