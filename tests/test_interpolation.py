"""
Tests for client-side cursor interpolation.
"""

import pytest

from cursor_sync.client.interpolation import (
    InterpolationEngine,
    RemoteCursorView,
    clamp,
    distance,
    lerp,
)


@pytest.fixture
def engine(clock):
    return InterpolationEngine(window=0.05, clock=clock)


class TestMath:
    """Test suite for the interpolation helpers."""

    def test_clamp(self):
        assert clamp(5, 0, 10) == 5
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10

    @pytest.mark.parametrize("t, expected", [(0, 100), (0.25, 125), (0.5, 150), (1, 200), (-1, 100), (2, 200)])
    def test_lerp(self, t, expected):
        assert lerp(100, 200, t) == pytest.approx(expected)

    def test_lerp_hits_target_exactly(self):
        assert lerp(0.1, 0.7, 1.0) == 0.7

    def test_distance(self):
        assert distance(0, 0, 3, 4) == 5


class TestInterpolationEngine:
    """Test suite for InterpolationEngine."""

    def test_midway_through_window(self, engine, clock):
        engine.seed("B", 100, 100)
        engine.on_update("B", 150, 100, seq=1)

        clock.advance(0.025)
        x, y = engine.position("B")
        assert x == pytest.approx(125)
        assert y == pytest.approx(100)

    def test_rest_at_target_after_window(self, engine, clock):
        engine.seed("B", 100, 100)
        engine.on_update("B", 150, 100, seq=1)

        clock.advance(0.051)
        assert engine.position("B") == (150, 100)

        clock.advance(1.0)
        assert engine.position("B") == (150, 100)

    def test_zero_window_jumps_to_target(self, clock):
        engine = InterpolationEngine(window=0, clock=clock)
        engine.seed("B", 0, 0)

        engine.on_update("B", 50, 60, seq=1)

        assert engine.position("B") == (50, 60)

    def test_displayed_position_stays_between_prior_and_target(self, engine, clock):
        engine.seed("B", 0, 1000)
        engine.on_update("B", 333.3, 0.7, seq=1)
        view = engine.cursors["B"]

        for step in range(0, 61):
            x, y = view.position_at(clock() + step * 0.001, engine.window)
            assert min(0, 333.3) <= x <= max(0, 333.3)
            assert min(1000, 0.7) <= y <= max(1000, 0.7)

        assert view.position_at(clock() + 0.06, engine.window) == (333.3, 0.7)

    def test_new_delta_blends_from_displayed_position(self, engine, clock):
        engine.seed("B", 0, 0)
        engine.on_update("B", 100, 0, seq=1)
        clock.advance(0.025)

        engine.on_update("B", 200, 0, seq=2)

        # Drawn at 50 when the second delta arrived, so no jump to 100
        assert engine.cursors["B"].prior_position == pytest.approx((50, 0))
        assert engine.position("B") == pytest.approx((50, 0))
        clock.advance(0.025)
        assert engine.position("B") == pytest.approx((125, 0))

    def test_stale_delta_is_discarded(self, engine, clock):
        engine.seed("B", 0, 0)
        assert engine.on_update("B", 100, 0, seq=5) is True

        assert engine.on_update("B", 10, 10, seq=4) is False
        assert engine.on_update("B", 10, 10, seq=5) is False
        assert engine.cursors["B"].target_position == (100, 0)

    def test_first_delta_for_unknown_cursor_seeds_it(self, engine):
        assert engine.on_update("C", 40, 50, seq=3, display_name="Cy", color="#FFEAA7") is True

        view = engine.cursors["C"]
        assert engine.position("C") == (40, 50)
        assert (view.display_name, view.color, view.last_seq) == ("Cy", "#FFEAA7", 3)

    def test_update_refreshes_identity(self, engine):
        engine.seed("B", 0, 0, display_name="old", color="#000000")

        engine.on_update("B", 1, 1, seq=1, display_name="new", color="#FFFFFF")

        assert (engine.cursors["B"].display_name, engine.cursors["B"].color) == ("new", "#FFFFFF")

    def test_remove_and_clear(self, engine):
        engine.seed("B", 0, 0)
        engine.seed("C", 0, 0)

        assert engine.remove("B") is True
        assert engine.remove("B") is False
        assert "B" not in engine and len(engine) == 1
        assert engine.position("B") is None

        engine.clear()
        assert len(engine) == 0

    def test_tick_reports_every_cursor(self, engine, clock):
        engine.seed("B", 10, 20)
        engine.seed("C", 30, 40)

        assert engine.tick() == {"B": (10, 20), "C": (30, 40)}

    def test_progress_is_clamped(self):
        view = RemoteCursorView("B", (0, 0), (10, 10), target_received_at=5.0)

        assert view.progress(4.0, 0.05) == 0.0
        assert view.progress(6.0, 0.05) == 1.0
        assert view.progress(5.0, 0) == 1.0

    def test_negative_window_is_rejected(self):
        with pytest.raises(ValueError):
            InterpolationEngine(window=-0.1)
