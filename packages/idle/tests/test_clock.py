"""Tests for clock advancement, holds and TickContext generation."""

import pytest
from idle.clock import Clock
from idle.types import TickContext


def test_clock_initialization():
    clock = Clock(tps=20)
    assert clock.tps == 20
    assert clock.tick_number == 0
    assert abs(clock.dt - 0.05) < 1e-9


def test_clock_rejects_non_positive_tps():
    with pytest.raises(ValueError):
        Clock(tps=0)


def test_advance_returns_new_tick_number():
    clock = Clock(tps=20)
    assert clock.advance() == 1
    assert clock.advance() == 2
    assert clock.tick_number == 2


def test_context_returns_correct_values():
    clock = Clock(tps=20)
    clock.advance()

    stop_called = []
    ctx = clock.context(lambda: stop_called.append(True))

    assert isinstance(ctx, TickContext)
    assert ctx.tick_number == 1
    assert abs(ctx.elapsed - 0.05) < 1e-9
    ctx.request_stop()
    assert stop_called == [True]


def test_context_is_frozen():
    clock = Clock(tps=20)
    ctx = clock.context(lambda: None)
    with pytest.raises(AttributeError):
        ctx.tick_number = 99  # type: ignore[misc]


def test_elapsed_tracks_ticks():
    clock = Clock(tps=10)
    for _ in range(25):
        clock.advance()
    assert abs(clock.elapsed - 2.5) < 1e-9


def test_hold_and_release():
    """Holds are keyed by reason; the clock stays held until all are released."""
    clock = Clock(tps=20)
    assert clock.held is False

    clock.hold("dialogue:intro")
    clock.hold("menu")
    assert clock.held is True
    assert clock.holds() == frozenset({"dialogue:intro", "menu"})

    clock.release("menu")
    assert clock.held is True
    clock.release("dialogue:intro")
    assert clock.held is False


def test_release_unknown_reason_is_noop():
    clock = Clock(tps=20)
    clock.release("never-held")
    assert clock.held is False


def test_release_all():
    clock = Clock(tps=20)
    clock.hold("a")
    clock.hold("b")
    clock.release_all()
    assert clock.held is False


def test_reset_sets_tick_number():
    clock = Clock(tps=20)
    for _ in range(10):
        clock.advance()
    clock.reset(3)
    assert clock.tick_number == 3
    clock.reset()
    assert clock.tick_number == 0
