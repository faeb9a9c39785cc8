"""Tests for idle_phase.machine - PhaseMachine."""
from __future__ import annotations

import json
from decimal import Decimal

import pytest

from idle.types import SnapshotError
from idle_condition import (
    Always,
    FlagCond,
    Never,
    PhaseCond,
    ResourceCond,
    SnapshotContext,
    TimeCond,
)
from idle_phase import PhaseDef, PhaseMachine


def _pixels(n: int, **kwargs) -> SnapshotContext:
    return SnapshotContext(resources={"pixels": Decimal(n)}, **kwargs)


def _phases(auto: bool = False) -> list[PhaseDef]:
    return [
        PhaseDef(
            1,
            "awakening",
            unlock=Always(),
            transition=ResourceCond("pixels", 64),
            auto_transition=auto,
        ),
        PhaseDef(
            2,
            "canvas",
            unlock=PhaseCond(1, completed=True),
            transition=ResourceCond("pixels", 1000),
            auto_transition=auto,
        ),
        PhaseDef(
            3,
            "gallery",
            unlock=PhaseCond(2, completed=True),
            transition=ResourceCond("pixels", 5000),
            auto_transition=auto,
        ),
        PhaseDef(4, "end", unlock=PhaseCond(3, completed=True), transition=Never()),
    ]


class TestConstruction:
    def test_initial_state(self) -> None:
        m = PhaseMachine(_phases())
        assert m.current == 1
        assert m.unlocked == (1,)
        assert not m.ready
        assert not m.transitioning
        assert m.progress_of(1).times_entered == 1

    def test_numbering_must_be_contiguous(self) -> None:
        with pytest.raises(ValueError):
            PhaseMachine([PhaseDef(1, "a"), PhaseDef(3, "c")])
        with pytest.raises(ValueError):
            PhaseMachine([PhaseDef(2, "b")])
        with pytest.raises(ValueError):
            PhaseMachine([PhaseDef(1, "a"), PhaseDef(1, "b")])
        with pytest.raises(ValueError):
            PhaseMachine([])

    def test_definition_order_does_not_matter(self) -> None:
        m = PhaseMachine(reversed(_phases()))
        assert [p.number for p in m.phases()] == [1, 2, 3, 4]

    def test_phase_def_validation(self) -> None:
        with pytest.raises(ValueError):
            PhaseDef(0, "zero")
        with pytest.raises(TypeError):
            PhaseDef(1, "a", unlock="always")  # type: ignore[arg-type]


class TestManualTransition:
    def test_pixels_scenario(self) -> None:
        """64 pixels readies phase 1 without advancing; confirm enters phase 2."""
        m = PhaseMachine(_phases())
        assert m.check_transition_ready(_pixels(0)) is False
        assert not m.ready

        assert m.check_transition_ready(_pixels(64)) is True
        assert m.ready
        assert m.current == 1

        assert m.confirm(_pixels(64)) is True
        assert m.current == 2
        assert m.unlocked == (1, 2)
        assert m.is_completed(1)
        assert not m.ready

    def test_confirm_without_condition_does_nothing(self) -> None:
        m = PhaseMachine(_phases())
        assert m.confirm(_pixels(10)) is False
        assert m.current == 1

    def test_ready_follows_condition(self) -> None:
        m = PhaseMachine(_phases())
        m.update(_pixels(64))
        assert m.ready
        m.update(_pixels(10))
        assert not m.ready

    def test_update_never_confirms(self) -> None:
        m = PhaseMachine(_phases())
        for _ in range(5):
            assert m.update(_pixels(64)) is False
        assert m.current == 1


class TestAutoTransition:
    def test_advances_on_condition(self) -> None:
        m = PhaseMachine(_phases(auto=True))
        m.confirm(_pixels(64))
        assert m.current == 2
        assert m.update(_pixels(999)) is False
        assert m.update(_pixels(1000)) is True
        assert m.current == 3

    def test_one_phase_per_update(self) -> None:
        m = PhaseMachine(_phases(auto=True))
        m.confirm(_pixels(10_000))
        assert m.current == 2
        m.update(_pixels(10_000))
        assert m.current == 3

    def test_phase_time_resets_on_entry(self) -> None:
        m = PhaseMachine(_phases(auto=True))
        m.tick(5.0)
        m.confirm(_pixels(64))
        assert m.phase_time == 0.0
        assert m.progress_of(1).best_time == 5.0
        assert m.progress_of(1).time_spent == 5.0


class TestTransitioning:
    def test_waits_for_next_unlock(self) -> None:
        phases = [
            PhaseDef(1, "a", transition=Always(), auto_transition=True),
            PhaseDef(2, "b", unlock=FlagCond("gate")),
        ]
        m = PhaseMachine(phases)
        assert m.update(SnapshotContext()) is False
        assert m.transitioning
        assert m.current == 1
        assert m.unlocked == (1,)

        assert m.update(SnapshotContext(flags={"gate": True})) is True
        assert m.current == 2
        assert not m.transitioning

    def test_callbacks(self) -> None:
        calls = []
        m = PhaseMachine(
            _phases(),
            on_unlock=lambda n: calls.append(("unlock", n)),
            on_exit=lambda n: calls.append(("exit", n)),
            on_enter=lambda n, prev: calls.append(("enter", n, prev)),
        )
        m.confirm(_pixels(64))
        assert calls == [("exit", 1), ("unlock", 2), ("enter", 2, 1)]


class TestPhaseOverlay:
    def test_context_phase_fields_come_from_machine(self) -> None:
        """A stale context claiming phase 9 does not fool the machine."""
        phases = [
            PhaseDef(1, "a", transition=TimeCond(10), auto_transition=True),
            PhaseDef(2, "b", unlock=PhaseCond(1, completed=True)),
        ]
        m = PhaseMachine(phases)
        stale = SnapshotContext(phase=9, phase_seconds=100.0)
        assert m.update(stale) is False
        m.tick(10.0)
        assert m.update(stale) is True
        assert m.current == 2


class TestMonotonicity:
    def test_unlocked_and_current_never_decrease(self) -> None:
        m = PhaseMachine(_phases(auto=True))
        history = []
        for n in [0, 64, 10, 1000, 0, 5000, 0]:
            if m.current == 1:
                m.confirm(_pixels(n))
            else:
                m.update(_pixels(n))
            history.append((m.current, len(m.unlocked)))
        currents = [c for c, _ in history]
        sizes = [s for _, s in history]
        assert currents == sorted(currents)
        assert sizes == sorted(sizes)
        assert m.current == 4

    def test_final_phase_never_advances(self) -> None:
        m = PhaseMachine([PhaseDef(1, "only", transition=Always(), auto_transition=True)])
        assert m.is_final
        assert m.update(SnapshotContext()) is False
        assert m.confirm(SnapshotContext()) is False
        assert m.current == 1

    def test_reset_returns_to_one(self) -> None:
        m = PhaseMachine(_phases())
        m.confirm(_pixels(64))
        m.reset()
        assert m.current == 1
        assert m.unlocked == (1,)
        assert not m.is_completed(1)
        assert m.progress_of(1).times_entered == 2


class TestCatchUp:
    def test_backlog_processed_one_phase_at_a_time(self) -> None:
        contexts = []

        def context_fn() -> SnapshotContext:
            ctx = _pixels(10_000)
            contexts.append(ctx)
            return ctx

        entered = []
        m = PhaseMachine(_phases(auto=True), on_enter=lambda n, prev: entered.append(n))
        m.confirm(_pixels(64))
        entered.clear()

        advanced = m.catch_up(context_fn)
        assert advanced == 2
        assert entered == [3, 4]
        assert m.current == 4
        assert len(contexts) == 3

    def test_limit(self) -> None:
        m = PhaseMachine(_phases(auto=True))
        m.confirm(_pixels(64))
        assert m.catch_up(lambda: _pixels(10_000), limit=1) == 1
        assert m.current == 3

    def test_manual_phase_stops_backlog(self) -> None:
        m = PhaseMachine(_phases(auto=False))
        assert m.catch_up(lambda: _pixels(10_000)) == 0
        assert m.ready


class TestSnapshot:
    def test_round_trip_byte_identical(self) -> None:
        m = PhaseMachine(_phases())
        m.tick(3.5)
        m.confirm(_pixels(64))
        m.tick(1.25)
        text = json.dumps(m.snapshot())

        m2 = PhaseMachine(_phases())
        m2.restore(json.loads(text))
        assert json.dumps(m2.snapshot()) == text
        assert m2.current == 2
        assert m2.phase_time == 1.25

    def test_ready_is_rederived(self) -> None:
        m = PhaseMachine(_phases())
        m.check_transition_ready(_pixels(64))
        data = m.snapshot()
        assert "ready" not in data

        m2 = PhaseMachine(_phases())
        m2.restore(data, _pixels(64))
        assert m2.ready
        m3 = PhaseMachine(_phases())
        m3.restore(data, _pixels(0))
        assert not m3.ready
        m4 = PhaseMachine(_phases())
        m4.restore(data)
        assert not m4.ready

    def test_restore_does_not_advance(self) -> None:
        m = PhaseMachine(_phases(auto=True))
        m2 = PhaseMachine(_phases(auto=True))
        m2.restore(m.snapshot(), _pixels(10_000))
        assert m2.current == 1
        assert m2.catch_up(lambda: _pixels(10_000)) == 3

    def test_transitioning_is_derived(self) -> None:
        phases = [
            PhaseDef(1, "a", transition=Always(), auto_transition=True),
            PhaseDef(2, "b", unlock=FlagCond("gate")),
        ]
        m = PhaseMachine(phases)
        m.update(SnapshotContext())
        m2 = PhaseMachine(phases)
        m2.restore(m.snapshot())
        assert m2.transitioning

    def test_malformed(self) -> None:
        m = PhaseMachine(_phases())
        with pytest.raises(SnapshotError):
            m.restore({"current": 99})
        with pytest.raises(SnapshotError):
            m.restore({"current": 1, "unlocked": [1, 42]})
        with pytest.raises(SnapshotError):
            m.restore({"phase_time": 1.0})
        assert m.current == 1


class TestUnlockAndView:
    def test_check_unlock_unknown_phase(self) -> None:
        m = PhaseMachine(_phases())
        assert m.check_unlock(99, _pixels(0)) is False

    def test_check_unlock_waits_for_completion(self) -> None:
        unlocked = []
        m = PhaseMachine(_phases(), on_unlock=unlocked.append)
        assert m.check_unlock(2, _pixels(0)) is False
        assert m.confirm(_pixels(64)) is True
        assert 2 in m.unlocked
        assert m.check_unlock(2, _pixels(0)) is True
        assert unlocked.count(2) == 1

    def test_view_answers_phase_getters_from_machine(self) -> None:
        m = PhaseMachine(_phases())
        base = _pixels(64, phase=7)
        assert m.view(base).current_phase() == 1
        assert m.view(base).resource_amount("pixels") == Decimal(64)
        m.confirm(base)
        view = m.view(base)
        assert view.current_phase() == 2
        assert view.phase_completed(1) is True
        assert view.phase_completed(2) is False
