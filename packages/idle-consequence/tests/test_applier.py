"""Tests for ConsequenceApplier."""
from __future__ import annotations

from decimal import Decimal

from idle import GameState
from idle.diagnostics import Diagnostics
from idle.dirty import DirtyCategory
from idle_consequence import (
    AchievementUnlocked,
    AddMultiplier,
    AddResource,
    ConsequenceApplier,
    DialogueQueued,
    DomainEvent,
    FlagSet,
    MultiplyResource,
    QueueDialogue,
    QueueLog,
    ResourceGranted,
    RevealSecret,
    SetFlag,
    UnlockAchievement,
    UnlockEnding,
    UnlockProducer,
    UnlockUpgrade,
    UnsetFlag,
)
from idle_signal import SignalBus


def _setup():
    bus = SignalBus()
    diag = Diagnostics()
    seen: list[DomainEvent] = []
    bus.subscribe(DomainEvent, seen.append)
    return ConsequenceApplier(bus, diag), GameState(), bus, diag, seen


class TestMutations:
    def test_add_resource(self) -> None:
        applier, state, bus, _, seen = _setup()
        event = applier.apply(AddResource("pixels", 64), state, source="log_001")
        assert state.resource("pixels") == 64
        assert event == ResourceGranted("pixels", Decimal(64), Decimal(64), "log_001")
        bus.flush()
        assert seen == [event]

    def test_multiply_resource(self) -> None:
        applier, state, _, _, _ = _setup()
        state.set_resource("pixels", 10)
        applier.apply(MultiplyResource("pixels", 3), state)
        assert state.resource("pixels") == 30

    def test_flags(self) -> None:
        applier, state, _, _, _ = _setup()
        event = applier.apply(SetFlag("mode", "abstract"), state)
        assert state.flag("mode") == "abstract"
        assert event == FlagSet("mode", "abstract")
        applier.apply(UnsetFlag("mode"), state)
        assert state.flag("mode") is None

    def test_unlocks(self) -> None:
        applier, state, _, _, _ = _setup()
        applier.apply(UnlockAchievement("first_click"), state, now=12.0)
        applier.apply(RevealSecret("konami"), state, now=13.0)
        applier.apply(UnlockUpgrade("brush"), state)
        applier.apply(UnlockProducer("cursor"), state)
        applier.apply(UnlockEnding("merge"), state)
        assert state.achievements() == {"first_click": 12.0}
        assert state.secrets() == {"konami": 13.0}
        assert state.is_upgrade_unlocked("brush")
        assert state.is_producer_unlocked("cursor")
        assert state.has_ending("merge")

    def test_multiplier(self) -> None:
        applier, state, _, _, _ = _setup()
        applier.apply(AddMultiplier("boost", 2, "pixels", duration=30.0), state)
        m = state.multiplier("boost")
        assert m is not None
        assert m.remaining == 30.0
        assert state.multiplier_for("pixels") == 2

    def test_queue_content(self) -> None:
        applier, state, _, _, _ = _setup()
        event = applier.apply(QueueDialogue("intro"), state)
        applier.apply(QueueLog("log_001"), state)
        assert event == DialogueQueued("intro")
        assert [(r.kind, r.content_id) for r in state.pending_content()] == [
            ("dialogue", "intro"),
            ("log", "log_001"),
        ]
        assert state.dirty.is_dirty(DirtyCategory.LOG)


class TestNoDeduplication:
    def test_reapplying_grants_twice(self) -> None:
        applier, state, _, _, _ = _setup()
        applier.apply(AddResource("pixels", 5), state)
        applier.apply(AddResource("pixels", 5), state)
        assert state.resource("pixels") == 10

    def test_one_event_per_application(self) -> None:
        applier, state, bus, _, seen = _setup()
        applier.apply(UnlockAchievement("a"), state)
        applier.apply(UnlockAchievement("a"), state)
        bus.flush()
        assert seen == [AchievementUnlocked("a"), AchievementUnlocked("a")]


class TestDegradation:
    def test_unknown_kind_is_noop(self) -> None:
        applier, state, bus, diag, seen = _setup()
        assert applier.apply("explode", state) is None  # type: ignore[arg-type]
        bus.flush()
        assert seen == []
        assert [d.code for d in diag.query()] == ["consequence.unknown_kind"]

    def test_rejected_mutation_is_reported(self) -> None:
        applier, state, _, diag, _ = _setup()
        assert applier.apply(AddResource("pixels", -5), state, source="trap") is None
        assert state.resource("pixels") == 0
        assert diag.query()[0].code == "consequence.failed"
        assert diag.query()[0].detail == {"source": "trap"}

    def test_apply_all_continues_after_failure(self) -> None:
        applier, state, _, _, _ = _setup()
        events = applier.apply_all(
            [AddResource("pixels", -5), SetFlag("ok"), AddResource("pixels", 1)], state
        )
        assert len(events) == 2
        assert state.has_flag("ok")
        assert state.resource("pixels") == 1

    def test_without_bus(self) -> None:
        applier = ConsequenceApplier()
        state = GameState()
        assert applier.apply(SetFlag("x"), state) == FlagSet("x", True)
