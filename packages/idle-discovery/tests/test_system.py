"""Tests for make_discovery_system driven by the engine."""
from __future__ import annotations

from idle import Engine
from idle_condition import AchievementCond, SnapshotContext, StatCond
from idle_consequence import ConsequenceApplier
from idle_discovery import DiscoveryDef, DiscoveryTracker, make_discovery_system


def test_cascade_resolves_one_tick_at_a_time():
    engine = Engine(tps=10)
    state = engine.state
    tracker = DiscoveryTracker(
        "achievement",
        [
            DiscoveryDef("first", StatCond("clicks", 1)),
            DiscoveryDef("second", AchievementCond("first")),
        ],
        ConsequenceApplier(),
    )

    def context():
        return SnapshotContext(
            stats=state.stats(), achievements=frozenset(state.achievements())
        )

    engine.add_system(make_discovery_system([tracker], context))
    state.increment_stat("clicks")

    engine.step()
    assert tracker.is_discovered("first")
    assert not tracker.is_discovered("second")
    engine.step()
    assert tracker.is_discovered("second")
    assert state.achievements() == {"first": 0.1, "second": 0.2}


def test_clean_tick_skips_context_build():
    engine = Engine(tps=10)
    built = []

    def context():
        built.append(1)
        return SnapshotContext()

    engine.add_system(make_discovery_system([], context))
    engine.run(3)
    assert built == []
    engine.state.set_flag("x")
    engine.step()
    assert built == [1]
