"""Build the read-only evaluation context from live game state."""
from __future__ import annotations

from typing import TYPE_CHECKING

from idle_condition import SnapshotContext

if TYPE_CHECKING:
    from idle import GameState
    from idle_phase import PhaseMachine


def capture_context(state: GameState, phases: PhaseMachine | None = None) -> SnapshotContext:
    """Copy everything conditions can read into one immutable snapshot."""
    if phases is None:
        current, completed, phase_seconds = 1, frozenset(), 0.0
    else:
        current = phases.current
        completed = frozenset(p.number for p in phases.phases() if phases.is_completed(p.number))
        phase_seconds = phases.phase_time
    return SnapshotContext(
        resources=state.resources(),
        phase=current,
        completed_phases=completed,
        phase_seconds=phase_seconds,
        run_seconds=state.run_time,
        idle_seconds=state.idle_time,
        total_seconds=state.total_time,
        producers=state.producers(),
        upgrades=state.upgrades(),
        achievements=frozenset(state.achievements()),
        flags=state.flags(),
        stats=state.stats(),
        choices=state.choices(),
    )
