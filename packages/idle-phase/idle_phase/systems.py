"""System factory for phase progression."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from idle_phase.machine import PhaseMachine

if TYPE_CHECKING:
    from idle import GameState, TickContext
    from idle_condition import EvaluationContext


def make_phase_system(
    machine: PhaseMachine,
    context_fn: Callable[[], EvaluationContext],
) -> Callable[[GameState, TickContext], None]:
    """Return a system that advances the phase timer and checks transitions."""

    def phase_system(state: GameState, ctx: TickContext) -> None:
        machine.tick(ctx.dt)
        machine.update(context_fn())

    return phase_system
