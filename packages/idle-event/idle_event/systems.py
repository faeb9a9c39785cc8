"""System factory for trigger scheduling."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from idle_event.scheduler import TriggerScheduler
from idle_event.types import QueuedTrigger

if TYPE_CHECKING:
    from idle import GameState, TickContext
    from idle_condition import EvaluationContext


def make_trigger_system(
    scheduler: TriggerScheduler,
    context_fn: Callable[[], EvaluationContext],
    on_queued: Callable[[GameState, TickContext, QueuedTrigger], None] | None = None,
) -> Callable[[GameState, TickContext], None]:
    """Return a system that runs one scheduling pass per tick.

    The context is built once per pass and shared by every trigger.
    Game time (``ctx.elapsed``) stamps fired markers and queue entries.
    """

    def trigger_system(state: GameState, ctx: TickContext) -> None:
        queued = scheduler.evaluate(context_fn(), ctx.elapsed)
        if on_queued is not None:
            for item in queued:
                on_queued(state, ctx, item)

    return trigger_system
