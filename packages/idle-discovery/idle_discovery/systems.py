"""System factory for debounced discovery checks."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Sequence

from idle_discovery.tracker import DiscoveryTracker

if TYPE_CHECKING:
    from idle import GameState, TickContext
    from idle_condition import EvaluationContext


def make_discovery_system(
    trackers: Sequence[DiscoveryTracker],
    context_fn: Callable[[], EvaluationContext],
) -> Callable[[GameState, TickContext], None]:
    """Return a system that drains the dirty set once per tick.

    Every tracker sees the same drained categories. Changes made while
    discovering land in the next tick's set.
    """

    def discovery_system(state: GameState, ctx: TickContext) -> None:
        dirty = state.dirty.drain()
        if not dirty:
            return
        eval_ctx = context_fn()
        for tracker in trackers:
            tracker.check(eval_ctx, state, dirty, now=ctx.elapsed)

    return discovery_system
