"""Production rates and the system factory for play time and payouts."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from idle import amount as amt
from idle.amount import Amount, to_amount

if TYPE_CHECKING:
    from idle import GameState, TickContext

    from idle_game.content import GameContent


def production_rates(content: GameContent, state: GameState) -> dict[str, Amount]:
    """Output per second for each resource that owned producers yield.

    Each owned producer contributes ``rate`` scaled by the multipliers that
    apply to its resource. Resources with no output are left out.
    """
    rates: dict[str, Amount] = {}
    for producer in content.producers:
        owned = state.producer_count(producer.id)
        if owned <= 0 or producer.rate == amt.ZERO:
            continue
        scaled = amt.multiply(producer.rate, state.multiplier_for(producer.resource))
        rates[producer.resource] = amt.add(
            rates.get(producer.resource, amt.ZERO),
            amt.multiply(scaled, to_amount(owned)),
        )
    return rates


def make_time_system(content: GameContent) -> Callable[[GameState, TickContext], None]:
    """Return a system that advances play time and pays out producers."""

    def time_system(state: GameState, ctx: TickContext) -> None:
        state.advance_time(ctx.dt)
        state.tick_multipliers(ctx.dt)
        dt = to_amount(ctx.dt)
        for resource_id, per_second in production_rates(content, state).items():
            state.add_resource(resource_id, amt.multiply(per_second, dt))

    return time_system
