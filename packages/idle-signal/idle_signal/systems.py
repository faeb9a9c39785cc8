"""System factories for signal dispatch."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from idle_signal.bus import SignalBus

if TYPE_CHECKING:
    from idle import GameState, TickContext


def make_signal_system(bus: SignalBus) -> Callable[[GameState, TickContext], None]:
    def signal_system(state: GameState, ctx: TickContext) -> None:
        bus.flush()

    return signal_system
