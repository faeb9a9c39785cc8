"""Capped production credited for time spent away from the game.

Only a fraction of the normal rate is paid, for at most a fixed number of
hours, and nothing at all for short absences.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

from idle import amount as amt
from idle.amount import Amount, to_amount

from idle_game.config import GameConfig


@dataclass(frozen=True)
class OfflineReward:
    """What an absence earned.

    ``time_away`` is the full absence in seconds and ``capped_time`` the
    whole seconds that counted. ``full_rest`` is set when the cap was
    reached.
    """

    time_away: float
    capped_time: int = 0
    efficiency: float = 0.0
    earned: Mapping[str, Amount] = field(default_factory=dict)
    full_rest: bool = False

    @property
    def empty(self) -> bool:
        return not any(v > amt.ZERO for v in self.earned.values())


def calculate_offline_progress(
    time_away: float, rates: Mapping[str, Amount], config: GameConfig
) -> OfflineReward:
    """Reward for *time_away* seconds at per-second *rates*.

    Absences shorter than ``config.offline_minimum_seconds`` (including
    negative ones from a clock set back) earn nothing.
    """
    if time_away < config.offline_minimum_seconds:
        return OfflineReward(time_away=time_away, efficiency=config.offline_efficiency)
    cap_seconds = config.offline_cap_hours * 3600
    capped_time = int(math.floor(min(time_away, cap_seconds)))
    factor = amt.multiply(to_amount(config.offline_efficiency), to_amount(capped_time))
    earned = {
        resource_id: amt.multiply(rate, factor)
        for resource_id, rate in sorted(rates.items())
        if rate > amt.ZERO
    }
    return OfflineReward(
        time_away=time_away,
        capped_time=capped_time,
        efficiency=config.offline_efficiency,
        earned=earned,
        full_rest=time_away >= cap_seconds,
    )
