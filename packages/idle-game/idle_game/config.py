"""Game configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Immutable settings for a Game.

    Attributes:
        tps: Engine ticks per second.
        notification_cap: Pending discovery notifications kept per tracker.
        diagnostics_capacity: Runtime degradations kept for inspection.
        catch_up_limit: Most phases ``resume`` may advance at once. None
            means as many as there are phases.
        offline_cap_hours: Most hours of absence that earn offline production.
        offline_efficiency: Fraction of the normal production rate paid
            while away.
        offline_minimum_seconds: Shortest absence that earns anything.
    """

    tps: int = 20
    notification_cap: int = 10
    diagnostics_capacity: int = 200
    catch_up_limit: int | None = None
    offline_cap_hours: float = 8.0
    offline_efficiency: float = 0.1
    offline_minimum_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.tps <= 0:
            raise ValueError(f"tps must be positive, got {self.tps}")
        if self.notification_cap < 1:
            raise ValueError(f"notification_cap must be >= 1, got {self.notification_cap}")
        if self.catch_up_limit is not None and self.catch_up_limit < 0:
            raise ValueError(f"catch_up_limit must be >= 0, got {self.catch_up_limit}")
        if self.offline_cap_hours < 0:
            raise ValueError(f"offline_cap_hours must be >= 0, got {self.offline_cap_hours}")
        if not 0 <= self.offline_efficiency <= 1:
            raise ValueError(
                f"offline_efficiency must be between 0 and 1, got {self.offline_efficiency}"
            )
        if self.offline_minimum_seconds < 0:
            raise ValueError(
                f"offline_minimum_seconds must be >= 0, got {self.offline_minimum_seconds}"
            )
