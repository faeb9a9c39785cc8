"""Read-only query surface the evaluator runs against."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Protocol, Union

from idle.amount import ZERO, Amount

FlagValue = Union[bool, str, int, float]


class EvaluationContext(Protocol):
    """Getters over game state, stable for the duration of one pass."""

    def resource_amount(self, resource_id: str) -> Amount: ...

    def current_phase(self) -> int: ...

    def phase_completed(self, phase: int) -> bool: ...

    def phase_time(self) -> float: ...

    def run_time(self) -> float: ...

    def idle_time(self) -> float: ...

    def total_time(self) -> float: ...

    def producer_count(self, producer_id: str) -> int: ...

    def upgrade_level(self, upgrade_id: str) -> int: ...

    def has_achievement(self, achievement_id: str) -> bool: ...

    def flag(self, key: str) -> FlagValue | None: ...

    def stat(self, name: str) -> int | float: ...

    def choice(self, choice_id: str) -> str | None: ...


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class SnapshotContext:
    """Immutable EvaluationContext copied from live state once per pass.

    Missing ids read as zero / absent rather than raising.
    """

    resources: Mapping[str, Amount] = field(default_factory=dict)
    phase: int = 1
    completed_phases: frozenset[int] = frozenset()
    phase_seconds: float = 0.0
    run_seconds: float = 0.0
    idle_seconds: float = 0.0
    total_seconds: float = 0.0
    producers: Mapping[str, int] = field(default_factory=dict)
    upgrades: Mapping[str, int] = field(default_factory=dict)
    achievements: frozenset[str] = frozenset()
    flags: Mapping[str, FlagValue] = field(default_factory=dict)
    stats: Mapping[str, int | float] = field(default_factory=dict)
    choices: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("resources", "producers", "upgrades", "flags", "stats", "choices"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))
        object.__setattr__(self, "completed_phases", frozenset(self.completed_phases))
        object.__setattr__(self, "achievements", frozenset(self.achievements))

    def resource_amount(self, resource_id: str) -> Amount:
        return self.resources.get(resource_id, ZERO)

    def current_phase(self) -> int:
        return self.phase

    def phase_completed(self, phase: int) -> bool:
        return phase in self.completed_phases

    def phase_time(self) -> float:
        return self.phase_seconds

    def run_time(self) -> float:
        return self.run_seconds

    def idle_time(self) -> float:
        return self.idle_seconds

    def total_time(self) -> float:
        return self.total_seconds

    def producer_count(self, producer_id: str) -> int:
        return self.producers.get(producer_id, 0)

    def upgrade_level(self, upgrade_id: str) -> int:
        return self.upgrades.get(upgrade_id, 0)

    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self.achievements

    def flag(self, key: str) -> FlagValue | None:
        return self.flags.get(key)

    def stat(self, name: str) -> int | float:
        return self.stats.get(name, 0)

    def choice(self, choice_id: str) -> str | None:
        return self.choices.get(choice_id)
