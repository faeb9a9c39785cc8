"""Discovery definitions and notification records."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from idle.dirty import DirtyCategory
from idle_condition import CONDITION_TYPES, Condition


@dataclass(frozen=True)
class DiscoveryDef:
    """An achievement or secret: one condition, found at most once.

    ``watches`` narrows which state changes trigger a re-check. When empty
    the categories are derived from the condition.
    """

    id: str
    condition: Condition
    consequences: tuple[Any, ...] = ()
    name: str = ""
    hidden: bool = False
    hint: str | None = None
    prerequisite: str | None = None
    watches: frozenset[DirtyCategory] = frozenset()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("DiscoveryDef id must be non-empty")
        if not isinstance(self.condition, CONDITION_TYPES):
            raise TypeError(
                f"{self.id!r} condition must be a condition, got {type(self.condition).__name__}"
            )
        if self.prerequisite == self.id:
            raise ValueError(f"{self.id!r} cannot be its own prerequisite")
        object.__setattr__(self, "consequences", tuple(self.consequences))
        object.__setattr__(self, "watches", frozenset(DirtyCategory(w) for w in self.watches))


@dataclass
class Notification:
    id: str
    kind: str
    name: str
    at: float
    shown: bool = False
