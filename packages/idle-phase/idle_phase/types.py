"""Phase definitions and per-phase progress records."""
from __future__ import annotations

from dataclasses import dataclass

from idle_condition import CONDITION_TYPES, Always, Condition, Never


@dataclass(frozen=True)
class PhaseDef:
    """One progression stage.

    ``unlock`` says when the phase becomes reachable, ``transition`` when
    it ends. Without ``auto_transition`` a satisfied transition only marks
    the phase ready and waits for an explicit confirm.
    """

    number: int
    key: str
    name: str = ""
    unlock: Condition = Always()
    transition: Condition = Never()
    auto_transition: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int) or self.number < 1:
            raise ValueError(f"phase number must be an int >= 1, got {self.number!r}")
        if not self.key:
            raise ValueError("PhaseDef key must be non-empty")
        for label, cond in (("unlock", self.unlock), ("transition", self.transition)):
            if not isinstance(cond, CONDITION_TYPES):
                raise TypeError(
                    f"phase {self.number} {label} must be a condition, got {type(cond).__name__}"
                )


@dataclass
class PhaseProgress:
    """Per-phase history. Serializable."""

    entered: bool = False
    completed: bool = False
    time_spent: float = 0.0
    best_time: float | None = None
    times_entered: int = 0
