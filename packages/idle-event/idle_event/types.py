"""Core data types for trigger scheduling."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from idle_condition import CONDITION_TYPES, Condition


@dataclass(frozen=True)
class TriggerDef:
    """Authored binding from conditions to a piece of content. Not serialized.

    ``one_time`` triggers fire at most once per save (or per run, unless
    ``eternal``). Any other trigger is edge-triggered: it fires again only
    after its conditions go false and then true again. Left unset,
    ``one_time`` is the opposite of ``repeatable``.
    """

    id: str
    content_id: str
    conditions: tuple[Condition, ...] = ()  # ALL must hold
    priority: int = 0  # higher is presented first within a pass
    one_time: bool | None = None
    repeatable: bool = False
    delay: float = 0.0  # seconds of game time between firing and presentation
    pauses_game: bool = False
    eternal: bool = False  # fired marker survives a prestige reset
    kind: str = "log"
    phase: int | None = None  # only eligible while this phase is current
    title: str | None = None
    consequences: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("TriggerDef id must be non-empty")
        if not self.content_id:
            raise ValueError(f"trigger {self.id!r} needs a content id")
        if self.one_time is None:
            object.__setattr__(self, "one_time", not self.repeatable)
        if self.one_time and self.repeatable:
            raise ValueError(f"trigger {self.id!r} cannot be both one_time and repeatable")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ValueError(f"priority must be an int, got {self.priority!r}")
        conditions = tuple(self.conditions)
        for cond in conditions:
            if not isinstance(cond, CONDITION_TYPES):
                raise TypeError(
                    f"trigger {self.id!r} condition must be a condition, got {type(cond).__name__}"
                )
        object.__setattr__(self, "conditions", conditions)
        object.__setattr__(self, "consequences", tuple(self.consequences))

    @property
    def edge_triggered(self) -> bool:
        return not self.one_time


@dataclass(frozen=True)
class QueuedTrigger:
    """A fired trigger waiting for presentation. Serializable."""

    trigger_id: str
    content_id: str
    queued_at: float
    due_at: float
    priority: int = 0
    pauses_game: bool = False
    kind: str = "log"

    def is_due(self, now: float) -> bool:
        return now >= self.due_at
