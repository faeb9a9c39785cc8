"""Game-level domain events published alongside consequence events."""
from __future__ import annotations

from dataclasses import dataclass

from idle.amount import Amount
from idle_consequence import DomainEvent


@dataclass(frozen=True)
class PhaseUnlocked(DomainEvent):
    phase: int


@dataclass(frozen=True)
class PhaseCompleted(DomainEvent):
    phase: int


@dataclass(frozen=True)
class PhaseEntered(DomainEvent):
    phase: int
    previous: int


@dataclass(frozen=True)
class TriggerQueued(DomainEvent):
    trigger_id: str
    content_id: str
    due_at: float


@dataclass(frozen=True)
class ChoiceMade(DomainEvent):
    choice_id: str
    option: str


@dataclass(frozen=True)
class RunReset(DomainEvent):
    """A prestige reset finished. ``count`` is the number of resets so far."""

    count: int


@dataclass(frozen=True)
class OfflineCredited(DomainEvent):
    """Production paid for time away. ``earned`` maps resource id to amount."""

    time_away: float
    capped_time: int
    earned: tuple[tuple[str, Amount], ...]
