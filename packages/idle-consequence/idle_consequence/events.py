"""Domain events published once per applied consequence."""
from __future__ import annotations

from dataclasses import dataclass

from idle.amount import Amount


class DomainEvent:
    """Base class for everything published on the signal bus."""


@dataclass(frozen=True)
class ResourceGranted(DomainEvent):
    resource_id: str
    amount: Amount
    total: Amount
    source: str = ""


@dataclass(frozen=True)
class ResourceMultiplied(DomainEvent):
    resource_id: str
    factor: Amount
    total: Amount
    source: str = ""


@dataclass(frozen=True)
class FlagSet(DomainEvent):
    key: str
    value: bool | str | int | float
    source: str = ""


@dataclass(frozen=True)
class FlagUnset(DomainEvent):
    key: str
    source: str = ""


@dataclass(frozen=True)
class AchievementUnlocked(DomainEvent):
    achievement_id: str
    source: str = ""


@dataclass(frozen=True)
class SecretRevealed(DomainEvent):
    secret_id: str
    source: str = ""


@dataclass(frozen=True)
class UpgradeUnlocked(DomainEvent):
    upgrade_id: str
    source: str = ""


@dataclass(frozen=True)
class ProducerUnlocked(DomainEvent):
    producer_id: str
    source: str = ""


@dataclass(frozen=True)
class EndingUnlocked(DomainEvent):
    ending_id: str
    source: str = ""


@dataclass(frozen=True)
class MultiplierAdded(DomainEvent):
    multiplier_id: str
    value: Amount
    resource_id: str | None = None
    duration: float | None = None
    source: str = ""


@dataclass(frozen=True)
class DialogueQueued(DomainEvent):
    dialogue_id: str
    source: str = ""


@dataclass(frozen=True)
class LogQueued(DomainEvent):
    log_id: str
    source: str = ""
