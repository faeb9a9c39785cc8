"""Consequence variants - one authored effect each."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union

from idle.amount import ZERO, Amount, to_amount


def _require_id(kind: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{kind} needs a non-empty id, got {value!r}")


@dataclass(frozen=True)
class AddResource:
    """Grant (or take, if negative) an amount of a resource."""

    resource_id: str
    amount: Amount

    def __post_init__(self) -> None:
        _require_id("add_resource", self.resource_id)
        object.__setattr__(self, "amount", to_amount(self.amount))


@dataclass(frozen=True)
class MultiplyResource:
    resource_id: str
    factor: Amount

    def __post_init__(self) -> None:
        _require_id("multiply_resource", self.resource_id)
        object.__setattr__(self, "factor", to_amount(self.factor))
        if self.factor < ZERO:
            raise ValueError(f"factor must be >= 0, got {self.factor}")


@dataclass(frozen=True)
class SetFlag:
    key: str
    value: bool | str | int | float = True

    def __post_init__(self) -> None:
        _require_id("set_flag", self.key)


@dataclass(frozen=True)
class UnsetFlag:
    key: str

    def __post_init__(self) -> None:
        _require_id("unset_flag", self.key)


@dataclass(frozen=True)
class UnlockAchievement:
    achievement_id: str

    def __post_init__(self) -> None:
        _require_id("unlock_achievement", self.achievement_id)


@dataclass(frozen=True)
class RevealSecret:
    secret_id: str

    def __post_init__(self) -> None:
        _require_id("reveal_secret", self.secret_id)


@dataclass(frozen=True)
class UnlockUpgrade:
    upgrade_id: str

    def __post_init__(self) -> None:
        _require_id("unlock_upgrade", self.upgrade_id)


@dataclass(frozen=True)
class UnlockProducer:
    producer_id: str

    def __post_init__(self) -> None:
        _require_id("unlock_producer", self.producer_id)


@dataclass(frozen=True)
class UnlockEnding:
    ending_id: str

    def __post_init__(self) -> None:
        _require_id("unlock_ending", self.ending_id)


@dataclass(frozen=True)
class AddMultiplier:
    """Production multiplier. Permanent when ``duration`` is None.

    ``resource_id`` of None applies to every resource.
    """

    multiplier_id: str
    value: Amount
    resource_id: str | None = None
    duration: float | None = None

    def __post_init__(self) -> None:
        _require_id("add_multiplier", self.multiplier_id)
        object.__setattr__(self, "value", to_amount(self.value))
        if self.value <= ZERO:
            raise ValueError(f"multiplier value must be > 0, got {self.value}")
        if self.duration is not None and self.duration <= 0:
            raise ValueError(f"duration must be > 0, got {self.duration}")


@dataclass(frozen=True)
class QueueDialogue:
    dialogue_id: str

    def __post_init__(self) -> None:
        _require_id("queue_dialogue", self.dialogue_id)


@dataclass(frozen=True)
class QueueLog:
    log_id: str

    def __post_init__(self) -> None:
        _require_id("queue_log", self.log_id)


Consequence = Union[
    AddResource,
    MultiplyResource,
    SetFlag,
    UnsetFlag,
    UnlockAchievement,
    RevealSecret,
    UnlockUpgrade,
    UnlockProducer,
    UnlockEnding,
    AddMultiplier,
    QueueDialogue,
    QueueLog,
]


def iter_references(consequence: Consequence) -> Iterator[tuple[str, str]]:
    """Yield ``(kind, id)`` for content the consequence points at."""
    if isinstance(consequence, (AddResource, MultiplyResource)):
        yield ("resource", consequence.resource_id)
    elif isinstance(consequence, UnlockAchievement):
        yield ("achievement", consequence.achievement_id)
    elif isinstance(consequence, RevealSecret):
        yield ("secret", consequence.secret_id)
    elif isinstance(consequence, UnlockUpgrade):
        yield ("upgrade", consequence.upgrade_id)
    elif isinstance(consequence, UnlockProducer):
        yield ("producer", consequence.producer_id)
    elif isinstance(consequence, AddMultiplier) and consequence.resource_id is not None:
        yield ("resource", consequence.resource_id)
    elif isinstance(consequence, QueueDialogue):
        yield ("content", consequence.dialogue_id)
    elif isinstance(consequence, QueueLog):
        yield ("content", consequence.log_id)
