"""Condition variants - immutable boolean expression trees over game state."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from idle.amount import Amount, to_amount


class Op(Enum):
    """Comparison operator for numeric leaves."""

    GTE = "gte"
    GT = "gt"
    LTE = "lte"
    LT = "lt"
    EQ = "eq"
    NEQ = "neq"

    def compare(self, left: Any, right: Any) -> bool:
        if self is Op.GTE:
            return left >= right
        if self is Op.GT:
            return left > right
        if self is Op.LTE:
            return left <= right
        if self is Op.LT:
            return left < right
        if self is Op.EQ:
            return left == right
        return left != right


class TimeScope(Enum):
    """Which clock a TimeCond reads."""

    PHASE = "phase"
    RUN = "run"
    IDLE = "idle"
    TOTAL = "total"


def _require_id(kind: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{kind} condition needs a non-empty id, got {value!r}")


def _require_count(kind: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{kind} condition needs a non-negative int, got {value!r}")


def _require_number(kind: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{kind} condition needs a number, got {value!r}")


def _coerce_op(obj: Any) -> None:
    object.__setattr__(obj, "op", Op(obj.op))


# --- Leaves ---


@dataclass(frozen=True)
class ResourceCond:
    """Resource amount compared against a threshold."""

    resource_id: str
    amount: Amount
    op: Op = Op.GTE

    def __post_init__(self) -> None:
        _require_id("resource", self.resource_id)
        object.__setattr__(self, "amount", to_amount(self.amount))
        _coerce_op(self)


@dataclass(frozen=True)
class TimeCond:
    """Elapsed seconds on one of the game clocks."""

    seconds: float
    op: Op = Op.GTE
    scope: TimeScope = TimeScope.PHASE

    def __post_init__(self) -> None:
        _require_number("time", self.seconds)
        if self.seconds < 0:
            raise ValueError(f"time condition needs seconds >= 0, got {self.seconds}")
        _coerce_op(self)
        object.__setattr__(self, "scope", TimeScope(self.scope))


@dataclass(frozen=True)
class PhaseCond:
    """Current phase compared to a number, or a phase having been completed."""

    phase: int
    op: Op = Op.GTE
    completed: bool = False

    def __post_init__(self) -> None:
        _require_count("phase", self.phase)
        _coerce_op(self)


@dataclass(frozen=True)
class ProducerCond:
    producer_id: str
    count: int = 1
    op: Op = Op.GTE

    def __post_init__(self) -> None:
        _require_id("producer", self.producer_id)
        _require_count("producer", self.count)
        _coerce_op(self)


@dataclass(frozen=True)
class UpgradeCond:
    """Upgrade owned at ``level`` or above."""

    upgrade_id: str
    level: int = 1

    def __post_init__(self) -> None:
        _require_id("upgrade", self.upgrade_id)
        _require_count("upgrade", self.level)


@dataclass(frozen=True)
class AchievementCond:
    achievement_id: str

    def __post_init__(self) -> None:
        _require_id("achievement", self.achievement_id)


@dataclass(frozen=True)
class FlagCond:
    """Flag is truthy, or equals ``expected`` when one is given."""

    key: str
    expected: bool | str | int | float | None = None

    def __post_init__(self) -> None:
        _require_id("flag", self.key)


@dataclass(frozen=True)
class StatCond:
    stat: str
    value: int | float
    op: Op = Op.GTE

    def __post_init__(self) -> None:
        _require_id("stat", self.stat)
        _require_number("stat", self.value)
        _coerce_op(self)


@dataclass(frozen=True)
class ChoiceCond:
    """Story choice was made, optionally with a specific option."""

    choice_id: str
    option: str | None = None

    def __post_init__(self) -> None:
        _require_id("choice", self.choice_id)


@dataclass(frozen=True)
class Always:
    pass


@dataclass(frozen=True)
class Never:
    pass


# --- Composites ---


def _check_children(kind: str, children: tuple[Any, ...]) -> tuple[Condition, ...]:
    for i, child in enumerate(children):
        if not isinstance(child, CONDITION_TYPES):
            raise TypeError(
                f"{kind} child {i} must be a condition, got {type(child).__name__}"
            )
    return tuple(children)


@dataclass(frozen=True, init=False)
class And:
    """All children hold. Evaluated left to right, short-circuiting."""

    children: tuple[Condition, ...]

    def __init__(self, *children: Condition) -> None:
        object.__setattr__(self, "children", _check_children("and", children))


@dataclass(frozen=True, init=False)
class Or:
    """Any child holds. Evaluated left to right, short-circuiting."""

    children: tuple[Condition, ...]

    def __init__(self, *children: Condition) -> None:
        object.__setattr__(self, "children", _check_children("or", children))


@dataclass(frozen=True)
class Not:
    child: Condition

    def __post_init__(self) -> None:
        _check_children("not", (self.child,))


Condition = Union[
    ResourceCond,
    TimeCond,
    PhaseCond,
    ProducerCond,
    UpgradeCond,
    AchievementCond,
    FlagCond,
    StatCond,
    ChoiceCond,
    And,
    Or,
    Not,
    Always,
    Never,
]

CONDITION_TYPES: tuple[type, ...] = (
    ResourceCond,
    TimeCond,
    PhaseCond,
    ProducerCond,
    UpgradeCond,
    AchievementCond,
    FlagCond,
    StatCond,
    ChoiceCond,
    And,
    Or,
    Not,
    Always,
    Never,
)
