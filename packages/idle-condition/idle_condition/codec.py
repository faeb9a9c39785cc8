"""Authoring format for conditions: plain dicts keyed by ``type``."""
from __future__ import annotations

from typing import Any, Callable

from idle.amount import amount_to_str

from idle_condition.types import (
    AchievementCond,
    Always,
    And,
    ChoiceCond,
    Condition,
    FlagCond,
    Never,
    Not,
    Or,
    PhaseCond,
    ProducerCond,
    ResourceCond,
    StatCond,
    TimeCond,
    UpgradeCond,
)

MAX_DEPTH = 32


class ConditionFormatError(ValueError):
    """Malformed authored condition. ``path`` locates it in the source data."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


def _field(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise ConditionFormatError(path, f"missing field {key!r}")
    return data[key]


def _leaf(factory: Callable[..., Condition], data: dict[str, Any], path: str,
          required: dict[str, str], optional: dict[str, str]) -> Condition:
    kwargs = {attr: _field(data, key, path) for key, attr in required.items()}
    for key, attr in optional.items():
        if key in data:
            kwargs[attr] = data[key]
    try:
        return factory(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConditionFormatError(path, str(exc)) from exc


_LEAVES: dict[str, tuple[Callable[..., Condition], dict[str, str], dict[str, str]]] = {
    "resource": (ResourceCond, {"resource": "resource_id", "amount": "amount"}, {"op": "op"}),
    "time": (TimeCond, {"seconds": "seconds"}, {"op": "op", "scope": "scope"}),
    "phase": (PhaseCond, {"phase": "phase"}, {"op": "op", "completed": "completed"}),
    "producer": (ProducerCond, {"producer": "producer_id"}, {"count": "count", "op": "op"}),
    "upgrade": (UpgradeCond, {"upgrade": "upgrade_id"}, {"level": "level"}),
    "achievement": (AchievementCond, {"achievement": "achievement_id"}, {}),
    "flag": (FlagCond, {"flag": "key"}, {"value": "expected"}),
    "stat": (StatCond, {"stat": "stat", "value": "value"}, {"op": "op"}),
    "choice": (ChoiceCond, {"choice": "choice_id"}, {"option": "option"}),
}


def condition_from_dict(data: Any, path: str = "condition", _depth: int = 0) -> Condition:
    """Build a condition tree. Raises ConditionFormatError."""
    if _depth >= MAX_DEPTH:
        raise ConditionFormatError(path, f"nesting deeper than {MAX_DEPTH}")
    if not isinstance(data, dict):
        raise ConditionFormatError(path, f"expected an object, got {type(data).__name__}")
    kind = data.get("type")
    if kind == "always":
        return Always()
    if kind == "never":
        return Never()
    if kind in ("and", "or"):
        children = _field(data, "conditions", path)
        if not isinstance(children, list):
            raise ConditionFormatError(path, "'conditions' must be a list")
        built = [
            condition_from_dict(child, f"{path}.conditions[{i}]", _depth + 1)
            for i, child in enumerate(children)
        ]
        return And(*built) if kind == "and" else Or(*built)
    if kind == "not":
        child = _field(data, "condition", path)
        return Not(condition_from_dict(child, f"{path}.condition", _depth + 1))
    if kind in _LEAVES:
        factory, required, optional = _LEAVES[kind]
        return _leaf(factory, data, path, required, optional)
    raise ConditionFormatError(path, f"unknown condition type {kind!r}")


def condition_to_dict(condition: Condition) -> dict[str, Any]:
    """Inverse of condition_from_dict. Optional fields are omitted when unset."""
    if isinstance(condition, Always):
        return {"type": "always"}
    if isinstance(condition, Never):
        return {"type": "never"}
    if isinstance(condition, And):
        return {"type": "and", "conditions": [condition_to_dict(c) for c in condition.children]}
    if isinstance(condition, Or):
        return {"type": "or", "conditions": [condition_to_dict(c) for c in condition.children]}
    if isinstance(condition, Not):
        return {"type": "not", "condition": condition_to_dict(condition.child)}
    if isinstance(condition, ResourceCond):
        return {
            "type": "resource",
            "resource": condition.resource_id,
            "amount": amount_to_str(condition.amount),
            "op": condition.op.value,
        }
    if isinstance(condition, TimeCond):
        return {
            "type": "time",
            "seconds": condition.seconds,
            "op": condition.op.value,
            "scope": condition.scope.value,
        }
    if isinstance(condition, PhaseCond):
        data: dict[str, Any] = {"type": "phase", "phase": condition.phase, "op": condition.op.value}
        if condition.completed:
            data["completed"] = True
        return data
    if isinstance(condition, ProducerCond):
        return {
            "type": "producer",
            "producer": condition.producer_id,
            "count": condition.count,
            "op": condition.op.value,
        }
    if isinstance(condition, UpgradeCond):
        return {"type": "upgrade", "upgrade": condition.upgrade_id, "level": condition.level}
    if isinstance(condition, AchievementCond):
        return {"type": "achievement", "achievement": condition.achievement_id}
    if isinstance(condition, FlagCond):
        data = {"type": "flag", "flag": condition.key}
        if condition.expected is not None:
            data["value"] = condition.expected
        return data
    if isinstance(condition, StatCond):
        return {
            "type": "stat",
            "stat": condition.stat,
            "value": condition.value,
            "op": condition.op.value,
        }
    if isinstance(condition, ChoiceCond):
        data = {"type": "choice", "choice": condition.choice_id}
        if condition.option is not None:
            data["option"] = condition.option
        return data
    raise TypeError(f"not a condition: {type(condition).__name__}")
