"""Authoring format for consequences: plain dicts keyed by ``type``."""
from __future__ import annotations

from typing import Any, Callable

from idle.amount import amount_to_str

from idle_consequence.types import (
    AddMultiplier,
    AddResource,
    Consequence,
    MultiplyResource,
    QueueDialogue,
    QueueLog,
    RevealSecret,
    SetFlag,
    UnlockAchievement,
    UnlockEnding,
    UnlockProducer,
    UnlockUpgrade,
    UnsetFlag,
)


class ConsequenceFormatError(ValueError):
    """Malformed authored consequence. ``path`` locates it in the source data."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


# type -> (class, {authored key: attribute}, {optional key: attribute})
_KINDS: dict[str, tuple[Callable[..., Consequence], dict[str, str], dict[str, str]]] = {
    "add_resource": (AddResource, {"resource": "resource_id", "amount": "amount"}, {}),
    "multiply_resource": (MultiplyResource, {"resource": "resource_id", "factor": "factor"}, {}),
    "set_flag": (SetFlag, {"flag": "key"}, {"value": "value"}),
    "unset_flag": (UnsetFlag, {"flag": "key"}, {}),
    "unlock_achievement": (UnlockAchievement, {"achievement": "achievement_id"}, {}),
    "reveal_secret": (RevealSecret, {"secret": "secret_id"}, {}),
    "unlock_upgrade": (UnlockUpgrade, {"upgrade": "upgrade_id"}, {}),
    "unlock_producer": (UnlockProducer, {"producer": "producer_id"}, {}),
    "unlock_ending": (UnlockEnding, {"ending": "ending_id"}, {}),
    "add_multiplier": (
        AddMultiplier,
        {"multiplier": "multiplier_id", "value": "value"},
        {"resource": "resource_id", "duration": "duration"},
    ),
    "queue_dialogue": (QueueDialogue, {"dialogue": "dialogue_id"}, {}),
    "queue_log": (QueueLog, {"log": "log_id"}, {}),
}

_TYPE_NAMES: dict[type, str] = {cls: name for name, (cls, _, _) in _KINDS.items()}  # type: ignore[misc]


def consequence_from_dict(data: Any, path: str = "consequence") -> Consequence:
    """Build one consequence. Raises ConsequenceFormatError."""
    if not isinstance(data, dict):
        raise ConsequenceFormatError(path, f"expected an object, got {type(data).__name__}")
    kind = data.get("type")
    if kind not in _KINDS:
        raise ConsequenceFormatError(path, f"unknown consequence type {kind!r}")
    factory, required, optional = _KINDS[kind]
    kwargs = {}
    for key, attr in required.items():
        if key not in data:
            raise ConsequenceFormatError(path, f"missing field {key!r}")
        kwargs[attr] = data[key]
    for key, attr in optional.items():
        if key in data:
            kwargs[attr] = data[key]
    try:
        return factory(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConsequenceFormatError(path, str(exc)) from exc


def consequences_from_list(data: Any, path: str = "consequences") -> tuple[Consequence, ...]:
    if not isinstance(data, list):
        raise ConsequenceFormatError(path, "expected a list")
    return tuple(consequence_from_dict(item, f"{path}[{i}]") for i, item in enumerate(data))


def consequence_to_dict(consequence: Consequence) -> dict[str, Any]:
    kind = _TYPE_NAMES.get(type(consequence))
    if kind is None:
        raise TypeError(f"not a consequence: {type(consequence).__name__}")
    _, required, optional = _KINDS[kind]
    data: dict[str, Any] = {"type": kind}
    for key, attr in required.items():
        data[key] = getattr(consequence, attr)
    for key, attr in optional.items():
        value = getattr(consequence, attr)
        if value is not None:
            data[key] = value
    for key in ("amount", "factor", "value"):
        if key in data and not isinstance(consequence, SetFlag):
            data[key] = amount_to_str(data[key])
    return data
