"""Authored content tables and the structural parser that builds them.

Content arrives as plain JSON-compatible data. ``parse_content`` turns every
well-formed entry into an immutable definition and records a
``ValidationIssue`` for each entry it has to skip. Cross-reference checks
live in ``idle_game.validation``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, TypeVar

from idle import amount as amt
from idle.amount import Amount, to_amount
from idle_condition import (
    CONDITION_TYPES,
    Always,
    Condition,
    ConditionFormatError,
    Never,
    condition_from_dict,
)
from idle_consequence import ConsequenceFormatError, consequences_from_list
from idle_discovery import DiscoveryDef
from idle_event import TriggerDef
from idle_phase import PhaseDef

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str
    severity: str = "error"  # "error" | "warning"

    def __str__(self) -> str:
        return f"[{self.severity}] {self.path}: {self.message}"


class ContentError(Exception):
    """Content that failed validation. ``issues`` holds every error found."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        lines = "\n".join(f"  {issue}" for issue in issues)
        super().__init__(f"{len(issues)} content error(s):\n{lines}")


def _costs(raw: Mapping[str, Any]) -> Mapping[str, Amount]:
    costs = {str(k): to_amount(v) for k, v in raw.items()}
    for resource_id, value in costs.items():
        if value < amt.ZERO:
            raise ValueError(f"cost of {resource_id!r} must be >= 0, got {value}")
    return MappingProxyType(costs)


@dataclass(frozen=True)
class ResourceDef:
    """A spendable quantity. Eternal resources survive a prestige reset."""

    id: str
    name: str = ""
    eternal: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ResourceDef id must be non-empty")


@dataclass(frozen=True)
class ProducerDef:
    """Something bought with resources that yields ``rate`` per second each."""

    id: str
    resource: str
    rate: Amount
    cost: Mapping[str, Amount] = field(default_factory=dict)
    growth: Amount = amt.ONE
    name: str = ""
    unlock: Condition = Always()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ProducerDef id must be non-empty")
        if not self.resource:
            raise ValueError(f"producer {self.id!r} needs a resource")
        rate = to_amount(self.rate)
        if rate < amt.ZERO:
            raise ValueError(f"rate must be >= 0, got {rate}")
        growth = to_amount(self.growth)
        if growth < amt.ONE:
            raise ValueError(f"growth must be >= 1, got {growth}")
        if not isinstance(self.unlock, CONDITION_TYPES):
            raise TypeError(f"producer {self.id!r} unlock must be a condition")
        object.__setattr__(self, "rate", rate)
        object.__setattr__(self, "growth", growth)
        object.__setattr__(self, "cost", _costs(self.cost))

    def cost_for(self, owned: int) -> dict[str, Amount]:
        """Price of the next unit when *owned* are already held."""
        scale = amt.power(self.growth, owned)
        return {k: amt.multiply(v, scale) for k, v in self.cost.items()}


@dataclass(frozen=True)
class UpgradeDef:
    id: str
    cost: Mapping[str, Amount] = field(default_factory=dict)
    requires: tuple[str, ...] = ()
    effects: tuple[Any, ...] = ()
    name: str = ""
    unlock: Condition = Always()
    max_level: int = 1

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("UpgradeDef id must be non-empty")
        if self.max_level < 1:
            raise ValueError(f"max_level must be >= 1, got {self.max_level}")
        if not isinstance(self.unlock, CONDITION_TYPES):
            raise TypeError(f"upgrade {self.id!r} unlock must be a condition")
        object.__setattr__(self, "cost", _costs(self.cost))
        object.__setattr__(self, "requires", tuple(self.requires))
        object.__setattr__(self, "effects", tuple(self.effects))


@dataclass(frozen=True)
class ChoiceDef:
    """A story decision. Each option carries the consequences of picking it."""

    id: str
    options: Mapping[str, tuple[Any, ...]]
    prompt: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ChoiceDef id must be non-empty")
        if not self.options:
            raise ValueError(f"choice {self.id!r} needs at least one option")
        object.__setattr__(
            self, "options", MappingProxyType({k: tuple(v) for k, v in self.options.items()})
        )


def _by_id(defs: tuple[Any, ...]) -> Mapping[str, Any]:
    table: dict[str, Any] = {}
    for defn in defs:
        table.setdefault(defn.id, defn)
    return MappingProxyType(table)


@dataclass(frozen=True, eq=False)
class GameContent:
    """Every authored definition, in authoring order. Never mutated.

    Lookups by id return the first definition with that id; duplicates are
    a validation error and never reach a running game.
    """

    resources: tuple[ResourceDef, ...] = ()
    producers: tuple[ProducerDef, ...] = ()
    upgrades: tuple[UpgradeDef, ...] = ()
    phases: tuple[PhaseDef, ...] = ()
    triggers: tuple[TriggerDef, ...] = ()
    achievements: tuple[DiscoveryDef, ...] = ()
    secrets: tuple[DiscoveryDef, ...] = ()
    choices: tuple[ChoiceDef, ...] = ()
    texts: Mapping[str, str] = field(default_factory=dict)
    _index: Mapping[str, Mapping[str, Any]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in (
            "resources", "producers", "upgrades", "phases",
            "triggers", "achievements", "secrets", "choices",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, "texts", MappingProxyType(dict(self.texts)))
        object.__setattr__(self, "_index", MappingProxyType({
            "resource": _by_id(self.resources),
            "producer": _by_id(self.producers),
            "upgrade": _by_id(self.upgrades),
            "trigger": _by_id(self.triggers),
            "achievement": _by_id(self.achievements),
            "secret": _by_id(self.secrets),
            "choice": _by_id(self.choices),
        }))

    def ids(self, kind: str) -> frozenset[str]:
        return frozenset(self._index[kind])

    def resource(self, resource_id: str) -> ResourceDef | None:
        return self._index["resource"].get(resource_id)

    def producer(self, producer_id: str) -> ProducerDef | None:
        return self._index["producer"].get(producer_id)

    def upgrade(self, upgrade_id: str) -> UpgradeDef | None:
        return self._index["upgrade"].get(upgrade_id)

    def trigger(self, trigger_id: str) -> TriggerDef | None:
        return self._index["trigger"].get(trigger_id)

    def choice(self, choice_id: str) -> ChoiceDef | None:
        return self._index["choice"].get(choice_id)

    def has_content(self, content_id: str) -> bool:
        return content_id in self.texts

    def text(self, content_id: str) -> str | None:
        return self.texts.get(content_id)

    def eternal_resources(self) -> tuple[str, ...]:
        return tuple(r.id for r in self.resources if r.eternal)


# --- Parsing ---

class _EntryError(Exception):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.message = message


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise _EntryError(path, f"missing field {key!r}")
    return data[key]


def _condition(data: Mapping[str, Any], key: str, path: str, default: Condition) -> Condition:
    if key not in data:
        return default
    return condition_from_dict(data[key], f"{path}.{key}")


def _consequences(data: Mapping[str, Any], key: str, path: str) -> tuple[Any, ...]:
    if key not in data:
        return ()
    return consequences_from_list(data[key], f"{path}.{key}")


def _mapping(data: Mapping[str, Any], key: str, path: str) -> Mapping[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise _EntryError(f"{path}.{key}", "expected an object")
    return value


def _list(data: Mapping[str, Any], key: str, path: str) -> list[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise _EntryError(f"{path}.{key}", "expected a list")
    return value


def _parse_resource(data: Mapping[str, Any], path: str) -> ResourceDef:
    return ResourceDef(
        id=_require(data, "id", path),
        name=data.get("name", ""),
        eternal=bool(data.get("eternal", False)),
    )


def _parse_producer(data: Mapping[str, Any], path: str) -> ProducerDef:
    return ProducerDef(
        id=_require(data, "id", path),
        resource=_require(data, "resource", path),
        rate=_require(data, "rate", path),
        cost=_mapping(data, "cost", path),
        growth=data.get("growth", 1),
        name=data.get("name", ""),
        unlock=_condition(data, "unlock", path, Always()),
    )


def _parse_upgrade(data: Mapping[str, Any], path: str) -> UpgradeDef:
    return UpgradeDef(
        id=_require(data, "id", path),
        cost=_mapping(data, "cost", path),
        requires=tuple(_list(data, "requires", path)),
        effects=_consequences(data, "effects", path),
        name=data.get("name", ""),
        unlock=_condition(data, "unlock", path, Always()),
        max_level=data.get("max_level", 1),
    )


def _parse_phase(data: Mapping[str, Any], path: str) -> PhaseDef:
    return PhaseDef(
        number=_require(data, "number", path),
        key=_require(data, "key", path),
        name=data.get("name", ""),
        unlock=_condition(data, "unlock", path, Always()),
        transition=_condition(data, "transition", path, Never()),
        auto_transition=bool(data.get("auto_transition", False)),
    )


def _parse_trigger(data: Mapping[str, Any], path: str) -> TriggerDef:
    one_time = data.get("one_time")
    if one_time is not None:
        one_time = bool(one_time)
    repeatable = bool(data.get("repeatable", False))
    if one_time and repeatable:
        raise _EntryError(path, "one_time and repeatable are mutually exclusive")
    conditions = tuple(
        condition_from_dict(c, f"{path}.conditions[{i}]")
        for i, c in enumerate(_list(data, "conditions", path))
    )
    return TriggerDef(
        id=_require(data, "id", path),
        content_id=_require(data, "content", path),
        conditions=conditions,
        priority=data.get("priority", 0),
        one_time=one_time,
        repeatable=repeatable,
        delay=float(data.get("delay", 0.0)),
        pauses_game=bool(data.get("pauses_game", False)),
        eternal=bool(data.get("eternal", False)),
        kind=data.get("kind", "log"),
        phase=data.get("phase"),
        title=data.get("title"),
        consequences=_consequences(data, "consequences", path),
    )


def _parse_discovery(data: Mapping[str, Any], path: str) -> DiscoveryDef:
    return DiscoveryDef(
        id=_require(data, "id", path),
        condition=condition_from_dict(_require(data, "condition", path), f"{path}.condition"),
        consequences=_consequences(data, "consequences", path),
        name=data.get("name", ""),
        hidden=bool(data.get("hidden", False)),
        hint=data.get("hint"),
        prerequisite=data.get("prerequisite"),
        watches=frozenset(_list(data, "watches", path)),
    )


def _parse_choice(data: Mapping[str, Any], path: str) -> ChoiceDef:
    options = {
        str(name): consequences_from_list(effects, f"{path}.options.{name}")
        for name, effects in _mapping(data, "options", path).items()
    }
    return ChoiceDef(
        id=_require(data, "id", path),
        options=options,
        prompt=data.get("prompt", ""),
    )


_SECTIONS: tuple[tuple[str, Callable[[Mapping[str, Any], str], Any]], ...] = (
    ("resources", _parse_resource),
    ("producers", _parse_producer),
    ("upgrades", _parse_upgrade),
    ("phases", _parse_phase),
    ("triggers", _parse_trigger),
    ("achievements", _parse_discovery),
    ("secrets", _parse_discovery),
    ("choices", _parse_choice),
)


def _parse_entry(
    parser: Callable[[Mapping[str, Any], str], T],
    data: Any,
    path: str,
    issues: list[ValidationIssue],
) -> T | None:
    if not isinstance(data, dict):
        issues.append(ValidationIssue(path, f"expected an object, got {type(data).__name__}"))
        return None
    try:
        return parser(data, path)
    except (ConditionFormatError, ConsequenceFormatError) as exc:
        issues.append(ValidationIssue(exc.path, exc.message))
    except _EntryError as exc:
        issues.append(ValidationIssue(exc.path, exc.message))
    except (TypeError, ValueError) as exc:
        issues.append(ValidationIssue(path, str(exc)))
    return None


def parse_content(raw: Any) -> tuple[GameContent, list[ValidationIssue]]:
    """Build every well-formed definition in *raw*.

    Malformed entries are left out and reported; the returned content holds
    the rest. No cross-references are checked here.
    """
    issues: list[ValidationIssue] = []
    if not isinstance(raw, dict):
        issues.append(ValidationIssue("content", f"expected an object, got {type(raw).__name__}"))
        return GameContent(), issues

    tables: dict[str, tuple[Any, ...]] = {}
    for section, parser in _SECTIONS:
        entries = raw.get(section, [])
        if not isinstance(entries, list):
            issues.append(ValidationIssue(section, "expected a list"))
            tables[section] = ()
            continue
        parsed = (
            _parse_entry(parser, entry, f"{section}[{i}]", issues)
            for i, entry in enumerate(entries)
        )
        tables[section] = tuple(d for d in parsed if d is not None)

    texts = raw.get("texts", {})
    if not isinstance(texts, dict):
        issues.append(ValidationIssue("texts", "expected an object"))
        texts = {}
    return GameContent(texts={str(k): str(v) for k, v in texts.items()}, **tables), issues
