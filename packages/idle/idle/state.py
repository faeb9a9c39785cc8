"""GameState - live stores queried by conditions and mutated by consequences."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Union

from idle import amount as amt
from idle.amount import Amount, AmountLike, to_amount
from idle.dirty import DirtyCategory, DirtySet
from idle.types import SnapshotError

FlagValue = Union[bool, str, int, float]
StatValue = Union[int, float]


@dataclass
class Multiplier:
    """Production multiplier. ``remaining`` is None for permanent ones."""

    id: str
    value: Amount
    resource_id: str | None = None
    remaining: float | None = None

    @property
    def permanent(self) -> bool:
        return self.remaining is None


@dataclass(frozen=True)
class ContentRequest:
    """A dialogue or log queued by a consequence, waiting for presentation."""

    kind: str
    content_id: str


class GameState:
    """Resource, ownership, discovery and story stores.

    Every mutator marks the matching dirty category so discovery checks
    can skip definitions whose inputs did not change.
    """

    def __init__(self) -> None:
        self._resources: dict[str, Amount] = {}
        self._producers: dict[str, int] = {}
        self._upgrades: dict[str, int] = {}
        self._unlocked_upgrades: set[str] = set()
        self._unlocked_producers: set[str] = set()
        self._endings: set[str] = set()
        self._achievements: dict[str, float] = {}
        self._secrets: dict[str, float] = {}
        self._flags: dict[str, FlagValue] = {}
        self._stats: dict[str, StatValue] = {}
        self._choices: dict[str, str] = {}
        self._multipliers: dict[str, Multiplier] = {}
        self._content_requests: deque[ContentRequest] = deque()
        self.run_time: float = 0.0
        self.idle_time: float = 0.0
        self.total_time: float = 0.0
        self.dirty = DirtySet()

    # -- Resources --

    def resource(self, resource_id: str) -> Amount:
        return self._resources.get(resource_id, amt.ZERO)

    def resources(self) -> dict[str, Amount]:
        return dict(self._resources)

    def add_resource(self, resource_id: str, amount: AmountLike) -> Amount:
        """Add (or subtract, if negative) and return the new total."""
        delta = to_amount(amount)
        total = amt.add(self.resource(resource_id), delta)
        if total < amt.ZERO:
            raise ValueError(
                f"{resource_id} would drop below zero ({self.resource(resource_id)} + {delta})"
            )
        self._resources[resource_id] = total
        self.dirty.mark(DirtyCategory.RESOURCE)
        return total

    def set_resource(self, resource_id: str, amount: AmountLike) -> None:
        value = to_amount(amount)
        if value < amt.ZERO:
            raise ValueError(f"amount must be >= 0, got {value}")
        self._resources[resource_id] = value
        self.dirty.mark(DirtyCategory.RESOURCE)

    def spend(self, resource_id: str, amount: AmountLike) -> bool:
        """Remove *amount* if available. Returns False when insufficient."""
        cost = to_amount(amount)
        if cost < amt.ZERO:
            raise ValueError(f"amount must be >= 0, got {cost}")
        if self.resource(resource_id) < cost:
            return False
        self._resources[resource_id] = amt.subtract(self.resource(resource_id), cost)
        self.dirty.mark(DirtyCategory.RESOURCE)
        return True

    def multiply_resource(self, resource_id: str, factor: AmountLike) -> Amount:
        value = to_amount(factor)
        if value < amt.ZERO:
            raise ValueError(f"factor must be >= 0, got {value}")
        total = amt.multiply(self.resource(resource_id), value)
        self._resources[resource_id] = total
        self.dirty.mark(DirtyCategory.RESOURCE)
        return total

    # -- Producers and upgrades --

    def producer_count(self, producer_id: str) -> int:
        return self._producers.get(producer_id, 0)

    def add_producer(self, producer_id: str, count: int = 1) -> int:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        total = self.producer_count(producer_id) + count
        self._producers[producer_id] = total
        self.dirty.mark(DirtyCategory.PRODUCER)
        return total

    def upgrade_level(self, upgrade_id: str) -> int:
        return self._upgrades.get(upgrade_id, 0)

    def purchase_upgrade(self, upgrade_id: str) -> int:
        """Raise the upgrade one level. Returns the new level."""
        level = self.upgrade_level(upgrade_id) + 1
        self._upgrades[upgrade_id] = level
        self.dirty.mark(DirtyCategory.UPGRADE)
        return level

    def unlock_upgrade(self, upgrade_id: str) -> bool:
        if upgrade_id in self._unlocked_upgrades:
            return False
        self._unlocked_upgrades.add(upgrade_id)
        self.dirty.mark(DirtyCategory.UPGRADE)
        return True

    def is_upgrade_unlocked(self, upgrade_id: str) -> bool:
        return upgrade_id in self._unlocked_upgrades

    def unlock_producer(self, producer_id: str) -> bool:
        if producer_id in self._unlocked_producers:
            return False
        self._unlocked_producers.add(producer_id)
        self.dirty.mark(DirtyCategory.PRODUCER)
        return True

    def is_producer_unlocked(self, producer_id: str) -> bool:
        return producer_id in self._unlocked_producers

    def producers(self) -> dict[str, int]:
        return dict(self._producers)

    def upgrades(self) -> dict[str, int]:
        return dict(self._upgrades)

    # -- Achievements, secrets, endings --

    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self._achievements

    def unlock_achievement(self, achievement_id: str, at: float = 0.0) -> bool:
        if achievement_id in self._achievements:
            return False
        self._achievements[achievement_id] = at
        self.dirty.mark(DirtyCategory.ACHIEVEMENT)
        return True

    def achievements(self) -> dict[str, float]:
        return dict(self._achievements)

    def has_secret(self, secret_id: str) -> bool:
        return secret_id in self._secrets

    def reveal_secret(self, secret_id: str, at: float = 0.0) -> bool:
        if secret_id in self._secrets:
            return False
        self._secrets[secret_id] = at
        self.dirty.mark(DirtyCategory.SECRET)
        return True

    def secrets(self) -> dict[str, float]:
        return dict(self._secrets)

    def unlock_ending(self, ending_id: str) -> bool:
        if ending_id in self._endings:
            return False
        self._endings.add(ending_id)
        self.dirty.mark(DirtyCategory.FLAG)
        return True

    def has_ending(self, ending_id: str) -> bool:
        return ending_id in self._endings

    # -- Flags, stats, choices --

    def flag(self, key: str) -> FlagValue | None:
        return self._flags.get(key)

    def has_flag(self, key: str) -> bool:
        """Truthy check: unset, False, 0 and "" all count as not set."""
        value = self._flags.get(key)
        return value is not None and value is not False and value != 0 and value != ""

    def set_flag(self, key: str, value: FlagValue = True) -> None:
        self._flags[key] = value
        self.dirty.mark(DirtyCategory.FLAG)

    def unset_flag(self, key: str) -> bool:
        if key not in self._flags:
            return False
        del self._flags[key]
        self.dirty.mark(DirtyCategory.FLAG)
        return True

    def flags(self) -> dict[str, FlagValue]:
        return dict(self._flags)

    def stat(self, name: str) -> StatValue:
        return self._stats.get(name, 0)

    def set_stat(self, name: str, value: StatValue) -> None:
        self._stats[name] = value
        self.dirty.mark(DirtyCategory.STAT)

    def increment_stat(self, name: str, by: StatValue = 1) -> StatValue:
        value = self.stat(name) + by
        self._stats[name] = value
        self.dirty.mark(DirtyCategory.STAT)
        return value

    def stats(self) -> dict[str, StatValue]:
        return dict(self._stats)

    def choice(self, choice_id: str) -> str | None:
        return self._choices.get(choice_id)

    def record_choice(self, choice_id: str, option: str) -> None:
        self._choices[choice_id] = option
        self.dirty.mark(DirtyCategory.CHOICE)

    def choices(self) -> dict[str, str]:
        return dict(self._choices)

    # -- Multipliers --

    def add_multiplier(self, multiplier: Multiplier) -> None:
        """Add or replace a multiplier by id."""
        if multiplier.value <= amt.ZERO:
            raise ValueError(f"multiplier value must be > 0, got {multiplier.value}")
        if multiplier.remaining is not None and multiplier.remaining <= 0:
            raise ValueError(f"duration must be > 0, got {multiplier.remaining}")
        self._multipliers[multiplier.id] = multiplier

    def multiplier(self, multiplier_id: str) -> Multiplier | None:
        return self._multipliers.get(multiplier_id)

    def multiplier_for(self, resource_id: str) -> Amount:
        """Product of global multipliers and those targeting *resource_id*."""
        total = amt.ONE
        for m in self._multipliers.values():
            if m.resource_id is None or m.resource_id == resource_id:
                total = amt.multiply(total, m.value)
        return total

    def tick_multipliers(self, dt: float) -> list[str]:
        """Count down timed multipliers. Returns ids that expired."""
        expired: list[str] = []
        for m in self._multipliers.values():
            if m.remaining is None:
                continue
            m.remaining -= dt
            if m.remaining <= 0:
                expired.append(m.id)
        for mid in expired:
            del self._multipliers[mid]
        return expired

    # -- Time --

    def advance_time(self, dt: float) -> None:
        self.run_time += dt
        self.idle_time += dt
        self.total_time += dt
        self.dirty.mark(DirtyCategory.TIME)

    def note_interaction(self) -> None:
        """Player acted: the idle timer starts over."""
        self.idle_time = 0.0
        self.dirty.mark(DirtyCategory.TIME)

    # -- Presentation requests --

    def request_content(self, kind: str, content_id: str) -> None:
        self._content_requests.append(ContentRequest(kind=kind, content_id=content_id))
        self.dirty.mark(DirtyCategory.LOG)

    def pending_content(self) -> list[ContentRequest]:
        return list(self._content_requests)

    def pop_content_request(self) -> ContentRequest | None:
        """Oldest queued request, removed from the queue."""
        if not self._content_requests:
            return None
        return self._content_requests.popleft()

    def drain_content_requests(self) -> list[ContentRequest]:
        drained = list(self._content_requests)
        self._content_requests.clear()
        return drained

    def clear_content_requests(self) -> None:
        self._content_requests.clear()

    # -- Prestige --

    def reset_run(self, keep_resources: Iterable[str] = ()) -> None:
        """Clear run-scoped stores. Eternal progress is kept."""
        kept = set(keep_resources)
        self._resources = {k: v for k, v in self._resources.items() if k in kept}
        self._producers.clear()
        self._upgrades.clear()
        self._unlocked_upgrades.clear()
        self._unlocked_producers.clear()
        self._flags.clear()
        self._choices.clear()
        self._multipliers = {
            k: m for k, m in self._multipliers.items() if m.permanent
        }
        self._content_requests.clear()
        self.run_time = 0.0
        self.idle_time = 0.0
        self.dirty.mark_all(DirtyCategory)

    # -- Snapshot / restore --

    def snapshot(self) -> dict[str, Any]:
        return {
            "resources": {
                k: amt.amount_to_str(v) for k, v in sorted(self._resources.items())
            },
            "producers": dict(sorted(self._producers.items())),
            "upgrades": dict(sorted(self._upgrades.items())),
            "unlocked_upgrades": sorted(self._unlocked_upgrades),
            "unlocked_producers": sorted(self._unlocked_producers),
            "endings": sorted(self._endings),
            "achievements": dict(sorted(self._achievements.items())),
            "secrets": dict(sorted(self._secrets.items())),
            "flags": dict(sorted(self._flags.items())),
            "stats": dict(sorted(self._stats.items())),
            "choices": dict(sorted(self._choices.items())),
            "multipliers": [
                {
                    "id": m.id,
                    "value": amt.amount_to_str(m.value),
                    "resource_id": m.resource_id,
                    "remaining": m.remaining,
                }
                for _, m in sorted(self._multipliers.items())
            ],
            "content_requests": [
                [r.kind, r.content_id] for r in self._content_requests
            ],
            "run_time": self.run_time,
            "idle_time": self.idle_time,
            "total_time": self.total_time,
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Replace all stores. Nothing changes if the data is malformed."""
        if not isinstance(data, dict):
            raise SnapshotError(f"Malformed game state: expected an object, got {type(data).__name__}")
        try:
            resources = {
                k: amt.amount_from_str(v) for k, v in _section(data, "resources", dict).items()
            }
            producers = {k: int(v) for k, v in _section(data, "producers", dict).items()}
            upgrades = {k: int(v) for k, v in _section(data, "upgrades", dict).items()}
            unlocked_upgrades = set(_section(data, "unlocked_upgrades", list))
            unlocked_producers = set(_section(data, "unlocked_producers", list))
            endings = set(_section(data, "endings", list))
            achievements = {k: float(v) for k, v in _section(data, "achievements", dict).items()}
            secrets = {k: float(v) for k, v in _section(data, "secrets", dict).items()}
            flags = dict(_section(data, "flags", dict))
            stats = dict(_section(data, "stats", dict))
            choices = {k: str(v) for k, v in _section(data, "choices", dict).items()}
            multipliers = {}
            for m_data in _section(data, "multipliers", list):
                m = Multiplier(
                    id=m_data["id"],
                    value=amt.amount_from_str(m_data["value"]),
                    resource_id=m_data.get("resource_id"),
                    remaining=m_data.get("remaining"),
                )
                multipliers[m.id] = m
            requests = deque(
                ContentRequest(kind=str(kind), content_id=str(cid))
                for kind, cid in _section(data, "content_requests", list)
            )
            run_time = float(data.get("run_time", 0.0))
            idle_time = float(data.get("idle_time", 0.0))
            total_time = float(data.get("total_time", 0.0))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"Malformed game state: {exc}") from exc

        self._resources = resources
        self._producers = producers
        self._upgrades = upgrades
        self._unlocked_upgrades = unlocked_upgrades
        self._unlocked_producers = unlocked_producers
        self._endings = endings
        self._achievements = achievements
        self._secrets = secrets
        self._flags = flags
        self._stats = stats
        self._choices = choices
        self._multipliers = multipliers
        self._content_requests = requests
        self.run_time = run_time
        self.idle_time = idle_time
        self.total_time = total_time
        self.dirty.mark_all(DirtyCategory)


def _section(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key, kind())
    if not isinstance(value, kind):
        raise TypeError(f"{key!r} must be a {kind.__name__}, got {type(value).__name__}")
    return value
