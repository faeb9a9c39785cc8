"""DiscoveryTracker - debounced condition checks for achievements and secrets."""
from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable

from idle.dirty import ALL_CATEGORIES, DirtyCategory
from idle.types import SnapshotError
from idle_condition import categories_of, evaluate, progress
from idle_consequence import RevealSecret, UnlockAchievement

from idle_discovery.types import DiscoveryDef, Notification

if TYPE_CHECKING:
    from idle import GameState
    from idle.diagnostics import Diagnostics
    from idle_condition import EvaluationContext
    from idle_consequence import Consequence, ConsequenceApplier

logger = logging.getLogger(__name__)

# kind -> (grant consequence, ownership check, own dirty category)
_KINDS: dict[str, tuple[Callable[[str], Consequence], Callable[[GameState, str], bool], DirtyCategory]] = {
    "achievement": (
        UnlockAchievement,
        lambda state, i: state.has_achievement(i),
        DirtyCategory.ACHIEVEMENT,
    ),
    "secret": (
        RevealSecret,
        lambda state, i: state.has_secret(i),
        DirtyCategory.SECRET,
    ),
}


class DiscoveryTracker:
    """Checks a fixed set of definitions and records what was found.

    A definition is only re-checked when a category it watches was dirty.
    Ids granted by other means (for example a trigger consequence) are
    picked up as discovered without evaluating their condition.
    """

    def __init__(
        self,
        kind: str,
        definitions: Iterable[DiscoveryDef],
        applier: ConsequenceApplier,
        grant: Callable[[str], Consequence] | None = None,
        owned: Callable[[GameState, str], bool] | None = None,
        notification_cap: int = 10,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        if kind not in _KINDS:
            raise ValueError(f"kind must be one of {sorted(_KINDS)}, got {kind!r}")
        default_grant, default_owned, own_category = _KINDS[kind]
        if notification_cap < 1:
            raise ValueError(f"notification_cap must be >= 1, got {notification_cap}")

        table: dict[str, DiscoveryDef] = {}
        for defn in definitions:
            if defn.id in table:
                raise ValueError(f"duplicate {kind} id {defn.id!r}")
            table[defn.id] = defn
        self._kind = kind
        self._definitions = MappingProxyType(table)
        self._applier = applier
        self._grant = grant or default_grant
        self._owned = owned or default_owned
        self._cap = notification_cap
        self._diagnostics = diagnostics
        self._watches: dict[str, frozenset[DirtyCategory]] = {}
        for defn in table.values():
            watched = defn.watches or categories_of(defn.condition)
            if defn.prerequisite is not None:
                watched = watched | {own_category}
            self._watches[defn.id] = watched or ALL_CATEGORIES
        self._discovered: dict[str, float] = {}
        self._notifications: deque[Notification] = deque()

    @property
    def kind(self) -> str:
        return self._kind

    # --- Queries ---

    def definition(self, discovery_id: str) -> DiscoveryDef | None:
        return self._definitions.get(discovery_id)

    def definitions(self) -> tuple[DiscoveryDef, ...]:
        return tuple(self._definitions.values())

    def is_discovered(self, discovery_id: str) -> bool:
        return discovery_id in self._discovered

    def discovered(self) -> dict[str, float]:
        return dict(self._discovered)

    def watches(self, discovery_id: str) -> frozenset[DirtyCategory]:
        return self._watches[discovery_id]

    def visible(self) -> list[DiscoveryDef]:
        """Definitions a player may see: not hidden, or already found."""
        return [
            d for d in self._definitions.values()
            if not d.hidden or d.id in self._discovered
        ]

    def progress_of(self, discovery_id: str, ctx: EvaluationContext) -> float:
        if discovery_id in self._discovered:
            return 1.0
        return progress(self._definitions[discovery_id].condition, ctx, self._diagnostics)

    # --- Checking ---

    def check(
        self,
        ctx: EvaluationContext,
        state: GameState,
        dirty: frozenset[DirtyCategory] | None = None,
        now: float = 0.0,
    ) -> list[str]:
        """Discover every definition whose condition now holds.

        With *dirty* given, definitions watching none of those categories
        are skipped. Returns the ids discovered by this call.
        """
        found: list[str] = []
        for defn in self._definitions.values():
            if defn.id in self._discovered:
                continue
            if self._owned(state, defn.id):
                self._record(defn, state, now, grant=False)
                found.append(defn.id)
                continue
            if dirty is not None and not (self._watches[defn.id] & dirty):
                continue
            if defn.prerequisite is not None and defn.prerequisite not in self._discovered:
                continue
            if evaluate(defn.condition, ctx, self._diagnostics):
                self._record(defn, state, now, grant=True)
                found.append(defn.id)
        return found

    def discover(self, discovery_id: str, state: GameState, now: float = 0.0) -> bool:
        """Discover without checking the condition. False if already found.

        Raises KeyError for an unknown id.
        """
        defn = self._definitions[discovery_id]
        if defn.id in self._discovered:
            return False
        self._record(defn, state, now, grant=not self._owned(state, defn.id))
        return True

    def _record(self, defn: DiscoveryDef, state: GameState, now: float, grant: bool) -> None:
        self._discovered[defn.id] = now
        source = f"{self._kind}:{defn.id}"
        if grant:
            self._applier.apply(self._grant(defn.id), state, source=source, now=now)
        self._applier.apply_all(defn.consequences, state, source=source, now=now)
        self._push_notification(Notification(defn.id, self._kind, defn.name or defn.id, now))
        logger.info("Discovered %s %s", self._kind, defn.id)

    # --- Notifications ---

    def _push_notification(self, note: Notification) -> None:
        if len(self._notifications) >= self._cap:
            victim = next((n for n in self._notifications if n.shown), self._notifications[0])
            self._notifications.remove(victim)
        self._notifications.append(note)

    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def next_notification(self) -> Notification | None:
        """Oldest notification not yet shown."""
        return next((n for n in self._notifications if not n.shown), None)

    def mark_shown(self, discovery_id: str) -> bool:
        for note in self._notifications:
            if note.id == discovery_id and not note.shown:
                note.shown = True
                return True
        return False

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        return {
            "discovered": dict(sorted(self._discovered.items())),
            "notifications": [
                {"id": n.id, "at": n.at, "shown": n.shown} for n in self._notifications
            ],
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Restore found ids and notifications. Unknown ids are dropped."""
        try:
            discovered = {str(k): float(v) for k, v in data.get("discovered", {}).items()}
            raw_notes = [
                (str(n["id"]), float(n["at"]), bool(n.get("shown", False)))
                for n in data.get("notifications", [])
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"Malformed {self._kind} state: {exc}") from exc
        unknown = set(discovered) - set(self._definitions)
        if unknown:
            logger.warning("Dropping unknown %s ids: %s", self._kind, sorted(unknown))
        self._discovered = {k: v for k, v in discovered.items() if k in self._definitions}
        self._notifications = deque()
        for nid, at, shown in raw_notes[-self._cap:]:
            defn = self._definitions.get(nid)
            if defn is None:
                continue
            self._notifications.append(
                Notification(nid, self._kind, defn.name or nid, at, shown)
            )
