"""TriggerScheduler - exactly-once trigger firing with a stable presentation queue."""
from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable

from idle.types import SnapshotError
from idle_condition import Op, PhaseCond, evaluate_all

from idle_event.types import QueuedTrigger, TriggerDef

if TYPE_CHECKING:
    from idle.diagnostics import Diagnostics
    from idle_condition import Condition, EvaluationContext

logger = logging.getLogger(__name__)


class TriggerScheduler:
    """Evaluates authored triggers and queues the ones that fire.

    The definition table is fixed at construction. Runtime state is the
    fired markers of one-time triggers, the last observed truth of
    edge-triggered ones, and the presentation queue.
    """

    def __init__(
        self,
        definitions: Iterable[TriggerDef],
        resolver: Callable[[str], bool] | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        table: dict[str, TriggerDef] = {}
        for defn in definitions:
            if defn.id in table:
                raise ValueError(f"duplicate trigger id {defn.id!r}")
            table[defn.id] = defn
        self._definitions = MappingProxyType(table)
        self._order: tuple[TriggerDef, ...] = tuple(table.values())
        self._conditions: dict[str, tuple[Condition, ...]] = {
            d.id: self._conditions_for(d) for d in self._order
        }
        self._resolver = resolver
        self._diagnostics = diagnostics
        self._fired: dict[str, float] = {}
        self._last_truth: dict[str, bool] = {}
        self._fire_counts: dict[str, int] = {}
        self._queue: deque[QueuedTrigger] = deque()

    @staticmethod
    def _conditions_for(defn: TriggerDef) -> tuple[Condition, ...]:
        if defn.phase is None:
            return defn.conditions
        return (PhaseCond(defn.phase, Op.EQ),) + defn.conditions

    # --- Queries ---

    def definition(self, trigger_id: str) -> TriggerDef | None:
        return self._definitions.get(trigger_id)

    def definitions(self) -> tuple[TriggerDef, ...]:
        return self._order

    def has_fired(self, trigger_id: str) -> bool:
        """True once a one-time trigger has fired."""
        return trigger_id in self._fired

    def fired_at(self, trigger_id: str) -> float | None:
        return self._fired.get(trigger_id)

    def fire_count(self, trigger_id: str) -> int:
        return self._fire_counts.get(trigger_id, 0)

    def pending(self) -> list[QueuedTrigger]:
        return list(self._queue)

    # --- Scheduling pass ---

    def evaluate(self, ctx: EvaluationContext, now: float) -> list[QueuedTrigger]:
        """Run one pass against *ctx*. Returns what was queued, in queue order.

        Newly satisfied triggers are ordered by descending priority with
        authoring order breaking ties. One-time triggers are marked fired
        before they are queued.
        """
        satisfied: list[TriggerDef] = []
        for defn in self._order:
            if defn.one_time:
                if defn.id in self._fired:
                    continue
                if evaluate_all(self._conditions[defn.id], ctx, self._diagnostics):
                    satisfied.append(defn)
                continue
            holds = evaluate_all(self._conditions[defn.id], ctx, self._diagnostics)
            was = self._last_truth.get(defn.id, False)
            self._last_truth[defn.id] = holds
            if holds and not was:
                satisfied.append(defn)

        satisfied.sort(key=lambda d: -d.priority)
        return [self._fire(defn, now) for defn in satisfied]

    def fire(self, trigger_id: str, now: float) -> QueuedTrigger | None:
        """Queue a trigger without checking its conditions.

        A one-time trigger that already fired is not queued again.
        Raises KeyError for an unknown id.
        """
        defn = self._definitions[trigger_id]
        if defn.one_time and defn.id in self._fired:
            return None
        return self._fire(defn, now)

    def _fire(self, defn: TriggerDef, now: float) -> QueuedTrigger:
        if defn.one_time:
            self._fired[defn.id] = now
        self._fire_counts[defn.id] = self._fire_counts.get(defn.id, 0) + 1
        if self._resolver is not None and not self._resolver(defn.content_id):
            message = f"Trigger {defn.id!r} references unknown content {defn.content_id!r}"
            if self._diagnostics is not None:
                self._diagnostics.report(
                    "trigger.unresolved_content",
                    message,
                    trigger=defn.id,
                    content=defn.content_id,
                )
            else:
                logger.warning(message)
        item = QueuedTrigger(
            trigger_id=defn.id,
            content_id=defn.content_id,
            queued_at=now,
            due_at=now + defn.delay,
            priority=defn.priority,
            pauses_game=defn.pauses_game,
            kind=defn.kind,
        )
        self._queue.append(item)
        logger.debug("Queued trigger %s due at %.2f", defn.id, item.due_at)
        return item

    # --- Presentation queue ---

    def next_due(self, now: float) -> QueuedTrigger | None:
        """Peek the head of the queue if it is due.

        The head blocks everything behind it, so items are delivered in
        the order they were queued even when later delays finish first.
        """
        if self._queue and self._queue[0].is_due(now):
            return self._queue[0]
        return None

    def pop_due(self, now: float) -> QueuedTrigger | None:
        if self.next_due(now) is None:
            return None
        return self._queue.popleft()

    def clear_queue(self) -> int:
        """Withdraw everything not yet presented. Returns how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        return dropped

    def reset_run(self) -> None:
        """Forget run-scoped fired markers and edge memory; clear the queue."""
        self._fired = {
            tid: at for tid, at in self._fired.items() if self._definitions[tid].eternal
        }
        self._last_truth = {
            tid: v for tid, v in self._last_truth.items() if self._definitions[tid].eternal
        }
        self._queue.clear()

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize runtime state (not definitions)."""
        return {
            "fired": dict(sorted(self._fired.items())),
            "edges": sorted(tid for tid, v in self._last_truth.items() if v),
            "counts": dict(sorted(self._fire_counts.items())),
            "queue": [
                {"trigger_id": q.trigger_id, "queued_at": q.queued_at, "due_at": q.due_at}
                for q in self._queue
            ],
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Restore runtime state. Ids no longer defined are dropped."""
        try:
            fired = {str(k): float(v) for k, v in data.get("fired", {}).items()}
            edges = {str(tid) for tid in data.get("edges", [])}
            counts = {str(k): int(v) for k, v in data.get("counts", {}).items()}
            raw_queue = [
                (str(q["trigger_id"]), float(q["queued_at"]), float(q["due_at"]))
                for q in data.get("queue", [])
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"Malformed trigger state: {exc}") from exc

        unknown = (set(fired) | edges | set(counts) | {q[0] for q in raw_queue}) - set(
            self._definitions
        )
        if unknown:
            logger.warning("Dropping state for unknown triggers: %s", sorted(unknown))

        self._fired = {k: v for k, v in fired.items() if k in self._definitions}
        self._last_truth = {
            tid: True
            for tid in edges
            if tid in self._definitions and self._definitions[tid].edge_triggered
        }
        self._fire_counts = {k: v for k, v in counts.items() if k in self._definitions}
        self._queue = deque()
        for tid, queued_at, due_at in raw_queue:
            defn = self._definitions.get(tid)
            if defn is None:
                continue
            self._queue.append(
                QueuedTrigger(
                    trigger_id=tid,
                    content_id=defn.content_id,
                    queued_at=queued_at,
                    due_at=due_at,
                    priority=defn.priority,
                    pauses_game=defn.pauses_game,
                    kind=defn.kind,
                )
            )
