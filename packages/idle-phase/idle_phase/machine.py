"""PhaseMachine - ordered progression through numbered phases."""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable

from idle.amount import Amount
from idle.types import SnapshotError
from idle_condition import evaluate, progress

from idle_phase.types import PhaseDef, PhaseProgress

if TYPE_CHECKING:
    from idle.diagnostics import Diagnostics
    from idle_condition import EvaluationContext

logger = logging.getLogger(__name__)


class _PhaseView:
    """Context overlay exposing the machine's live phase state."""

    def __init__(self, base: EvaluationContext, machine: PhaseMachine) -> None:
        self._base = base
        self._machine = machine

    def current_phase(self) -> int:
        return self._machine.current

    def phase_completed(self, phase: int) -> bool:
        return self._machine.is_completed(phase)

    def phase_time(self) -> float:
        return self._machine.phase_time

    def resource_amount(self, resource_id: str) -> Amount:
        return self._base.resource_amount(resource_id)

    def run_time(self) -> float:
        return self._base.run_time()

    def idle_time(self) -> float:
        return self._base.idle_time()

    def total_time(self) -> float:
        return self._base.total_time()

    def producer_count(self, producer_id: str) -> int:
        return self._base.producer_count(producer_id)

    def upgrade_level(self, upgrade_id: str) -> int:
        return self._base.upgrade_level(upgrade_id)

    def has_achievement(self, achievement_id: str) -> bool:
        return self._base.has_achievement(achievement_id)

    def flag(self, key: str) -> Any:
        return self._base.flag(key)

    def stat(self, name: str) -> int | float:
        return self._base.stat(name)

    def choice(self, choice_id: str) -> str | None:
        return self._base.choice(choice_id)


class PhaseMachine:
    """Tracks the current phase, the unlocked set and per-phase progress.

    Between a phase completing and the next one's unlock holding, the
    machine is *transitioning*: the completed phase stays current and the
    unlock is retried on every update. The unlocked set only grows and the
    current phase only increases, except through ``reset``.
    """

    def __init__(
        self,
        phases: Iterable[PhaseDef],
        on_unlock: Callable[[int], None] | None = None,
        on_exit: Callable[[int], None] | None = None,
        on_enter: Callable[[int, int], None] | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        table: dict[int, PhaseDef] = {}
        for phase in sorted(phases, key=lambda p: p.number):
            if phase.number in table:
                raise ValueError(f"duplicate phase number {phase.number}")
            table[phase.number] = phase
        if not table:
            raise ValueError("at least one phase is required")
        if list(table) != list(range(1, len(table) + 1)):
            raise ValueError(f"phases must be numbered 1..N without gaps, got {list(table)}")
        self._phases = MappingProxyType(table)
        self._on_unlock = on_unlock
        self._on_exit = on_exit
        self._on_enter = on_enter
        self._diagnostics = diagnostics
        self._progress: dict[int, PhaseProgress] = {n: PhaseProgress() for n in table}
        self._current = 1
        self._unlocked: set[int] = {1}
        self._phase_time = 0.0
        self._ready = False
        self._mark_entered(1)

    # --- Queries ---

    @property
    def current(self) -> int:
        return self._current

    @property
    def unlocked(self) -> tuple[int, ...]:
        return tuple(sorted(self._unlocked))

    @property
    def ready(self) -> bool:
        """Transition condition held at the last check and awaits confirm."""
        return self._ready

    @property
    def transitioning(self) -> bool:
        return self._progress[self._current].completed and not self.is_final

    @property
    def phase_time(self) -> float:
        return self._phase_time

    @property
    def is_final(self) -> bool:
        return self._current == len(self._phases)

    @property
    def final_phase(self) -> int:
        return len(self._phases)

    def definition(self, number: int) -> PhaseDef | None:
        return self._phases.get(number)

    @property
    def current_definition(self) -> PhaseDef:
        return self._phases[self._current]

    def phases(self) -> tuple[PhaseDef, ...]:
        return tuple(self._phases.values())

    def progress_of(self, number: int) -> PhaseProgress:
        """Copy of the progress record. Raises KeyError for unknown phases."""
        p = self._progress[number]
        return PhaseProgress(p.entered, p.completed, p.time_spent, p.best_time, p.times_entered)

    def is_unlocked(self, number: int) -> bool:
        return number in self._unlocked

    def is_completed(self, number: int) -> bool:
        p = self._progress.get(number)
        return p is not None and p.completed

    def view(self, ctx: EvaluationContext) -> EvaluationContext:
        """*ctx* with phase getters answered from this machine."""
        return _PhaseView(ctx, self)

    def transition_progress(self, ctx: EvaluationContext) -> float:
        return progress(self.current_definition.transition, self.view(ctx), self._diagnostics)

    # --- Time ---

    def tick(self, dt: float) -> None:
        self._phase_time += dt
        self._progress[self._current].time_spent += dt

    # --- Checks ---

    def check_unlock(self, phase: int, ctx: EvaluationContext) -> bool:
        """Evaluate *phase*'s unlock condition. Unlocking is permanent."""
        if phase in self._unlocked:
            return True
        defn = self._phases.get(phase)
        if defn is None:
            return False
        if not evaluate(defn.unlock, self.view(ctx), self._diagnostics):
            return False
        self._unlocked.add(phase)
        logger.info("Phase %d unlocked", phase)
        if self._on_unlock is not None:
            self._on_unlock(phase)
        return True

    def check_transition_ready(self, ctx: EvaluationContext, phase: int | None = None) -> bool:
        """Evaluate the transition condition of *phase* (default: current).

        For the current phase a true result either advances immediately
        (auto transition) or sets ``ready``.
        """
        number = self._current if phase is None else phase
        defn = self._phases.get(number)
        if defn is None:
            return False
        holds = evaluate(defn.transition, self.view(ctx), self._diagnostics)
        if number != self._current or self.transitioning or self.is_final:
            return holds
        if holds and defn.auto_transition:
            self._complete_current()
            self._try_enter_next(ctx)
        else:
            self._ready = holds
        return holds

    def confirm(self, ctx: EvaluationContext) -> bool:
        """Explicit go-ahead for a ready phase. Returns True if the phase advanced."""
        if self.is_final:
            return False
        if self.transitioning:
            return self._try_enter_next(ctx)
        if not evaluate(self.current_definition.transition, self.view(ctx), self._diagnostics):
            self._ready = False
            return False
        self._complete_current()
        return self._try_enter_next(ctx)

    def update(self, ctx: EvaluationContext) -> bool:
        """Per-tick driver. Advances at most one phase; returns True if it did."""
        if self.transitioning:
            return self._try_enter_next(ctx)
        before = self._current
        self.check_transition_ready(ctx)
        return self._current != before

    def catch_up(
        self, context_fn: Callable[[], EvaluationContext], limit: int | None = None
    ) -> int:
        """Process a backlog of satisfied transitions, one phase at a time.

        A fresh context is taken before every step so no advance is based
        on state from before the previous one. Returns phases advanced.
        """
        steps = len(self._phases) if limit is None else limit
        advanced = 0
        while advanced < steps and self.update(context_fn()):
            advanced += 1
        if advanced:
            logger.info("Caught up %d phase(s), now in phase %d", advanced, self._current)
        return advanced

    # --- Transitions ---

    def _complete_current(self) -> None:
        number = self._current
        p = self._progress[number]
        p.completed = True
        if p.best_time is None or self._phase_time < p.best_time:
            p.best_time = self._phase_time
        self._ready = False
        logger.info("Phase %d complete after %.1fs", number, self._phase_time)
        if self._on_exit is not None:
            self._on_exit(number)

    def _try_enter_next(self, ctx: EvaluationContext) -> bool:
        previous = self._current
        nxt = previous + 1
        if not self.check_unlock(nxt, ctx):
            return False
        self._current = nxt
        self._phase_time = 0.0
        self._ready = False
        self._mark_entered(nxt)
        logger.info("Entered phase %d", nxt)
        if self._on_enter is not None:
            self._on_enter(nxt, previous)
        return True

    def _mark_entered(self, number: int) -> None:
        p = self._progress[number]
        p.entered = True
        p.times_entered += 1

    def reset(self) -> None:
        """Return to phase 1. Completion flags clear; best times are kept."""
        previous = self._current
        for p in self._progress.values():
            p.entered = False
            p.completed = False
        self._current = 1
        self._unlocked = {1}
        self._phase_time = 0.0
        self._ready = False
        self._mark_entered(1)
        logger.info("Phase machine reset from phase %d", previous)
        if self._on_enter is not None:
            self._on_enter(1, previous)

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize runtime state. ``ready`` is not stored."""
        return {
            "current": self._current,
            "phase_time": self._phase_time,
            "unlocked": sorted(self._unlocked),
            "progress": {
                str(n): {
                    "entered": p.entered,
                    "completed": p.completed,
                    "time_spent": p.time_spent,
                    "best_time": p.best_time,
                    "times_entered": p.times_entered,
                }
                for n, p in self._progress.items()
            },
        }

    def restore(self, data: dict[str, Any], ctx: EvaluationContext | None = None) -> None:
        """Restore runtime state and re-derive ``ready`` from *ctx*.

        Nothing advances here. Use ``catch_up`` for offline backlog.
        """
        try:
            current = int(data["current"])
            phase_time = float(data.get("phase_time", 0.0))
            unlocked = {int(n) for n in data.get("unlocked", [1])}
            progress_data = {int(k): v for k, v in data.get("progress", {}).items()}
            restored = {
                n: PhaseProgress(
                    entered=bool(progress_data[n]["entered"]),
                    completed=bool(progress_data[n]["completed"]),
                    time_spent=float(progress_data[n]["time_spent"]),
                    best_time=(
                        None
                        if progress_data[n].get("best_time") is None
                        else float(progress_data[n]["best_time"])
                    ),
                    times_entered=int(progress_data[n]["times_entered"]),
                )
                if n in progress_data
                else PhaseProgress()
                for n in self._phases
            }
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"Malformed phase state: {exc}") from exc
        if current not in self._phases:
            raise SnapshotError(f"Unknown current phase {current}")
        unknown = unlocked - set(self._phases)
        if unknown:
            raise SnapshotError(f"Unknown unlocked phases {sorted(unknown)}")

        self._current = current
        self._phase_time = phase_time
        self._unlocked = unlocked | {1, current}
        self._progress = restored
        self._ready = False
        if ctx is not None and not self.transitioning and not self.is_final:
            defn = self.current_definition
            if not defn.auto_transition:
                self._ready = evaluate(defn.transition, self.view(ctx), self._diagnostics)
