"""Engine - fixed-step game loop over one GameState.

Systems run in registration order each tick. A held clock suppresses the
whole tick: no system runs and game time does not advance.
"""

import logging
import time
from typing import Any, Callable

from idle.clock import Clock
from idle.state import GameState
from idle.types import SnapshotError, System, TickContext

logger = logging.getLogger(__name__)

_SNAPSHOT_VERSION = 1

Hook = Callable[[GameState, TickContext], None]


class Engine:
    def __init__(self, tps: int = 20, state: GameState | None = None) -> None:
        self._clock = Clock(tps)
        self._state = state if state is not None else GameState()
        self._systems: list[System] = []
        self._hooks: dict[str, list[Hook]] = {"start": [], "stop": []}
        self._stop_requested: bool = False
        self._skipped: int = 0

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def skipped_ticks(self) -> int:
        """Ticks suppressed because the clock was held."""
        return self._skipped

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def on_start(self, hook: Hook) -> None:
        self._hooks["start"].append(hook)

    def on_stop(self, hook: Hook) -> None:
        self._hooks["stop"].append(hook)

    def _request_stop(self) -> None:
        self._stop_requested = True

    def _fire(self, event: str) -> None:
        ctx = self._clock.context(self._request_stop)
        for hook in self._hooks[event]:
            hook(self._state, ctx)

    def _tick(self) -> bool:
        if self._clock.held:
            self._skipped += 1
            return False
        self._clock.advance()
        ctx = self._clock.context(self._request_stop)
        for system in self._systems:
            system(self._state, ctx)
            if self._stop_requested:
                break
        return True

    def step(self) -> bool:
        """Run one tick. Returns False when the tick was suppressed by a hold."""
        self._stop_requested = False
        return self._tick()

    def run(self, n: int) -> None:
        """Run up to *n* ticks back to back, between the start and stop hooks."""
        self._stop_requested = False
        self._fire("start")
        remaining = n
        while remaining > 0 and not self._stop_requested:
            self._tick()
            remaining -= 1
        self._fire("stop")

    def run_realtime(self, max_ticks: int | None = None) -> None:
        """Run paced to wall-clock time until stopped or *max_ticks* elapse.

        Held ticks still consume their time slot, so a paused game does not
        spin.
        """
        self._stop_requested = False
        self._fire("start")
        dt = self._clock.dt
        done = 0
        while not self._stop_requested and (max_ticks is None or done < max_ticks):
            deadline = time.monotonic() + dt
            self._tick()
            done += 1
            if self._stop_requested:
                break
            remaining = deadline - time.monotonic()
            if remaining > 0:
                time.sleep(remaining)
        self._fire("stop")

    def snapshot(self) -> dict[str, Any]:
        return {
            "version": _SNAPSHOT_VERSION,
            "tick_number": self._clock.tick_number,
            "tps": self._clock.tps,
            "state": self._state.snapshot(),
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Load a snapshot. Holds are released; nothing is being presented."""
        version = data.get("version")
        if version != _SNAPSHOT_VERSION:
            raise SnapshotError(
                f"Unsupported snapshot version {version!r}, expected {_SNAPSHOT_VERSION}"
            )
        if data.get("tps") != self._clock.tps:
            raise SnapshotError(
                f"TPS mismatch: snapshot has {data.get('tps')}, engine has {self._clock.tps}"
            )
        try:
            tick_number = int(data["tick_number"])
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"Malformed tick number: {exc}") from exc
        if tick_number < 0:
            raise SnapshotError(f"Tick number must be >= 0, got {tick_number}")
        self._state.restore(data.get("state"))
        self._clock.reset(tick_number)
        self._clock.release_all()
        logger.debug("Engine restored at tick %d", self._clock.tick_number)
