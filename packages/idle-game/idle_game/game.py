"""Game - wires the engine, stores and progression subsystems together."""
from __future__ import annotations

import logging
from typing import Mapping

from idle import Diagnostics, DirtyCategory, Engine, GameState, TickContext
from idle.amount import Amount, AmountLike
from idle_condition import SnapshotContext, evaluate
from idle_consequence import ConsequenceApplier, DomainEvent
from idle_discovery import DiscoveryTracker, make_discovery_system
from idle_event import QueuedTrigger, TriggerScheduler, make_trigger_system
from idle_phase import PhaseMachine, make_phase_system
from idle_signal import SignalBus, make_signal_system

from idle_game.config import GameConfig
from idle_game.content import GameContent
from idle_game.context import capture_context
from idle_game.events import (
    ChoiceMade,
    OfflineCredited,
    PhaseCompleted,
    PhaseEntered,
    PhaseUnlocked,
    RunReset,
    TriggerQueued,
)
from idle_game.offline import OfflineReward, calculate_offline_progress
from idle_game.systems import make_time_system, production_rates

logger = logging.getLogger(__name__)

PRESENTATION_HOLD = "presentation:{}"


class Game:
    """One save's worth of running game.

    Per tick the systems run in a fixed order: time and production, phases,
    triggers, discovery, then signal delivery. Presentation is pulled with
    ``next_presentation`` and finished with ``acknowledge``; an item that
    pauses the game holds the clock until it is acknowledged.
    """

    def __init__(self, content: GameContent, config: GameConfig | None = None) -> None:
        self.content = content
        self.config = config if config is not None else GameConfig()
        self.diagnostics = Diagnostics(self.config.diagnostics_capacity)
        self.bus = SignalBus()
        self.engine = Engine(tps=self.config.tps)
        self.applier = ConsequenceApplier(self.bus, self.diagnostics)
        self.phases = PhaseMachine(
            content.phases,
            on_unlock=self._on_phase_unlock,
            on_exit=self._on_phase_exit,
            on_enter=self._on_phase_enter,
            diagnostics=self.diagnostics,
        )
        self.triggers = TriggerScheduler(
            content.triggers, resolver=content.has_content, diagnostics=self.diagnostics
        )
        self.achievements = DiscoveryTracker(
            "achievement",
            content.achievements,
            self.applier,
            notification_cap=self.config.notification_cap,
            diagnostics=self.diagnostics,
        )
        self.secrets = DiscoveryTracker(
            "secret",
            content.secrets,
            self.applier,
            notification_cap=self.config.notification_cap,
            diagnostics=self.diagnostics,
        )
        self._presenting: QueuedTrigger | None = None
        self._presenting_request = False
        self.last_offline: OfflineReward | None = None

        self.engine.add_system(make_time_system(content))
        self.engine.add_system(make_phase_system(self.phases, self.context))
        self.engine.add_system(make_trigger_system(self.triggers, self.context, self._on_queued))
        self.engine.add_system(
            make_discovery_system([self.achievements, self.secrets], self.context)
        )
        self.engine.add_system(make_signal_system(self.bus))
        self.state.dirty.mark_all(DirtyCategory)

    @property
    def state(self) -> GameState:
        return self.engine.state

    @property
    def now(self) -> float:
        return self.engine.clock.elapsed

    @property
    def paused(self) -> bool:
        return self.engine.clock.held

    def context(self) -> SnapshotContext:
        return capture_context(self.state, self.phases)

    # --- Ticking ---

    def step(self) -> bool:
        """Run one tick. False when a presentation hold suppressed it."""
        return self.engine.step()

    def run(self, n: int) -> None:
        self.engine.run(n)

    # --- Presentation ---

    def next_presentation(self) -> QueuedTrigger | None:
        """The item the player should see now, if any.

        Due triggers come first, then dialogues and logs queued by
        consequences, oldest first. The same item is returned until it is
        acknowledged. Taking an item that pauses the game holds the clock;
        a queued dialogue always pauses.
        """
        if self._presenting is not None:
            return self._presenting
        item = self.triggers.pop_due(self.now)
        if item is not None:
            self._present(item)
            return item
        request = self.state.pop_content_request()
        if request is None:
            return None
        item = QueuedTrigger(
            trigger_id=f"{request.kind}:{request.content_id}",
            content_id=request.content_id,
            queued_at=self.now,
            due_at=self.now,
            pauses_game=request.kind == "dialogue",
            kind=request.kind,
        )
        self._present(item, from_request=True)
        return item

    def _present(self, item: QueuedTrigger, from_request: bool = False) -> None:
        self._presenting = item
        self._presenting_request = from_request
        if item.pauses_game:
            self.engine.clock.hold(PRESENTATION_HOLD.format(item.trigger_id))

    @property
    def presenting(self) -> QueuedTrigger | None:
        return self._presenting

    @property
    def presenting_request(self) -> bool:
        """True when the current item was queued by a consequence, not a trigger."""
        return self._presenting is not None and self._presenting_request

    def acknowledge(self, item: QueuedTrigger) -> list[DomainEvent]:
        """Finish presenting *item*: apply its trigger's consequences.

        Raises ValueError if *item* is not the one being presented.
        """
        if self._presenting is None or item != self._presenting:
            raise ValueError(f"{item.trigger_id!r} is not being presented")
        from_request = self._presenting_request
        self._presenting = None
        self._presenting_request = False
        self.engine.clock.release(PRESENTATION_HOLD.format(item.trigger_id))
        self.state.note_interaction()
        defn = None if from_request else self.triggers.definition(item.trigger_id)
        if defn is None:
            return []
        return self.applier.apply_all(
            defn.consequences, self.state, source=f"trigger:{defn.id}", now=self.now
        )

    # --- Player actions ---

    def click(self, resource_id: str, amount: AmountLike = 1) -> Amount:
        """Manual gather. Counts toward the ``clicks`` stat."""
        total = self.state.add_resource(resource_id, amount)
        self.state.increment_stat("clicks")
        self.state.note_interaction()
        return total

    def _afford(self, cost: Mapping[str, Amount]) -> bool:
        if not all(self.state.resource(k) >= v for k, v in cost.items()):
            return False
        for resource_id, value in cost.items():
            self.state.spend(resource_id, value)
        return True

    def can_buy_producer(self, producer_id: str) -> bool:
        defn = self.content.producer(producer_id)
        if defn is None:
            raise KeyError(producer_id)
        return self.state.is_producer_unlocked(producer_id) or evaluate(
            defn.unlock, self.context(), self.diagnostics
        )

    def buy_producer(self, producer_id: str) -> bool:
        """Buy one unit. False when locked or unaffordable."""
        defn = self.content.producer(producer_id)
        if defn is None:
            raise KeyError(producer_id)
        if not self.can_buy_producer(producer_id):
            return False
        if not self._afford(defn.cost_for(self.state.producer_count(producer_id))):
            return False
        self.state.unlock_producer(producer_id)
        self.state.add_producer(producer_id)
        self.state.note_interaction()
        return True

    def can_buy_upgrade(self, upgrade_id: str) -> bool:
        defn = self.content.upgrade(upgrade_id)
        if defn is None:
            raise KeyError(upgrade_id)
        if self.state.upgrade_level(upgrade_id) >= defn.max_level:
            return False
        if any(self.state.upgrade_level(r) < 1 for r in defn.requires):
            return False
        return self.state.is_upgrade_unlocked(upgrade_id) or evaluate(
            defn.unlock, self.context(), self.diagnostics
        )

    def buy_upgrade(self, upgrade_id: str) -> bool:
        """Buy the next level and apply its effects. False when not possible."""
        defn = self.content.upgrade(upgrade_id)
        if defn is None:
            raise KeyError(upgrade_id)
        if not self.can_buy_upgrade(upgrade_id) or not self._afford(defn.cost):
            return False
        self.state.unlock_upgrade(upgrade_id)
        self.state.purchase_upgrade(upgrade_id)
        self.state.note_interaction()
        self.applier.apply_all(
            defn.effects, self.state, source=f"upgrade:{upgrade_id}", now=self.now
        )
        return True

    def choose(self, choice_id: str, option: str) -> list[DomainEvent]:
        """Record a story decision and apply the chosen option's consequences.

        Raises KeyError for an unknown choice and ValueError for an unknown
        option or a choice already made.
        """
        defn = self.content.choice(choice_id)
        if defn is None:
            raise KeyError(choice_id)
        if option not in defn.options:
            raise ValueError(f"choice {choice_id!r} has no option {option!r}")
        if self.state.choice(choice_id) is not None:
            raise ValueError(f"choice {choice_id!r} was already made")
        self.state.record_choice(choice_id, option)
        self.state.note_interaction()
        self.bus.publish(ChoiceMade(choice_id, option))
        return self.applier.apply_all(
            defn.options[option], self.state, source=f"choice:{choice_id}", now=self.now
        )

    def confirm_transition(self) -> bool:
        """The player's go-ahead for a ready phase. True if the phase advanced."""
        return self.phases.confirm(self.context())

    # --- Lifecycle ---

    def credit_offline(self, seconds: float) -> OfflineReward:
        """Pay capped, reduced production for *seconds* spent away."""
        reward = calculate_offline_progress(
            seconds, production_rates(self.content, self.state), self.config
        )
        for resource_id, amount in reward.earned.items():
            self.state.add_resource(resource_id, amount)
        if not reward.empty:
            self.bus.publish(OfflineCredited(
                reward.time_away, reward.capped_time, tuple(reward.earned.items())
            ))
            logger.info(
                "Credited %ds of offline production (%.0fs away)",
                reward.capped_time,
                reward.time_away,
            )
        return reward

    def resume(self, offline_seconds: float = 0.0) -> int:
        """Catch up on everything that happened while the game was not running.

        Call once after restoring a save. Offline production for
        *offline_seconds* is credited first, then satisfied transitions are
        processed. Returns phases advanced.
        """
        self.last_offline = self.credit_offline(offline_seconds)
        self.state.dirty.mark_all(DirtyCategory)
        return self.phases.catch_up(self.context, self.config.catch_up_limit)

    def prestige(self) -> int:
        """Start a new run. Eternal progress and fired eternal triggers stay.

        Returns the number of resets so far.
        """
        self._drop_presentation()
        self.state.reset_run(keep_resources=self.content.eternal_resources())
        self.triggers.reset_run()
        self.phases.reset()
        count = int(self.state.increment_stat("prestiges"))
        self.bus.publish(RunReset(count))
        logger.info("Prestige #%d", count)
        return count

    def hard_reset(self) -> int:
        """Withdraw everything queued for presentation. Returns items dropped.

        Consequences that were already applied stay applied.
        """
        dropped = self.triggers.clear_queue() + len(self.state.drain_content_requests())
        if self._drop_presentation():
            dropped += 1
        self.bus.clear()
        logger.info("Hard reset dropped %d queued item(s)", dropped)
        return dropped

    def _drop_presentation(self) -> bool:
        item = self._presenting
        if item is None:
            return False
        self._presenting = None
        self._presenting_request = False
        self.engine.clock.release(PRESENTATION_HOLD.format(item.trigger_id))
        return True

    # --- Callbacks ---

    def _on_phase_unlock(self, phase: int) -> None:
        self.bus.publish(PhaseUnlocked(phase))

    def _on_phase_exit(self, phase: int) -> None:
        self.state.dirty.mark(DirtyCategory.PHASE)
        self.bus.publish(PhaseCompleted(phase))

    def _on_phase_enter(self, phase: int, previous: int) -> None:
        self.state.dirty.mark(DirtyCategory.PHASE)
        self.bus.publish(PhaseEntered(phase, previous))

    def _on_queued(self, state: GameState, ctx: TickContext, item: QueuedTrigger) -> None:
        self.bus.publish(TriggerQueued(item.trigger_id, item.content_id, item.due_at))
