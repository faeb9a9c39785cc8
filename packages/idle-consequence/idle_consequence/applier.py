"""ConsequenceApplier - turns authored effects into state mutations."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from idle.state import Multiplier

from idle_consequence.events import (
    AchievementUnlocked,
    DialogueQueued,
    DomainEvent,
    EndingUnlocked,
    FlagSet,
    FlagUnset,
    LogQueued,
    MultiplierAdded,
    ProducerUnlocked,
    ResourceGranted,
    ResourceMultiplied,
    SecretRevealed,
    UpgradeUnlocked,
)
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

if TYPE_CHECKING:
    from idle import GameState
    from idle.diagnostics import Diagnostics
    from idle_signal import SignalBus

logger = logging.getLogger(__name__)


class ConsequenceApplier:
    """Applies one consequence at a time: one mutation, one published event.

    No deduplication happens here. Callers make sure a firing is applied
    once. Unknown kinds and rejected mutations are reported and skipped.
    """

    def __init__(
        self,
        bus: SignalBus | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self._bus = bus
        self._diagnostics = diagnostics

    def apply(
        self,
        consequence: Consequence,
        state: GameState,
        source: str = "",
        now: float = 0.0,
    ) -> DomainEvent | None:
        """Apply *consequence* to *state*. Returns the published event."""
        try:
            event = self._mutate(consequence, state, source, now)
        except (ValueError, TypeError, ArithmeticError) as exc:
            self._report(
                "consequence.failed",
                f"{type(consequence).__name__} from {source or '?'} rejected: {exc}",
                source=source,
            )
            return None
        if event is None:
            self._report(
                "consequence.unknown_kind",
                f"Unknown consequence kind {type(consequence).__name__}",
                source=source,
            )
            return None
        if self._bus is not None:
            self._bus.publish(event)
        logger.debug("Applied %s from %s", type(consequence).__name__, source)
        return event

    def apply_all(
        self,
        consequences: Iterable[Consequence],
        state: GameState,
        source: str = "",
        now: float = 0.0,
    ) -> list[DomainEvent]:
        """Apply in order. A rejected consequence does not stop the rest."""
        events = []
        for consequence in consequences:
            event = self.apply(consequence, state, source, now)
            if event is not None:
                events.append(event)
        return events

    def _mutate(
        self, c: Consequence, state: GameState, source: str, now: float
    ) -> DomainEvent | None:
        if isinstance(c, AddResource):
            total = state.add_resource(c.resource_id, c.amount)
            return ResourceGranted(c.resource_id, c.amount, total, source)
        if isinstance(c, MultiplyResource):
            total = state.multiply_resource(c.resource_id, c.factor)
            return ResourceMultiplied(c.resource_id, c.factor, total, source)
        if isinstance(c, SetFlag):
            state.set_flag(c.key, c.value)
            return FlagSet(c.key, c.value, source)
        if isinstance(c, UnsetFlag):
            state.unset_flag(c.key)
            return FlagUnset(c.key, source)
        if isinstance(c, UnlockAchievement):
            state.unlock_achievement(c.achievement_id, now)
            return AchievementUnlocked(c.achievement_id, source)
        if isinstance(c, RevealSecret):
            state.reveal_secret(c.secret_id, now)
            return SecretRevealed(c.secret_id, source)
        if isinstance(c, UnlockUpgrade):
            state.unlock_upgrade(c.upgrade_id)
            return UpgradeUnlocked(c.upgrade_id, source)
        if isinstance(c, UnlockProducer):
            state.unlock_producer(c.producer_id)
            return ProducerUnlocked(c.producer_id, source)
        if isinstance(c, UnlockEnding):
            state.unlock_ending(c.ending_id)
            return EndingUnlocked(c.ending_id, source)
        if isinstance(c, AddMultiplier):
            state.add_multiplier(
                Multiplier(c.multiplier_id, c.value, c.resource_id, c.duration)
            )
            return MultiplierAdded(c.multiplier_id, c.value, c.resource_id, c.duration, source)
        if isinstance(c, QueueDialogue):
            state.request_content("dialogue", c.dialogue_id)
            return DialogueQueued(c.dialogue_id, source)
        if isinstance(c, QueueLog):
            state.request_content("log", c.log_id)
            return LogQueued(c.log_id, source)
        return None

    def _report(self, code: str, message: str, **detail: object) -> None:
        if self._diagnostics is not None:
            self._diagnostics.report(code, message, **detail)
        else:
            logger.warning("[%s] %s", code, message)
