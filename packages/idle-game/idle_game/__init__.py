"""idle-game - Content loading, validation and the playable game facade."""
from __future__ import annotations

from idle_game.config import GameConfig
from idle_game.content import (
    ChoiceDef,
    ContentError,
    GameContent,
    ProducerDef,
    ResourceDef,
    UpgradeDef,
    ValidationIssue,
    parse_content,
)
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
from idle_game.game import Game
from idle_game.offline import OfflineReward, calculate_offline_progress
from idle_game.snapshot import GameSnapshot, load_with_fallback
from idle_game.systems import make_time_system, production_rates
from idle_game.validation import PHASE_COUNT, check_content, load_content, validate_content

__all__ = [
    "ChoiceDef",
    "ChoiceMade",
    "ContentError",
    "Game",
    "GameConfig",
    "GameContent",
    "GameSnapshot",
    "OfflineCredited",
    "OfflineReward",
    "PHASE_COUNT",
    "PhaseCompleted",
    "PhaseEntered",
    "PhaseUnlocked",
    "ProducerDef",
    "ResourceDef",
    "RunReset",
    "TriggerQueued",
    "UpgradeDef",
    "ValidationIssue",
    "calculate_offline_progress",
    "capture_context",
    "check_content",
    "load_content",
    "load_with_fallback",
    "make_time_system",
    "parse_content",
    "production_rates",
    "validate_content",
]
