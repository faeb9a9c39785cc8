"""idle-consequence - Authored effects and the applier that performs them."""
from __future__ import annotations

from idle_consequence.applier import ConsequenceApplier
from idle_consequence.codec import (
    ConsequenceFormatError,
    consequence_from_dict,
    consequence_to_dict,
    consequences_from_list,
)
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
    iter_references,
)

__all__ = [
    "AchievementUnlocked",
    "AddMultiplier",
    "AddResource",
    "Consequence",
    "ConsequenceApplier",
    "ConsequenceFormatError",
    "DialogueQueued",
    "DomainEvent",
    "EndingUnlocked",
    "FlagSet",
    "FlagUnset",
    "LogQueued",
    "MultiplierAdded",
    "MultiplyResource",
    "ProducerUnlocked",
    "QueueDialogue",
    "QueueLog",
    "ResourceGranted",
    "ResourceMultiplied",
    "RevealSecret",
    "SecretRevealed",
    "SetFlag",
    "UnlockAchievement",
    "UnlockEnding",
    "UnlockProducer",
    "UnlockUpgrade",
    "UnsetFlag",
    "UpgradeUnlocked",
    "consequence_from_dict",
    "consequence_to_dict",
    "consequences_from_list",
    "iter_references",
]
