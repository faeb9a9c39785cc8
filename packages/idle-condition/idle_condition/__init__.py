"""idle-condition - Declarative conditions and their evaluator."""
from __future__ import annotations

from idle_condition.codec import ConditionFormatError, condition_from_dict, condition_to_dict
from idle_condition.context import EvaluationContext, SnapshotContext
from idle_condition.evaluator import (
    categories_of,
    depth,
    evaluate,
    evaluate_all,
    iter_references,
    progress,
)
from idle_condition.types import (
    CONDITION_TYPES,
    AchievementCond,
    Always,
    And,
    ChoiceCond,
    Condition,
    FlagCond,
    Never,
    Not,
    Op,
    Or,
    PhaseCond,
    ProducerCond,
    ResourceCond,
    StatCond,
    TimeCond,
    TimeScope,
    UpgradeCond,
)

__all__ = [
    "AchievementCond",
    "Always",
    "And",
    "CONDITION_TYPES",
    "ChoiceCond",
    "Condition",
    "ConditionFormatError",
    "EvaluationContext",
    "FlagCond",
    "Never",
    "Not",
    "Op",
    "Or",
    "PhaseCond",
    "ProducerCond",
    "ResourceCond",
    "SnapshotContext",
    "StatCond",
    "TimeCond",
    "TimeScope",
    "UpgradeCond",
    "categories_of",
    "condition_from_dict",
    "condition_to_dict",
    "depth",
    "evaluate",
    "evaluate_all",
    "iter_references",
    "progress",
]
