"""Condition evaluation - pure functions, no side effects on the context.

``evaluate`` is total. Unknown variants and failing collaborator lookups
evaluate to False and are reported to diagnostics instead of raising.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Iterator

from idle import amount as amt
from idle.dirty import DirtyCategory

from idle_condition.types import (
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

if TYPE_CHECKING:
    from idle.diagnostics import Diagnostics

    from idle_condition.context import EvaluationContext

logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = (LookupError, TypeError, ValueError, ArithmeticError)


def evaluate(
    condition: Condition,
    ctx: EvaluationContext,
    diagnostics: Diagnostics | None = None,
) -> bool:
    """Evaluate *condition* against *ctx*."""
    if isinstance(condition, And):
        for child in condition.children:
            if not evaluate(child, ctx, diagnostics):
                return False
        return True
    if isinstance(condition, Or):
        for child in condition.children:
            if evaluate(child, ctx, diagnostics):
                return True
        return False
    if isinstance(condition, Not):
        return not evaluate(condition.child, ctx, diagnostics)
    if isinstance(condition, Always):
        return True
    if isinstance(condition, Never):
        return False
    try:
        return _eval_leaf(condition, ctx, diagnostics)
    except _LOOKUP_ERRORS as exc:
        _report(
            diagnostics,
            "condition.lookup_failed",
            f"{type(condition).__name__} lookup failed: {exc}",
            condition=repr(condition),
        )
        return False


def evaluate_all(
    conditions: Iterable[Condition],
    ctx: EvaluationContext,
    diagnostics: Diagnostics | None = None,
) -> bool:
    """Conjunction of *conditions*. An empty list holds."""
    for condition in conditions:
        if not evaluate(condition, ctx, diagnostics):
            return False
    return True


def _eval_leaf(
    condition: Condition,
    ctx: EvaluationContext,
    diagnostics: Diagnostics | None,
) -> bool:
    if isinstance(condition, ResourceCond):
        return condition.op.compare(
            ctx.resource_amount(condition.resource_id), condition.amount
        )
    if isinstance(condition, TimeCond):
        return condition.op.compare(_time_of(condition.scope, ctx), condition.seconds)
    if isinstance(condition, PhaseCond):
        if condition.completed:
            return bool(ctx.phase_completed(condition.phase))
        return condition.op.compare(ctx.current_phase(), condition.phase)
    if isinstance(condition, ProducerCond):
        return condition.op.compare(
            ctx.producer_count(condition.producer_id), condition.count
        )
    if isinstance(condition, UpgradeCond):
        return ctx.upgrade_level(condition.upgrade_id) >= condition.level
    if isinstance(condition, AchievementCond):
        return bool(ctx.has_achievement(condition.achievement_id))
    if isinstance(condition, FlagCond):
        value = ctx.flag(condition.key)
        if condition.expected is None:
            return value is not None and value is not False and value != 0 and value != ""
        return value == condition.expected
    if isinstance(condition, StatCond):
        return condition.op.compare(ctx.stat(condition.stat), condition.value)
    if isinstance(condition, ChoiceCond):
        made = ctx.choice(condition.choice_id)
        if condition.option is None:
            return made is not None
        return made == condition.option
    _report(
        diagnostics,
        "condition.unknown_kind",
        f"Unknown condition kind {type(condition).__name__}",
    )
    return False


def _time_of(scope: TimeScope, ctx: EvaluationContext) -> float:
    if scope is TimeScope.PHASE:
        return ctx.phase_time()
    if scope is TimeScope.RUN:
        return ctx.run_time()
    if scope is TimeScope.IDLE:
        return ctx.idle_time()
    return ctx.total_time()


def _report(
    diagnostics: Diagnostics | None, code: str, message: str, **detail: object
) -> None:
    if diagnostics is not None:
        diagnostics.report(code, message, **detail)
    else:
        logger.warning("[%s] %s", code, message)


# --- Progress ---


def progress(
    condition: Condition,
    ctx: EvaluationContext,
    diagnostics: Diagnostics | None = None,
) -> float:
    """How close *condition* is to holding, in [0, 1].

    Lower-bound numeric leaves report their ratio, ``and`` the mean of its
    children and ``or`` the best child. Everything else is 0 or 1.
    """
    if evaluate(condition, ctx, diagnostics):
        return 1.0
    if isinstance(condition, And):
        if not condition.children:
            return 1.0
        return sum(progress(c, ctx, diagnostics) for c in condition.children) / len(
            condition.children
        )
    if isinstance(condition, Or):
        return max((progress(c, ctx, diagnostics) for c in condition.children), default=0.0)
    try:
        return _leaf_progress(condition, ctx)
    except _LOOKUP_ERRORS:
        return 0.0


def _leaf_progress(condition: Condition, ctx: EvaluationContext) -> float:
    if isinstance(condition, ResourceCond) and condition.op in (Op.GTE, Op.GT):
        return min(
            amt.ratio(ctx.resource_amount(condition.resource_id), condition.amount),
            0.999,
        )
    if isinstance(condition, TimeCond) and condition.op in (Op.GTE, Op.GT):
        return _fraction(_time_of(condition.scope, ctx), condition.seconds)
    if isinstance(condition, ProducerCond) and condition.op in (Op.GTE, Op.GT):
        return _fraction(ctx.producer_count(condition.producer_id), condition.count)
    if isinstance(condition, UpgradeCond):
        return _fraction(ctx.upgrade_level(condition.upgrade_id), condition.level)
    if isinstance(condition, StatCond) and condition.op in (Op.GTE, Op.GT):
        return _fraction(ctx.stat(condition.stat), condition.value)
    return 0.0


def _fraction(current: float, target: float) -> float:
    """Ratio for an unmet lower bound, kept below 1."""
    if target <= 0 or current <= 0:
        return 0.0
    return min(current / target, 0.999)


# --- Static analysis ---

_LEAF_CATEGORIES: dict[type, frozenset[DirtyCategory]] = {
    ResourceCond: frozenset({DirtyCategory.RESOURCE}),
    PhaseCond: frozenset({DirtyCategory.PHASE}),
    ProducerCond: frozenset({DirtyCategory.PRODUCER}),
    UpgradeCond: frozenset({DirtyCategory.UPGRADE}),
    AchievementCond: frozenset({DirtyCategory.ACHIEVEMENT}),
    FlagCond: frozenset({DirtyCategory.FLAG}),
    StatCond: frozenset({DirtyCategory.STAT}),
    ChoiceCond: frozenset({DirtyCategory.CHOICE}),
}


def categories_of(condition: Condition) -> frozenset[DirtyCategory]:
    """Dirty categories whose change can flip *condition*."""
    if isinstance(condition, (And, Or)):
        result: frozenset[DirtyCategory] = frozenset()
        for child in condition.children:
            result |= categories_of(child)
        return result
    if isinstance(condition, Not):
        return categories_of(condition.child)
    if isinstance(condition, TimeCond):
        if condition.scope is TimeScope.PHASE:
            return frozenset({DirtyCategory.TIME, DirtyCategory.PHASE})
        return frozenset({DirtyCategory.TIME})
    return _LEAF_CATEGORIES.get(type(condition), frozenset())


def iter_references(condition: Condition) -> Iterator[tuple[str, str | int]]:
    """Yield ``(kind, id)`` for every content id the tree refers to."""
    stack: list[Condition] = [condition]
    while stack:
        node = stack.pop()
        if isinstance(node, (And, Or)):
            stack.extend(reversed(node.children))
        elif isinstance(node, Not):
            stack.append(node.child)
        elif isinstance(node, ResourceCond):
            yield ("resource", node.resource_id)
        elif isinstance(node, PhaseCond):
            yield ("phase", node.phase)
        elif isinstance(node, ProducerCond):
            yield ("producer", node.producer_id)
        elif isinstance(node, UpgradeCond):
            yield ("upgrade", node.upgrade_id)
        elif isinstance(node, AchievementCond):
            yield ("achievement", node.achievement_id)
        elif isinstance(node, ChoiceCond):
            yield ("choice", node.choice_id)


def depth(condition: Condition) -> int:
    """Height of the tree. A lone leaf has depth 1."""
    if isinstance(condition, (And, Or)):
        return 1 + max((depth(c) for c in condition.children), default=0)
    if isinstance(condition, Not):
        return 1 + depth(condition.child)
    return 1
