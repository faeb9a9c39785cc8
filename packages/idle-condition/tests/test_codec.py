"""Tests for the condition authoring format."""
from __future__ import annotations

import pytest

from idle_condition import (
    AchievementCond,
    And,
    ConditionFormatError,
    FlagCond,
    Not,
    Op,
    PhaseCond,
    ResourceCond,
    TimeCond,
    TimeScope,
    condition_from_dict,
    condition_to_dict,
)
from idle_condition.codec import MAX_DEPTH


class TestFromDict:
    def test_leaf(self) -> None:
        cond = condition_from_dict({"type": "resource", "resource": "pixels", "amount": "64"})
        assert cond == ResourceCond("pixels", 64, Op.GTE)

    def test_nested(self) -> None:
        cond = condition_from_dict({
            "type": "and",
            "conditions": [
                {"type": "resource", "resource": "pixels", "amount": 1000000},
                {"type": "achievement", "achievement": "first_click"},
                {"type": "not", "condition": {"type": "flag", "flag": "muted"}},
            ],
        })
        assert cond == And(
            ResourceCond("pixels", 1000000),
            AchievementCond("first_click"),
            Not(FlagCond("muted")),
        )

    def test_optional_fields(self) -> None:
        cond = condition_from_dict({"type": "time", "seconds": 30, "scope": "run", "op": "gt"})
        assert cond == TimeCond(30, Op.GT, TimeScope.RUN)
        cond = condition_from_dict({"type": "phase", "phase": 1, "completed": True})
        assert cond == PhaseCond(1, completed=True)


class TestErrors:
    def test_unknown_type_has_path(self) -> None:
        with pytest.raises(ConditionFormatError) as info:
            condition_from_dict(
                {"type": "or", "conditions": [{"type": "always"}, {"type": "magic"}]},
                path="phases[0].unlock",
            )
        assert info.value.path == "phases[0].unlock.conditions[1]"
        assert "magic" in info.value.message

    def test_missing_field(self) -> None:
        with pytest.raises(ConditionFormatError) as info:
            condition_from_dict({"type": "resource", "resource": "pixels"})
        assert "amount" in info.value.message

    def test_bad_value(self) -> None:
        with pytest.raises(ConditionFormatError):
            condition_from_dict({"type": "resource", "resource": "pixels", "amount": "lots"})
        with pytest.raises(ConditionFormatError):
            condition_from_dict({"type": "producer", "producer": "cursor", "op": "approx"})

    def test_not_an_object(self) -> None:
        with pytest.raises(ConditionFormatError):
            condition_from_dict(["always"])

    def test_conditions_must_be_list(self) -> None:
        with pytest.raises(ConditionFormatError):
            condition_from_dict({"type": "and", "conditions": {"type": "always"}})

    def test_depth_bound(self) -> None:
        data: dict = {"type": "always"}
        for _ in range(MAX_DEPTH + 1):
            data = {"type": "not", "condition": data}
        with pytest.raises(ConditionFormatError):
            condition_from_dict(data)

    def test_is_value_error(self) -> None:
        assert issubclass(ConditionFormatError, ValueError)


class TestToDict:
    def test_reparses_to_equal_tree(self) -> None:
        source = {
            "type": "or",
            "conditions": [
                {"type": "stat", "stat": "clicks", "value": 10, "op": "gte"},
                {"type": "choice", "choice": "path", "option": "merge"},
                {"type": "upgrade", "upgrade": "brush", "level": 2},
                {"type": "producer", "producer": "cursor", "count": 3, "op": "lt"},
                {"type": "flag", "flag": "mode", "value": "grid"},
                {"type": "never"},
            ],
        }
        cond = condition_from_dict(source)
        assert condition_to_dict(cond) == source
        assert condition_from_dict(condition_to_dict(cond)) == cond

    def test_amount_written_as_string(self) -> None:
        data = condition_to_dict(ResourceCond("pixels", "1e300"))
        assert data["amount"] == "1E+300"

    def test_rejects_non_condition(self) -> None:
        with pytest.raises(TypeError):
            condition_to_dict("always")  # type: ignore[arg-type]
