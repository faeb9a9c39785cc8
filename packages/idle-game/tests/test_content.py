"""Tests for idle_game.content - definitions and structural parsing."""
from __future__ import annotations

from decimal import Decimal

import pytest

from idle_condition import Always
from idle_game import ChoiceDef, ProducerDef, UpgradeDef, parse_content


class TestDefinitions:
    def test_producer_cost_grows(self) -> None:
        cursor = ProducerDef("cursor", "pixels", rate=1, cost={"pixels": 10}, growth="1.5")
        assert cursor.cost_for(0) == {"pixels": Decimal(10)}
        assert cursor.cost_for(2) == {"pixels": Decimal("22.5")}

    def test_producer_validation(self) -> None:
        with pytest.raises(ValueError):
            ProducerDef("cursor", "pixels", rate=-1)
        with pytest.raises(ValueError):
            ProducerDef("cursor", "pixels", rate=1, growth="0.5")
        with pytest.raises(ValueError):
            ProducerDef("cursor", "pixels", rate=1, cost={"pixels": -1})

    def test_upgrade_defaults(self) -> None:
        up = UpgradeDef("brush", requires=["a"])
        assert up.requires == ("a",)
        assert up.unlock == Always()
        with pytest.raises(ValueError):
            UpgradeDef("brush", max_level=0)

    def test_choice_needs_options(self) -> None:
        with pytest.raises(ValueError):
            ChoiceDef("path", {})


class TestParse:
    def test_tables_and_lookups(self, raw) -> None:
        content, issues = parse_content(raw)
        assert issues == []
        assert [p.number for p in content.phases] == [1, 2, 3]
        assert content.producer("cursor").rate == 2  # type: ignore[union-attr]
        assert content.upgrade("palette").requires == ("brush",)  # type: ignore[union-attr]
        assert content.choice("path") is not None
        assert content.trigger("missing") is None
        assert content.eternal_resources() == ("memory",)
        assert content.ids("achievement") == frozenset({"first_click", "millionaire"})

    def test_trigger_fields(self, raw) -> None:
        content, _ = parse_content(raw)
        warning = content.trigger("warning")
        assert warning is not None
        assert warning.pauses_game and warning.kind == "dialogue" and warning.priority == 50
        canvas = content.trigger("canvas_entered")
        assert canvas is not None and canvas.phase == 2 and canvas.eternal

    def test_repeatable_implies_not_one_time(self, raw) -> None:
        raw["triggers"][0]["repeatable"] = True
        content, _ = parse_content(raw)
        intro = content.trigger("intro")
        assert intro is not None and not intro.one_time and intro.repeatable

    def test_bad_entries_are_skipped(self, raw) -> None:
        raw["upgrades"].append("brush")
        raw["achievements"][0]["watches"] = ["weather"]
        content, issues = parse_content(raw)
        assert [i.path for i in issues] == ["upgrades[2]", "achievements[0]"]
        assert len(content.upgrades) == 2
        assert [a.id for a in content.achievements] == ["millionaire"]
