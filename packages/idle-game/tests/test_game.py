"""Tests for idle_game.game - the Game facade."""
from __future__ import annotations

from decimal import Decimal

import pytest

from idle_event import QueuedTrigger
from idle_game import Game, PhaseEntered, RunReset, TriggerQueued


@pytest.fixture
def game(content, config) -> Game:
    return Game(content, config)


class TestPresentation:
    def test_first_tick_queues_intro(self, game: Game) -> None:
        assert game.step()
        item = game.next_presentation()
        assert item is not None and item.trigger_id == "intro"
        assert game.content.text(item.content_id) == "A single pixel flickers."
        assert game.next_presentation() is item
        assert game.acknowledge(item) == []
        assert game.next_presentation() is None

    def test_priority_and_pause(self, game: Game) -> None:
        game.step()
        game.acknowledge(game.next_presentation())  # type: ignore[arg-type]
        game.click("pixels", 50)
        game.step()

        first = game.next_presentation()
        assert first is not None and first.trigger_id == "warning"
        assert game.paused
        tick = game.engine.clock.tick_number
        assert game.step() is False
        assert game.engine.clock.tick_number == tick

        game.acknowledge(first)
        assert not game.paused
        second = game.next_presentation()
        assert second is not None and second.trigger_id == "first_pixels"
        game.acknowledge(second)
        assert game.state.flag("noticed") is True

    def test_acknowledge_requires_current_item(self, game: Game) -> None:
        game.step()
        item = game.next_presentation()
        assert item is not None
        with pytest.raises(ValueError):
            game.acknowledge(QueuedTrigger("warning", "dlg.warning", 0.0, 0.0))
        game.acknowledge(item)
        with pytest.raises(ValueError):
            game.acknowledge(item)

    def test_queued_triggers_are_published(self, game: Game) -> None:
        seen: list[TriggerQueued] = []
        game.bus.subscribe(TriggerQueued, seen.append)
        game.step()
        assert [e.trigger_id for e in seen] == ["intro"]


class TestQueuedContent:
    @pytest.fixture
    def game(self, aside_content, config) -> Game:
        return Game(aside_content, config)

    def _acknowledge_intro(self, game: Game) -> None:
        game.step()
        intro = game.next_presentation()
        assert intro is not None and intro.trigger_id == "intro"
        game.acknowledge(intro)

    def test_dialogue_then_log_in_order(self, game: Game) -> None:
        self._acknowledge_intro(game)
        dialogue = game.next_presentation()
        assert dialogue is not None
        assert (dialogue.kind, dialogue.content_id) == ("dialogue", "dlg.aside")
        assert game.presenting_request
        assert game.paused
        assert game.step() is False
        assert game.acknowledge(dialogue) == []
        assert not game.paused

        log = game.next_presentation()
        assert log is not None
        assert (log.kind, log.content_id) == ("log", "log.echo")
        assert not game.paused
        game.acknowledge(log)
        assert game.next_presentation() is None
        assert game.state.pending_content() == []

    def test_due_triggers_come_first(self, game: Game) -> None:
        self._acknowledge_intro(game)
        game.click("pixels", 50)
        game.step()
        first = game.next_presentation()
        assert first is not None and first.trigger_id == "warning"
        assert not game.presenting_request
        game.acknowledge(first)
        second = game.next_presentation()
        assert second is not None and second.trigger_id == "first_pixels"
        game.acknowledge(second)
        third = game.next_presentation()
        assert third is not None and third.content_id == "dlg.aside"

    def test_hard_reset_drops_queued_content(self, game: Game) -> None:
        self._acknowledge_intro(game)
        assert game.hard_reset() == 2
        assert game.next_presentation() is None


class TestPhases:
    def test_manual_transition_then_phase_trigger(self, game: Game) -> None:
        entered: list[PhaseEntered] = []
        game.bus.subscribe(PhaseEntered, entered.append)
        game.click("pixels", 64)
        game.step()
        assert game.phases.ready
        assert game.phases.current == 1

        assert game.confirm_transition()
        assert game.phases.current == 2
        assert not game.triggers.has_fired("canvas_entered")
        game.step()
        assert game.triggers.has_fired("canvas_entered")
        assert entered == [PhaseEntered(2, 1)]

    def test_confirm_without_condition(self, game: Game) -> None:
        game.step()
        assert not game.confirm_transition()
        assert game.phases.current == 1


class TestDiscovery:
    def test_millionaire_needs_both(self, game: Game) -> None:
        game.state.add_resource("pixels", 1_000_000)
        game.step()
        assert not game.state.has_achievement("millionaire")

        game.click("pixels")
        game.step()
        assert game.state.has_achievement("first_click")
        game.step()
        assert game.state.has_achievement("millionaire")
        assert game.state.resource("memory") == 1

    def test_idle_secret(self, game: Game) -> None:
        game.run(60)
        assert game.state.has_secret("patient")
        note = game.secrets.next_notification()
        assert note is not None and note.id == "patient"


class TestEconomy:
    def test_producer_pays_out(self, game: Game) -> None:
        game.click("pixels", 10)
        assert game.buy_producer("cursor")
        assert game.state.resource("pixels") == 0
        assert game.state.producer_count("cursor") == 1
        assert not game.buy_producer("cursor")
        game.step()
        assert game.state.resource("pixels") == Decimal("0.2")

    def test_upgrades(self, game: Game) -> None:
        game.click("pixels", 20)
        assert not game.can_buy_upgrade("palette")
        assert game.buy_upgrade("brush")
        assert game.state.multiplier_for("pixels") == 2
        assert not game.buy_upgrade("brush")
        assert game.buy_upgrade("palette")
        assert game.state.resource("pixels") == 10
        with pytest.raises(KeyError):
            game.buy_upgrade("nope")

    def test_click_counts(self, game: Game) -> None:
        game.click("pixels", 3)
        game.click("pixels")
        assert game.state.resource("pixels") == 4
        assert game.state.stat("clicks") == 2


class TestChoices:
    def test_choose(self, game: Game) -> None:
        events = game.choose("path", "merge")
        assert len(events) == 1
        assert game.state.flag("merged") is True
        assert game.state.choice("path") == "merge"

    def test_choice_errors(self, game: Game) -> None:
        with pytest.raises(KeyError):
            game.choose("fate", "accept")
        with pytest.raises(ValueError):
            game.choose("path", "maybe")
        game.choose("path", "refuse")
        with pytest.raises(ValueError):
            game.choose("path", "merge")


class TestLifecycle:
    def test_prestige(self, game: Game) -> None:
        resets: list[RunReset] = []
        game.bus.subscribe(RunReset, resets.append)
        game.click("pixels", 64)
        game.state.add_resource("memory", 3)
        game.step()
        game.confirm_transition()
        game.step()
        assert game.triggers.has_fired("intro")
        assert game.triggers.has_fired("canvas_entered")

        assert game.prestige() == 1
        assert game.phases.current == 1
        assert game.state.resource("pixels") == 0
        assert game.state.resource("memory") == 3
        assert game.state.has_achievement("first_click")
        assert not game.triggers.has_fired("intro")
        assert game.triggers.has_fired("canvas_entered")
        assert game.triggers.pending() == []

        game.step()
        assert game.triggers.has_fired("intro")
        assert resets == [RunReset(1)]

    def test_hard_reset_drops_queue_but_keeps_effects(self, game: Game) -> None:
        game.click("pixels", 50)
        game.step()
        item = game.next_presentation()
        assert item is not None and item.trigger_id == "warning"
        assert game.paused

        assert game.hard_reset() == 3
        assert not game.paused
        assert game.presenting is None
        assert game.next_presentation() is None
        assert game.state.resource("pixels") == 50
        assert game.state.has_achievement("first_click")
