"""Save and load a Game, with backup fallback."""
from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Any

from idle.types import SnapshotError
from idle_event import QueuedTrigger

from idle_game.game import Game

if TYPE_CHECKING:
    from idle_game.config import GameConfig
    from idle_game.content import GameContent

logger = logging.getLogger(__name__)


class GameSnapshot:
    """Serializes everything a Game holds besides its content.

    ``restore`` should target a freshly built Game: a save that fails
    halfway leaves the target in an undefined state, which is why
    ``load_with_fallback`` builds a new Game for every attempt.
    """

    def snapshot(self, game: Game, saved_at: float | None = None) -> dict[str, Any]:
        """Everything needed to rebuild *game*.

        *saved_at* is a wall-clock timestamp used to credit offline
        production on load; left out, the output depends only on the game.
        """
        data = game.engine.snapshot()
        if saved_at is not None:
            data["saved_at"] = float(saved_at)
        presenting = game.presenting
        data["game"] = {
            "phases": game.phases.snapshot(),
            "triggers": game.triggers.snapshot(),
            "achievements": game.achievements.snapshot(),
            "secrets": game.secrets.snapshot(),
            "presenting": None if presenting is None else {
                "trigger_id": presenting.trigger_id,
                "queued_at": presenting.queued_at,
                "due_at": presenting.due_at,
                "kind": presenting.kind,
                "content_id": presenting.content_id,
                "request": game.presenting_request,
            },
        }
        return data

    def restore(self, game: Game, data: dict[str, Any]) -> float | None:
        """Load *data* into *game* and return its ``saved_at`` timestamp, if any.

        Raises SnapshotError on malformed data.
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Save must be an object, got {type(data).__name__}")
        try:
            section = data["game"]
            engine_data = {k: data[k] for k in ("version", "tick_number", "tps", "state")}
        except (KeyError, TypeError) as exc:
            raise SnapshotError(f"Malformed save: missing {exc}") from exc
        if not isinstance(section, dict):
            raise SnapshotError("Malformed save: 'game' must be an object")
        saved_at = data.get("saved_at")
        if saved_at is not None:
            try:
                saved_at = float(saved_at)
            except (TypeError, ValueError) as exc:
                raise SnapshotError(f"Malformed save time: {exc}") from exc
            if not math.isfinite(saved_at):
                raise SnapshotError(f"Malformed save time: {saved_at}")

        game.engine.restore(engine_data)
        game.triggers.restore(section.get("triggers", {}))
        game.achievements.restore(section.get("achievements", {}))
        game.secrets.restore(section.get("secrets", {}))
        game.phases.restore(section.get("phases", {"current": 1}), game.context())
        self._restore_presenting(game, section.get("presenting"))
        logger.info("Restored save at tick %d", game.engine.clock.tick_number)
        return saved_at

    @staticmethod
    def _restore_presenting(game: Game, raw: Any) -> None:
        if raw is None:
            return
        try:
            trigger_id = str(raw["trigger_id"])
            queued_at = float(raw["queued_at"])
            due_at = float(raw["due_at"])
            from_request = bool(raw.get("request", False))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"Malformed presentation entry: {exc}") from exc
        if from_request:
            try:
                kind = str(raw["kind"])
                content_id = str(raw["content_id"])
            except KeyError as exc:
                raise SnapshotError(f"Malformed presentation entry: {exc}") from exc
            game._present(QueuedTrigger(
                trigger_id=trigger_id,
                content_id=content_id,
                queued_at=queued_at,
                due_at=due_at,
                pauses_game=kind == "dialogue",
                kind=kind,
            ), from_request=True)
            return
        defn = game.triggers.definition(trigger_id)
        if defn is None:
            logger.warning("Dropping presentation of unknown trigger %s", trigger_id)
            return
        game._present(QueuedTrigger(
            trigger_id=trigger_id,
            content_id=defn.content_id,
            queued_at=queued_at,
            due_at=due_at,
            priority=defn.priority,
            pauses_game=defn.pauses_game,
            kind=defn.kind,
        ))

    def dumps(self, game: Game, saved_at: float | None = None) -> str:
        """Deterministic JSON text: equal games give byte-identical output."""
        return json.dumps(self.snapshot(game, saved_at), sort_keys=True, separators=(",", ":"))

    def loads(self, game: Game, text: str) -> float | None:
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"Save is not valid JSON: {exc}") from exc
        return self.restore(game, data)


def load_with_fallback(
    content: GameContent,
    primary: str | None,
    backup: str | None = None,
    config: GameConfig | None = None,
    now: float | None = None,
) -> tuple[Game, str]:
    """Load the primary save, else the backup, else start fresh.

    Returns the game and where it came from: ``"primary"``, ``"backup"`` or
    ``"fresh"``. A failed attempt never leaks into the returned game. With
    *now* given, a save that recorded ``saved_at`` earns offline production
    for the time between the two.
    """
    codec = GameSnapshot()
    for source, text in (("primary", primary), ("backup", backup)):
        if text is None:
            continue
        game = Game(content, config)
        try:
            saved_at = codec.loads(game, text)
        except SnapshotError as exc:
            logger.warning("Could not load %s save: %s", source, exc)
            continue
        away = 0.0 if now is None or saved_at is None else now - saved_at
        game.resume(away)
        return game, source
    logger.info("Starting a fresh game")
    return Game(content, config), "fresh"
