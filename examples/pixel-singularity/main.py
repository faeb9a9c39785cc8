"""Pixel Singularity - idle engine demo with an autoplay bot.

Twenty phases of placeholder content played by a simple bot: it clicks,
buys the cheapest producer it can afford, buys upgrades, reads every
dialogue and log, confirms manual transitions, and picks a side at the
crossroads. Saves are written as JSON with a rolling backup.

Run:
    python main.py --ticks 3000
    python main.py --save pixel.json --verbose
    python main.py --validate
"""
from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

from idle_consequence import AchievementUnlocked, SecretRevealed
from idle_game import (
    ChoiceMade,
    ContentError,
    Game,
    GameConfig,
    GameSnapshot,
    PhaseEntered,
    load_content,
    load_with_fallback,
    validate_content,
)

from sample_content import build_content

CLICK_EVERY = 4


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pixel Singularity autoplay demo")
    parser.add_argument("--ticks", type=int, default=3000, help="Ticks to simulate")
    parser.add_argument("--tps", type=int, default=20, help="Ticks per second")
    parser.add_argument("--save", type=Path, default=None,
                        help="Save file: loaded if present, written on exit")
    parser.add_argument("--choice", choices=("merge", "refuse"), default="merge",
                        help="Option the bot takes at the crossroads")
    parser.add_argument("--validate", action="store_true",
                        help="Validate the content and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args()


def _subscribe(game: Game) -> None:
    game.bus.subscribe(PhaseEntered, lambda e: print(
        f"  [t={game.now:7.1f}] phase {e.previous} -> {e.phase} "
        f"({game.phases.current_definition.name})"
    ))
    game.bus.subscribe(AchievementUnlocked, lambda e: print(
        f"  [t={game.now:7.1f}] achievement: {e.achievement_id}"
    ))
    game.bus.subscribe(SecretRevealed, lambda e: print(
        f"  [t={game.now:7.1f}] secret: {e.secret_id}"
    ))
    game.bus.subscribe(ChoiceMade, lambda e: print(
        f"  [t={game.now:7.1f}] chose {e.option!r} at {e.choice_id}"
    ))


def _present(game: Game, choice: str) -> None:
    item = game.next_presentation()
    while item is not None:
        text = game.content.text(item.content_id) or item.content_id
        tag = "DIALOGUE" if item.kind == "dialogue" else "log"
        print(f"  [t={game.now:7.1f}] {tag}: {text}")
        game.acknowledge(item)
        if item.trigger_id == "crossroads" and game.state.choice("crossroads") is None:
            game.choose("crossroads", choice)
        item = game.next_presentation()


def _shop(game: Game) -> None:
    for upgrade in game.content.upgrades:
        game.buy_upgrade(upgrade.id)
    affordable = [
        p for p in game.content.producers
        if game.can_buy_producer(p.id)
    ]
    affordable.sort(key=lambda p: p.cost_for(game.state.producer_count(p.id)).get("pixels", 0))
    for producer in affordable:
        if game.buy_producer(producer.id):
            break


def play(game: Game, ticks: int, choice: str) -> None:
    for i in range(ticks):
        if i % CLICK_EVERY == 0:
            game.click("pixels")
        game.step()
        _present(game, choice)
        _shop(game)
        if game.phases.ready:
            game.confirm_transition()


def _read(path: Path) -> str | None:
    return path.read_text(encoding="utf-8") if path.exists() else None


def save(game: Game, path: Path) -> None:
    backup = path.with_suffix(path.suffix + ".bak")
    if path.exists():
        path.replace(backup)
    path.write_text(GameSnapshot().dumps(game, saved_at=time.time()), encoding="utf-8")


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    raw = build_content()

    if args.validate:
        issues = validate_content(raw)
        for issue in issues:
            print(issue)
        print(f"{len(issues)} issue(s)")
        return

    try:
        content = load_content(raw)
    except ContentError as exc:
        for issue in exc.issues:
            print(issue)
        raise SystemExit(1) from exc

    config = GameConfig(tps=args.tps)
    if args.save is not None:
        backup = args.save.with_suffix(args.save.suffix + ".bak")
        game, source = load_with_fallback(
            content, _read(args.save), _read(backup), config, now=time.time()
        )
    else:
        game, source = Game(content, config), "fresh"

    print("=" * 60)
    print("  Pixel Singularity")
    print(f"  {len(content.phases)} phases, {args.ticks} ticks at {args.tps} tps ({source})")
    offline = game.last_offline
    if offline is not None and not offline.empty:
        earned = ", ".join(f"{k} +{v:.4E}" for k, v in offline.earned.items())
        print(f"  Away {offline.time_away:.0f}s, credited {offline.capped_time}s: {earned}")
    print("=" * 60)

    _subscribe(game)
    play(game, args.ticks, args.choice)

    state = game.state
    print()
    print("=" * 60)
    print(f"  Time: {game.now:.1f}s   Phase: {game.phases.current}/{game.phases.final_phase}")
    print(f"  Pixels: {state.resource('pixels'):.4E}   Memories: {state.resource('memories')}")
    print(f"  Producers: {state.producers()}")
    print(f"  Achievements: {sorted(game.achievements.discovered())}")
    print(f"  Secrets: {sorted(game.secrets.discovered())}")
    print(f"  Diagnostics: {len(game.diagnostics)} kept of {game.diagnostics.total} reported")
    print("=" * 60)

    if args.save is not None:
        save(game, args.save)
        print(f"  Saved to {args.save}")


if __name__ == "__main__":
    main()
