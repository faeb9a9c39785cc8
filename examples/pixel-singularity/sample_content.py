"""Authored content for the Pixel Singularity demo.

Twenty phases gated by pixel thresholds, a handful of producers and
upgrades, and placeholder narrative text. Everything is plain data in the
same format a content file would use.
"""
from __future__ import annotations

from typing import Any

PHASE_KEYS = [
    "awakening", "canvas", "gallery", "studio", "exhibition",
    "collective", "network", "archive", "city", "continent",
    "planet", "orbit", "system", "nebula", "galaxy",
    "cluster", "filament", "horizon", "singularity", "nothing",
]


def _threshold(number: int) -> int:
    return 64 * 8 ** (number - 1)


def _pixels(amount: int | str) -> dict[str, Any]:
    return {"type": "resource", "resource": "pixels", "amount": amount}


def _phases() -> list[dict[str, Any]]:
    phases = []
    for number, key in enumerate(PHASE_KEYS, start=1):
        unlock = (
            {"type": "always"}
            if number == 1
            else {"type": "phase", "phase": number - 1, "completed": True}
        )
        transition = (
            {"type": "never"} if number == len(PHASE_KEYS) else _pixels(_threshold(number))
        )
        phases.append({
            "number": number,
            "key": key,
            "name": key.title(),
            "unlock": unlock,
            "transition": transition,
            "auto_transition": number % 2 == 0,
        })
    return phases


def _triggers() -> list[dict[str, Any]]:
    triggers: list[dict[str, Any]] = [
        {
            "id": "first_light",
            "content": "log.first_light",
            "conditions": [{"type": "always"}],
            "priority": 100,
            "eternal": True,
        },
        {
            "id": "watcher",
            "content": "dialogue.watcher",
            "kind": "dialogue",
            "conditions": [_pixels(500)],
            "priority": 50,
            "pauses_game": True,
            "consequences": [{"type": "set_flag", "flag": "met_watcher"}],
        },
        {
            "id": "crossroads",
            "content": "dialogue.crossroads",
            "kind": "dialogue",
            "phase": 3,
            "delay": 2.0,
            "pauses_game": True,
        },
        {
            "id": "idle_murmur",
            "content": "log.idle_murmur",
            "repeatable": True,
            "conditions": [{"type": "time", "seconds": 10, "scope": "idle"}],
        },
    ]
    for number, key in enumerate(PHASE_KEYS, start=1):
        triggers.append({
            "id": f"enter_{key}",
            "content": f"log.phase.{number}",
            "phase": number,
            "priority": 10,
        })
    return triggers


def build_content() -> dict[str, Any]:
    texts = {f"log.phase.{n}": f"[placeholder: entering phase {n}]" for n in range(1, 21)}
    texts.update({
        "log.first_light": "[placeholder: the first pixel lights up]",
        "dialogue.watcher": "[placeholder: something notices you]",
        "dialogue.crossroads": "[placeholder: a choice presents itself]",
        "log.idle_murmur": "[placeholder: the canvas waits]",
    })
    return {
        "resources": [
            {"id": "pixels", "name": "Pixels"},
            {"id": "memories", "name": "Memories", "eternal": True},
        ],
        "producers": [
            {"id": "cursor", "name": "Cursor", "resource": "pixels", "rate": "1",
             "cost": {"pixels": "10"}, "growth": "1.15"},
            {"id": "brush", "name": "Brush", "resource": "pixels", "rate": "8",
             "cost": {"pixels": "100"}, "growth": "1.15",
             "unlock": {"type": "phase", "phase": 2, "op": "gte"}},
            {"id": "easel", "name": "Easel", "resource": "pixels", "rate": "50",
             "cost": {"pixels": "1100"}, "growth": "1.15",
             "unlock": {"type": "producer", "producer": "brush", "count": 5}},
        ],
        "upgrades": [
            {"id": "sharp_cursor", "name": "Sharp Cursor", "cost": {"pixels": "200"},
             "effects": [{"type": "add_multiplier", "multiplier": "sharp_cursor",
                          "value": "2", "resource": "pixels"}]},
            {"id": "golden_frame", "name": "Golden Frame", "cost": {"pixels": "20000"},
             "requires": ["sharp_cursor"],
             "effects": [{"type": "add_multiplier", "multiplier": "golden_frame", "value": "3"}]},
        ],
        "phases": _phases(),
        "triggers": _triggers(),
        "achievements": [
            {"id": "first_click", "name": "First Click",
             "condition": {"type": "stat", "stat": "clicks", "value": 1}},
            {"id": "hundred", "name": "Hundred",
             "condition": _pixels(100)},
            {"id": "automation", "name": "Automation",
             "condition": {"type": "producer", "producer": "cursor", "count": 10}},
            {"id": "millionaire", "name": "Millionaire",
             "condition": {"type": "and", "conditions": [
                 _pixels(1000000), {"type": "achievement", "achievement": "first_click"}]},
             "consequences": [{"type": "add_resource", "resource": "memories", "amount": 1}]},
            {"id": "halfway", "name": "Halfway There", "prerequisite": "hundred",
             "condition": {"type": "phase", "phase": 10, "op": "gte"}},
        ],
        "secrets": [
            {"id": "patient", "name": "Patience",
             "condition": {"type": "time", "seconds": 30, "scope": "idle"}, "hidden": True},
            {"id": "refusal", "name": "Refusal",
             "condition": {"type": "choice", "choice": "crossroads", "option": "refuse"},
             "hidden": True},
        ],
        "choices": [
            {"id": "crossroads", "prompt": "[placeholder: merge or refuse?]",
             "options": {
                 "merge": [{"type": "add_multiplier", "multiplier": "merged", "value": "1.5"}],
                 "refuse": [{"type": "add_resource", "resource": "memories", "amount": 1}],
             }},
        ],
        "texts": texts,
    }
