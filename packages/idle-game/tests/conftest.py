"""Shared authored content for idle_game tests: three phases, no narrative."""
from __future__ import annotations

import copy
from typing import Any

import pytest

from idle_game import GameConfig, GameContent, load_content

RAW: dict[str, Any] = {
    "resources": [
        {"id": "pixels", "name": "Pixels"},
        {"id": "memory", "name": "Memory", "eternal": True},
    ],
    "producers": [
        {
            "id": "cursor",
            "resource": "pixels",
            "rate": "2",
            "cost": {"pixels": "10"},
            "growth": "1.5",
        },
    ],
    "upgrades": [
        {
            "id": "brush",
            "cost": {"pixels": "5"},
            "effects": [
                {"type": "add_multiplier", "multiplier": "brush", "value": "2", "resource": "pixels"}
            ],
        },
        {"id": "palette", "cost": {"pixels": "5"}, "requires": ["brush"]},
    ],
    "phases": [
        {
            "number": 1,
            "key": "awakening",
            "unlock": {"type": "always"},
            "transition": {"type": "resource", "resource": "pixels", "amount": 64},
        },
        {
            "number": 2,
            "key": "canvas",
            "unlock": {"type": "phase", "phase": 1, "completed": True},
            "transition": {"type": "resource", "resource": "pixels", "amount": 1000},
            "auto_transition": True,
        },
        {
            "number": 3,
            "key": "end",
            "unlock": {"type": "phase", "phase": 2, "completed": True},
            "transition": {"type": "never"},
        },
    ],
    "triggers": [
        {"id": "intro", "content": "log.intro", "conditions": [{"type": "always"}], "priority": 10},
        {
            "id": "first_pixels",
            "content": "log.first",
            "conditions": [{"type": "resource", "resource": "pixels", "amount": 10}],
            "consequences": [{"type": "set_flag", "flag": "noticed"}],
        },
        {
            "id": "warning",
            "content": "dlg.warning",
            "kind": "dialogue",
            "conditions": [{"type": "resource", "resource": "pixels", "amount": 50}],
            "priority": 50,
            "pauses_game": True,
        },
        {"id": "canvas_entered", "content": "log.canvas", "phase": 2, "eternal": True},
    ],
    "achievements": [
        {
            "id": "first_click",
            "name": "First Click",
            "condition": {"type": "stat", "stat": "clicks", "value": 1},
        },
        {
            "id": "millionaire",
            "condition": {
                "type": "and",
                "conditions": [
                    {"type": "resource", "resource": "pixels", "amount": 1000000},
                    {"type": "achievement", "achievement": "first_click"},
                ],
            },
            "consequences": [{"type": "add_resource", "resource": "memory", "amount": 1}],
        },
    ],
    "secrets": [
        {
            "id": "patient",
            "condition": {"type": "time", "seconds": 5, "scope": "idle"},
            "hidden": True,
        },
    ],
    "choices": [
        {
            "id": "path",
            "prompt": "Merge with the canvas?",
            "options": {"merge": [{"type": "set_flag", "flag": "merged"}], "refuse": []},
        },
    ],
    "texts": {
        "log.intro": "A single pixel flickers.",
        "log.first": "There are more of them now.",
        "dlg.warning": "Something is watching.",
        "log.canvas": "The canvas opens.",
    },
}


@pytest.fixture
def raw() -> dict[str, Any]:
    return copy.deepcopy(RAW)


@pytest.fixture
def content(raw: dict[str, Any]) -> GameContent:
    return load_content(raw, phase_count=None)


@pytest.fixture
def config() -> GameConfig:
    return GameConfig(tps=10)


@pytest.fixture
def aside_content(raw: dict[str, Any]) -> GameContent:
    """The intro trigger also queues a dialogue and a log when acknowledged."""
    raw["triggers"][0]["consequences"] = [
        {"type": "queue_dialogue", "dialogue": "dlg.aside"},
        {"type": "queue_log", "log": "log.echo"},
    ]
    raw["texts"]["dlg.aside"] = "Did you hear that?"
    raw["texts"]["log.echo"] = "An echo."
    return load_content(raw, phase_count=None)
