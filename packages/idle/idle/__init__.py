"""idle - A fixed-step engine for incremental games."""

import logging

from idle.amount import Amount, to_amount
from idle.clock import Clock
from idle.diagnostics import Diagnostic, Diagnostics
from idle.dirty import DirtyCategory, DirtySet
from idle.engine import Engine
from idle.state import ContentRequest, GameState, Multiplier
from idle.types import SnapshotError, TickContext

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Amount",
    "Clock",
    "ContentRequest",
    "Diagnostic",
    "Diagnostics",
    "DirtyCategory",
    "DirtySet",
    "Engine",
    "GameState",
    "Multiplier",
    "SnapshotError",
    "TickContext",
    "to_amount",
]
