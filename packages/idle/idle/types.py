"""Shared type aliases and protocols for the idle engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    dt: float
    elapsed: float
    request_stop: Callable[[], None]


class SnapshotError(Exception):
    """Raised on restore failures (version mismatch, malformed save data)."""


if TYPE_CHECKING:
    from idle.state import GameState

System = Callable[["GameState", TickContext], None]
