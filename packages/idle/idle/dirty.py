"""Dirty categories accumulated during a tick and drained once per tick."""
from __future__ import annotations

from enum import Enum
from typing import Iterable


class DirtyCategory(Enum):
    """Kind of state that changed since the last drain."""

    RESOURCE = "resource"
    PRODUCER = "producer"
    UPGRADE = "upgrade"
    ACHIEVEMENT = "achievement"
    SECRET = "secret"
    FLAG = "flag"
    STAT = "stat"
    CHOICE = "choice"
    PHASE = "phase"
    TIME = "time"
    LOG = "log"


ALL_CATEGORIES: frozenset[DirtyCategory] = frozenset(DirtyCategory)


class DirtySet:
    def __init__(self) -> None:
        self._marked: set[DirtyCategory] = set()

    def mark(self, *categories: DirtyCategory) -> None:
        self._marked.update(categories)

    def mark_all(self, categories: Iterable[DirtyCategory]) -> None:
        self._marked.update(categories)

    def is_dirty(self, category: DirtyCategory) -> bool:
        return category in self._marked

    def drain(self) -> frozenset[DirtyCategory]:
        """Return the accumulated categories and start a fresh set."""
        drained = frozenset(self._marked)
        self._marked = set()
        return drained

    def __bool__(self) -> bool:
        return bool(self._marked)

    def __len__(self) -> int:
        return len(self._marked)
