"""Bounded collector for runtime degradations.

Authoring mistakes that slip past validation (unknown condition kinds,
unresolvable content ids, failing store lookups) are recorded here and
logged, never raised into the tick loop.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    detail: dict[str, Any] = field(default_factory=dict)


class Diagnostics:
    def __init__(self, capacity: int = 200) -> None:
        maxlen = capacity if capacity > 0 else None
        self._entries: deque[Diagnostic] = deque(maxlen=maxlen)
        self._total = 0

    def report(self, code: str, message: str, **detail: Any) -> None:
        self._entries.append(Diagnostic(code=code, message=message, detail=detail))
        self._total += 1
        logger.warning("[%s] %s", code, message)

    def query(self, code: str | None = None) -> list[Diagnostic]:
        if code is None:
            return list(self._entries)
        return [d for d in self._entries if d.code == code]

    @property
    def total(self) -> int:
        """Reports ever received, including ones evicted by the capacity."""
        return self._total

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
