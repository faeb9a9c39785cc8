"""idle-signal - In-process domain event bus for the idle engine."""
from __future__ import annotations

from idle_signal.bus import SignalBus
from idle_signal.systems import make_signal_system

__all__ = ["SignalBus", "make_signal_system"]
