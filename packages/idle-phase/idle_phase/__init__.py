"""idle-phase - Ordered phase progression gated by conditions."""
from __future__ import annotations

from idle_phase.machine import PhaseMachine
from idle_phase.systems import make_phase_system
from idle_phase.types import PhaseDef, PhaseProgress

__all__ = ["PhaseDef", "PhaseMachine", "PhaseProgress", "make_phase_system"]
