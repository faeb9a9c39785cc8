"""idle-event - Condition-driven trigger scheduling."""
from idle_event.scheduler import TriggerScheduler
from idle_event.systems import make_trigger_system
from idle_event.types import QueuedTrigger, TriggerDef

__all__ = [
    "QueuedTrigger",
    "TriggerDef",
    "TriggerScheduler",
    "make_trigger_system",
]
