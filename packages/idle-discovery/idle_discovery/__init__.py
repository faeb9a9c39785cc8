"""idle-discovery - Achievements and secrets found through conditions."""
from __future__ import annotations

from idle_discovery.systems import make_discovery_system
from idle_discovery.tracker import DiscoveryTracker
from idle_discovery.types import DiscoveryDef, Notification

__all__ = ["DiscoveryDef", "DiscoveryTracker", "Notification", "make_discovery_system"]
