"""
HomeValet Environment - Room and device awareness

Provides:
- Device, Room, ActionLogEntry: World model records
- EnvironmentContext: Immutable snapshot consumed by the assistant pipeline
- HomeEnvironment: In-memory store with active room and action log
"""

from .models import (
    DeviceCategory,
    Device,
    Room,
    ActionLogEntry,
    EnvironmentContext,
    categorize,
    time_of_day,
)
from .store import HomeEnvironment

__all__ = [
    "DeviceCategory",
    "Device",
    "Room",
    "ActionLogEntry",
    "EnvironmentContext",
    "categorize",
    "time_of_day",
    "HomeEnvironment",
]
