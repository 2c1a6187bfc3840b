"""
Smart home providers for HomeValet

Concrete implementations of the device Actions capability.
"""

from .base import BaseSmartHomeProvider, SmartHomeActionError
from .memory import InMemorySmartHomeProvider

__all__ = ["BaseSmartHomeProvider", "SmartHomeActionError", "InMemorySmartHomeProvider"]
