"""
HomeValet Protocols - Abstract interfaces for dependency injection

These protocols define the contracts the assistant pipeline expects from its
collaborators. The bundled implementations (HomeEnvironment,
InMemorySmartHomeProvider, StreamingClient) satisfy them, but any object with
the same shape can be plugged in.
"""

from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, runtime_checkable

from .environment.models import ActionLogEntry, EnvironmentContext


@runtime_checkable
class EnvironmentProtocol(Protocol):
    """
    Read-mostly view of the home.

    The pipeline only reads snapshots and appends to the action log.
    """

    def snapshot(self, now: Optional[datetime] = None) -> EnvironmentContext:
        """Return an immutable view of rooms, devices and recent actions"""
        ...

    def add_action(self, action_type: str, **details: Any) -> ActionLogEntry:
        """Record something the assistant did"""
        ...


@runtime_checkable
class ActionsProtocol(Protocol):
    """
    Device-mutation entry points.

    Each call performs one real home-automation effect. Implementations raise
    on failure; the tool executor converts exceptions into outcomes.

    Example:
        class HueActions:
            async def toggle_light(self, user_id, room_id, device_id, state):
                await bridge.set_light(device_id, on=state)
            ...
    """

    async def toggle_light(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        ...

    async def set_light_brightness(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        ...

    async def set_climate_temperature(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        ...

    async def set_climate_state(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        ...


@runtime_checkable
class CompletionClientProtocol(Protocol):
    """
    Interface for the completion service adapter used by the orchestrator.

    ``stream_completion`` must be an async generator of StreamEvent objects
    (see homevalet.llm.events).
    """

    def stream_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Any]] = None,
    ) -> AsyncIterator[Any]:
        ...
