"""
In-memory smart home provider backed by HomeEnvironment.

Used for local runs and tests: every action mutates the device record held
by the environment store.
"""

from typing import Optional

from ...environment.store import HomeEnvironment
from .base import BaseSmartHomeProvider, SmartHomeActionError


class InMemorySmartHomeProvider(BaseSmartHomeProvider):
    """Applies device actions directly to a HomeEnvironment"""

    provider = "memory"

    def __init__(self, environment: HomeEnvironment, account_name: str = "primary"):
        super().__init__(account_name=account_name)
        self.environment = environment

    def _update(self, device_id: str, **changes) -> None:
        try:
            self.environment.update_device(device_id, **changes)
        except KeyError:
            raise SmartHomeActionError(device_id, f"Device {device_id} is not reachable")

    async def _do_toggle_light(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        self._update(device_id, state=state)

    async def _do_set_light_brightness(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        # A light set to a non-zero brightness is on
        self._update(device_id, brightness=int(value), state=value > 0)

    async def _do_set_climate_temperature(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        self._update(device_id, temperature=value)

    async def _do_set_climate_state(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        self._update(device_id, state=state)
