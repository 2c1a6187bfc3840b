"""
Base Smart Home Provider - Common plumbing for device-action backends

Every backend exposes the four Actions entry points the tool executor calls.
This base class fixes their signatures and logs each call; subclasses
implement the ``_do_*`` hooks against their own device API.
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SmartHomeActionError(Exception):
    """Raised by a provider when a device refuses or fails an action"""

    def __init__(self, device_id: str, message: str):
        self.device_id = device_id
        super().__init__(message)


class BaseSmartHomeProvider(ABC):
    """
    Abstract base class for smart home action providers.

    Implements ActionsProtocol. Subclasses implement device-specific control.
    """

    provider: str = "unknown"

    def __init__(self, account_name: str = "primary"):
        self.account_name = account_name

    async def toggle_light(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        logger.info(f"[{self.provider}] toggle_light device={device_id} room={room_id} state={state}")
        await self._do_toggle_light(user_id, room_id, device_id, state)

    async def set_light_brightness(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        logger.info(f"[{self.provider}] set_light_brightness device={device_id} value={value}")
        await self._do_set_light_brightness(user_id, room_id, device_id, value)

    async def set_climate_temperature(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        logger.info(f"[{self.provider}] set_climate_temperature device={device_id} value={value}")
        await self._do_set_climate_temperature(user_id, room_id, device_id, value)

    async def set_climate_state(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        logger.info(f"[{self.provider}] set_climate_state device={device_id} state={state}")
        await self._do_set_climate_state(user_id, room_id, device_id, state)

    @abstractmethod
    async def _do_toggle_light(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        pass

    @abstractmethod
    async def _do_set_light_brightness(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        pass

    @abstractmethod
    async def _do_set_climate_temperature(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, value: float
    ) -> None:
        pass

    @abstractmethod
    async def _do_set_climate_state(
        self, user_id: Optional[str], room_id: Optional[str], device_id: str, state: bool
    ) -> None:
        pass

    def __repr__(self):
        return f"<{self.__class__.__name__} provider={self.provider} account={self.account_name}>"
