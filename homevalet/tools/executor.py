"""
HomeValet Tool Executor - Turn validated tool calls into device actions

Note:
    The executor never raises. Validation failures, unresolvable devices and
    exceptions from the Actions backend all come back as a failed
    ExecutionOutcome so one bad call cannot abort its siblings or the turn.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from ..environment.models import Device, DeviceCategory, EnvironmentContext
from ..protocols import ActionsProtocol, EnvironmentProtocol
from .models import ExecutionOutcome, ToolCallRequest, ValidationErrorKind
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

Handler = Callable[
    [Mapping[str, Any], Optional[str], EnvironmentContext], Awaitable[ExecutionOutcome]
]

# Advertised tools whose backends do not exist yet. They always fail and
# never touch Actions or the environment.
UNAVAILABLE_TOOLS: Dict[str, str] = {
    "openCurtains": "Curtain control coming soon",
    "closeCurtains": "Curtain control coming soon",
    "lockDoor": "Door lock control coming soon",
    "unlockDoor": "Door lock control coming soon",
}


class ResolutionFailure(str, Enum):
    NOT_FOUND = "not_found"
    NO_MATCHING_DEVICES = "no_matching_devices"


class DeviceResolutionError(Exception):
    """A tool call named a device (or device group) that does not exist"""

    def __init__(self, failure: ResolutionFailure, message: str):
        self.failure = failure
        super().__init__(message)


class ActionDispatchError(Exception):
    """An Actions backend call raised while handling a tool call"""

    def __init__(self, tool_name: str, device_id: str, cause: BaseException):
        self.tool_name = tool_name
        self.device_id = device_id
        self.cause = cause
        super().__init__(str(cause))


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _on_off(state: bool) -> str:
    return "on" if state else "off"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


class ToolExecutor:
    """
    Executes device-control tool calls.

    Usage:
        executor = ToolExecutor(actions=provider, environment=env, user_id="u1")
        outcome = await executor.execute("setTemperature", {"value": 22})
        print(outcome.message)   # Set temperature to 22°C on 2 devices
    """

    def __init__(
        self,
        actions: ActionsProtocol,
        environment: EnvironmentProtocol,
        registry: Optional[ToolRegistry] = None,
        user_id: Optional[str] = None,
    ):
        """
        Initialize ToolExecutor

        Args:
            actions: Device-mutation backend
            environment: Source of snapshots and sink for the action log
            registry: ToolRegistry used for validation (defaults to the built-in catalog)
            user_id: Passed through to every Actions call
        """
        self.actions = actions
        self.environment = environment
        self.registry = registry or ToolRegistry()
        self.user_id = user_id

        self._handlers: Dict[str, Handler] = {
            "toggleLight": self._toggle_light,
            "setBrightness": self._set_brightness,
            "setTemperature": self._set_temperature,
            "setClimateState": self._set_climate_state,
        }

    async def execute(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]],
        context: Optional[EnvironmentContext] = None,
    ) -> ExecutionOutcome:
        """
        Validate and run a single tool call.

        Args:
            name: Tool name
            arguments: Parsed call arguments
            context: Snapshot used for room defaults and device lookup;
                taken from the environment when omitted

        Returns:
            ExecutionOutcome
        """
        arguments = arguments or {}

        validation = self.registry.validate(name, arguments)
        # Stubbed tools only enforce their required parameters
        if name in UNAVAILABLE_TOOLS and validation.kind != ValidationErrorKind.MISSING_PARAMETER:
            return ExecutionOutcome(success=False, message=UNAVAILABLE_TOOLS[name])

        if not validation.valid:
            logger.info(f"Tool '{name}' rejected: {validation.error}")
            return ExecutionOutcome(
                success=False,
                error=validation.error,
                message=f"Invalid parameters: {validation.error}",
            )

        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(f"Tool '{name}' is declared but has no handler")
            return ExecutionOutcome(
                success=False,
                error=f"Unknown tool: {name}",
                message=f"I don't know how to {name}",
            )

        try:
            if context is None:
                context = self.environment.snapshot()
            room_id = arguments.get("roomId") or context.active_room_id or None

            outcome = await handler(arguments, room_id, context)
        except DeviceResolutionError as e:
            logger.info(f"Tool '{name}' could not resolve devices: {e}")
            return ExecutionOutcome(success=False, message=str(e), error=e.failure.value)
        except ActionDispatchError as e:
            logger.error(
                f"Tool '{name}' failed on device {e.device_id}: {e.cause}",
                exc_info=e.cause,
            )
            return ExecutionOutcome(
                success=False,
                error=str(e.cause),
                message=f"Failed to {name}: {e.cause}",
                data={"deviceId": e.device_id},
            )
        except Exception as e:
            logger.error(f"Tool '{name}' execution failed: {e}", exc_info=True)
            return ExecutionOutcome(
                success=False,
                error=str(e),
                message=f"Failed to {name}: {e}",
            )

        logger.info(f"Tool '{name}' executed: {'success' if outcome.success else 'failed'}")
        return outcome

    async def execute_all(
        self,
        requests: Iterable[ToolCallRequest],
        context: Optional[EnvironmentContext] = None,
    ) -> List[ExecutionOutcome]:
        """Run tool calls one after another, in the given order"""
        outcomes = []
        for request in requests:
            outcomes.append(await self.execute(request.name, request.arguments, context))
        return outcomes

    # ===== Resolution helpers =====

    @staticmethod
    def _resolve_device(context: EnvironmentContext, device_id: str, label: str) -> Device:
        device = context.get_device(device_id)
        if device is None:
            raise DeviceResolutionError(
                ResolutionFailure.NOT_FOUND, f"{label} device {device_id} not found"
            )
        return device

    @staticmethod
    def _resolve_group(
        context: EnvironmentContext,
        category: DeviceCategory,
        room_id: Optional[str],
        empty_message: str,
    ) -> List[Device]:
        devices = context.devices_in_category(category, room_id)
        if not devices:
            raise DeviceResolutionError(ResolutionFailure.NO_MATCHING_DEVICES, empty_message)
        return devices

    async def _dispatch(
        self,
        tool_name: str,
        device_id: str,
        action: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> None:
        try:
            await action(*args)
        except Exception as exc:
            raise ActionDispatchError(tool_name, device_id, exc) from exc

    # ===== Handlers =====

    async def _toggle_light(
        self, arguments: Mapping[str, Any], room_id: Optional[str], context: EnvironmentContext
    ) -> ExecutionOutcome:
        device_id = arguments.get("deviceId")
        state = arguments.get("state")

        if device_id:
            device = self._resolve_device(context, device_id, "Light")
            target_state = state if state is not None else not device.state
            await self._dispatch(
                "toggleLight", device.id, self.actions.toggle_light,
                self.user_id, room_id or device.room_id, device.id, target_state,
            )
            self.environment.add_action("toggleLight", deviceId=device.id, state=target_state)
            return ExecutionOutcome(
                success=True,
                message=f"Turned {_on_off(target_state)} {device.name or 'the light'}",
                data={"deviceIds": [device.id], "state": target_state},
            )

        lights = self._resolve_group(context, DeviceCategory.LIGHT, room_id, "No lights found")
        # The first light decides the direction for the whole group
        target_state = state if state is not None else not lights[0].state
        for light in lights:
            await self._dispatch(
                "toggleLight", light.id, self.actions.toggle_light,
                self.user_id, room_id or light.room_id, light.id, target_state,
            )

        self.environment.add_action(
            "toggleLight", roomId=room_id, state=target_state, count=len(lights)
        )
        return ExecutionOutcome(
            success=True,
            message=f"Turned {_on_off(target_state)} {_plural(len(lights), 'light')}",
            data={"deviceIds": [d.id for d in lights], "state": target_state},
        )

    async def _set_brightness(
        self, arguments: Mapping[str, Any], room_id: Optional[str], context: EnvironmentContext
    ) -> ExecutionOutcome:
        device_id = arguments.get("deviceId")
        value = arguments["value"]

        if not device_id:
            return ExecutionOutcome(
                success=False, message="Device ID required for brightness control"
            )

        device = self._resolve_device(context, device_id, "Light")
        await self._dispatch(
            "setBrightness", device.id, self.actions.set_light_brightness,
            self.user_id, room_id or device.room_id, device.id, value,
        )
        self.environment.add_action("setBrightness", deviceId=device.id, value=value)
        return ExecutionOutcome(
            success=True,
            message=f"Set {device.name or 'light'} brightness to {_format_number(value)}%",
            data={"deviceIds": [device.id], "value": value},
        )

    async def _set_temperature(
        self, arguments: Mapping[str, Any], room_id: Optional[str], context: EnvironmentContext
    ) -> ExecutionOutcome:
        device_id = arguments.get("deviceId")
        value = arguments["value"]

        if device_id:
            device = self._resolve_device(context, device_id, "Climate")
            await self._dispatch(
                "setTemperature", device.id, self.actions.set_climate_temperature,
                self.user_id, room_id or device.room_id, device.id, value,
            )
            self.environment.add_action("setTemperature", deviceId=device.id, value=value)
            return ExecutionOutcome(
                success=True,
                message=f"Set {device.name or 'climate device'} to {_format_number(value)}°C",
                data={"deviceIds": [device.id], "value": value},
            )

        devices = self._resolve_group(
            context, DeviceCategory.CLIMATE, room_id, "No climate devices found"
        )
        for device in devices:
            await self._dispatch(
                "setTemperature", device.id, self.actions.set_climate_temperature,
                self.user_id, room_id or device.room_id, device.id, value,
            )

        self.environment.add_action(
            "setTemperature", roomId=room_id, value=value, count=len(devices)
        )
        return ExecutionOutcome(
            success=True,
            message=(
                f"Set temperature to {_format_number(value)}°C on "
                f"{_plural(len(devices), 'device')}"
            ),
            data={"deviceIds": [d.id for d in devices], "value": value},
        )

    async def _set_climate_state(
        self, arguments: Mapping[str, Any], room_id: Optional[str], context: EnvironmentContext
    ) -> ExecutionOutcome:
        device_id = arguments.get("deviceId")
        state = arguments["state"]

        if not device_id:
            return ExecutionOutcome(
                success=False, message="Device ID required for climate control"
            )

        device = self._resolve_device(context, device_id, "Climate")
        await self._dispatch(
            "setClimateState", device.id, self.actions.set_climate_state,
            self.user_id, room_id or device.room_id, device.id, state,
        )
        self.environment.add_action("setClimateState", deviceId=device.id, state=state)
        return ExecutionOutcome(
            success=True,
            message=f"Turned {device.name or 'climate device'} {_on_off(state)}",
            data={"deviceIds": [device.id], "state": state},
        )
