"""
Device-control tool catalog.

Declarative data only: every entry is a name, a description and a parameter
schema. Behaviour lives in ToolExecutor.
"""

from typing import Tuple

from .models import ParameterSchema, ParameterSpec, ParameterType, ToolDefinition

ROOM_ID_DESCRIPTION = "ID of the room. If not provided, uses the current active room."


def _room_id() -> ParameterSpec:
    return ParameterSpec("roomId", ParameterType.STRING, ROOM_ID_DESCRIPTION)


TOGGLE_LIGHT = ToolDefinition(
    name="toggleLight",
    description=(
        "Turn a light on or off. Use deviceId to target a specific light, "
        "or omit to toggle all lights in the current room."
    ),
    parameters=ParameterSchema((
        ParameterSpec(
            "deviceId", ParameterType.STRING,
            "ID of the light device to toggle. If not provided, toggles all lights in the current room.",
        ),
        _room_id(),
        ParameterSpec(
            "state", ParameterType.BOOLEAN,
            "Desired state: true for on, false for off. If not provided, toggles current state.",
        ),
    )),
)

SET_BRIGHTNESS = ToolDefinition(
    name="setBrightness",
    description="Set the brightness level of a light (0-100%).",
    parameters=ParameterSchema((
        ParameterSpec("deviceId", ParameterType.STRING, "ID of the light device"),
        ParameterSpec(
            "value", ParameterType.NUMBER, "Brightness level from 0 to 100",
            required=True, minimum=0, maximum=100,
        ),
        _room_id(),
    )),
)

SET_TEMPERATURE = ToolDefinition(
    name="setTemperature",
    description=(
        "Set the temperature of a climate device (air conditioner or thermostat). "
        "Omit deviceId to set every climate device in the room."
    ),
    parameters=ParameterSchema((
        ParameterSpec("deviceId", ParameterType.STRING, "ID of the climate device"),
        ParameterSpec(
            "value", ParameterType.NUMBER, "Temperature in Celsius (16-30)",
            required=True, minimum=16, maximum=30,
        ),
        _room_id(),
    )),
)

SET_CLIMATE_STATE = ToolDefinition(
    name="setClimateState",
    description="Turn a climate device (AC or thermostat) on or off.",
    parameters=ParameterSchema((
        ParameterSpec("deviceId", ParameterType.STRING, "ID of the climate device"),
        ParameterSpec(
            "state", ParameterType.BOOLEAN, "true to turn on, false to turn off",
            required=True,
        ),
        _room_id(),
    )),
)

OPEN_CURTAINS = ToolDefinition(
    name="openCurtains",
    description="Open curtains or blinds.",
    parameters=ParameterSchema((
        ParameterSpec("deviceId", ParameterType.STRING, "ID of the curtain device"),
        _room_id(),
    )),
)

CLOSE_CURTAINS = ToolDefinition(
    name="closeCurtains",
    description="Close curtains or blinds.",
    parameters=ParameterSchema((
        ParameterSpec("deviceId", ParameterType.STRING, "ID of the curtain device"),
        _room_id(),
    )),
)

LOCK_DOOR = ToolDefinition(
    name="lockDoor",
    description="Lock a door. Use with caution - requires confirmation for security.",
    parameters=ParameterSchema((
        ParameterSpec(
            "deviceId", ParameterType.STRING, "ID of the door lock device", required=True,
        ),
        _room_id(),
    )),
)

UNLOCK_DOOR = ToolDefinition(
    name="unlockDoor",
    description="Unlock a door. Use with caution - requires confirmation for security.",
    parameters=ParameterSchema((
        ParameterSpec(
            "deviceId", ParameterType.STRING, "ID of the door lock device", required=True,
        ),
        _room_id(),
    )),
)

DEFAULT_TOOLS: Tuple[ToolDefinition, ...] = (
    TOGGLE_LIGHT,
    SET_BRIGHTNESS,
    SET_TEMPERATURE,
    SET_CLIMATE_STATE,
    OPEN_CURTAINS,
    CLOSE_CURTAINS,
    LOCK_DOOR,
    UNLOCK_DOOR,
)
