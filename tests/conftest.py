"""Shared fixtures: a small two-room home and mock device actions"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from homevalet.environment import Device, HomeEnvironment, Room


def make_rooms():
    living = Room(
        id="living",
        name="Living Room",
        devices=(
            # The OFF light comes first so it decides a group toggle's direction
            Device(id="floor-lamp", name="Floor Lamp", type="light", state=False, brightness=40),
            Device(id="ceiling", name="Ceiling Light", type="light", state=True, brightness=80),
            Device(
                id="living-ac", name="Air Conditioner", type="air_conditioner",
                state=True, temperature=24, mode="cool",
            ),
            Device(id="curtains", name="Curtains", type="curtain", state=False),
        ),
    )
    bedroom = Room(
        id="bedroom",
        name="Bedroom",
        devices=(
            Device(id="desk-lamp", name="Desk Lamp", type="light", state=False, brightness=30),
            Device(
                id="thermostat", name="Thermostat", type="thermostat",
                state=True, temperature=20, mode="heat",
            ),
        ),
    )
    return [living, bedroom]


@pytest.fixture
def rooms():
    return make_rooms()


@pytest.fixture
def environment(rooms):
    return HomeEnvironment(rooms=rooms, active_room_id="living")


@pytest.fixture
def morning():
    return datetime(2024, 5, 1, 9, 30, 0)


@pytest.fixture
def actions():
    mock = MagicMock()
    mock.toggle_light = AsyncMock()
    mock.set_light_brightness = AsyncMock()
    mock.set_climate_temperature = AsyncMock()
    mock.set_climate_state = AsyncMock()
    return mock
