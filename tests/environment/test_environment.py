"""Tests for homevalet.environment: models and the in-memory store"""

from datetime import datetime

import pytest

from homevalet.environment import (
    Device,
    DeviceCategory,
    EnvironmentContext,
    HomeEnvironment,
    Room,
    categorize,
    time_of_day,
)


class TestCategorize:

    @pytest.mark.parametrize("device_type, expected", [
        ("light", DeviceCategory.LIGHT),
        ("ceiling_light", DeviceCategory.LIGHT),
        ("air_conditioner", DeviceCategory.CLIMATE),
        ("thermostat", DeviceCategory.CLIMATE),
        ("ceiling_fan", DeviceCategory.FAN),
        ("curtain", DeviceCategory.CURTAIN),
        ("door_lock", DeviceCategory.SECURITY),
        ("toaster", DeviceCategory.OTHER),
        (None, DeviceCategory.OTHER),
    ])
    def test_categorize(self, device_type, expected):
        assert categorize(device_type) == expected


class TestTimeOfDay:

    @pytest.mark.parametrize("hour, expected", [
        (0, "morning"),
        (11, "morning"),
        (12, "afternoon"),
        (17, "afternoon"),
        (18, "evening"),
        (23, "evening"),
    ])
    def test_boundaries(self, hour, expected):
        assert time_of_day(datetime(2024, 1, 1, hour, 59)) == expected


class TestModels:

    def test_device_from_dict(self):
        device = Device.from_dict(
            {"id": "lamp", "name": "Lamp", "type": "light", "state": True, "brightness": 70},
            room_id="living",
        )
        assert device.room_id == "living"
        assert device.state is True
        assert device.brightness == 70
        assert device.category == DeviceCategory.LIGHT

    def test_room_from_dict(self):
        room = Room.from_dict({
            "id": "office",
            "devices": [{"id": "desk", "type": "light"}],
        })
        assert room.name == "office"
        assert room.device_count == 1
        assert room.devices[0].name == "desk"
        assert room.devices[0].room_id == "office"

    def test_room_assigns_itself_to_devices(self):
        room = Room(id="bedroom", name="Bedroom", devices=(
            Device(id="t", name="Thermostat", type="thermostat"),
            Device(id="x", name="Moved", type="light", room_id="hall"),
        ))
        assert room.devices[0].room_id == "bedroom"
        assert room.devices[1].room_id == "hall"

        env = HomeEnvironment([room])
        assert env.snapshot().get_device("t").room_id == "bedroom"


class TestEnvironmentContext:

    def test_current_room(self, environment):
        context = environment.snapshot()
        assert context.current_room.name == "Living Room"

    def test_no_current_room(self, rooms):
        context = EnvironmentContext(rooms=tuple(rooms))
        assert context.current_room is None

    def test_get_device_searches_all_rooms(self, environment):
        context = environment.snapshot()
        assert context.get_device("thermostat").room_id == "bedroom"
        assert context.get_device("missing") is None

    def test_devices_in_category(self, environment):
        context = environment.snapshot()
        living = [d.id for d in context.devices_in_category(DeviceCategory.LIGHT, "living")]
        everywhere = [d.id for d in context.devices_in_category(DeviceCategory.LIGHT)]
        assert living == ["floor-lamp", "ceiling"]
        assert everywhere == ["floor-lamp", "ceiling", "desk-lamp"]
        assert context.devices_in_category(DeviceCategory.LIGHT, "attic") == []

    def test_time_of_day_from_generated_at(self, environment, morning):
        assert environment.snapshot(now=morning).time_of_day == "morning"


class TestHomeEnvironment:

    def test_action_log_newest_first_and_bounded(self):
        env = HomeEnvironment(log_size=10)
        for i in range(12):
            env.add_action("toggleLight", n=i)

        assert len(env.recent_actions) == 10
        assert env.recent_actions[0].details == {"n": 11}
        assert env.recent_actions[-1].details == {"n": 2}

    def test_snapshot_holds_five_actions(self, environment):
        for i in range(7):
            environment.add_action("setBrightness", value=i)

        context = environment.snapshot()

        assert len(context.recent_actions) == 5
        assert context.recent_actions[0].details == {"value": 6}

    def test_snapshot_is_frozen_in_time(self, environment):
        before = environment.snapshot()
        environment.update_device("ceiling", state=False)

        assert before.get_device("ceiling").state is True
        assert environment.snapshot().get_device("ceiling").state is False

    def test_update_unknown_device(self, environment):
        with pytest.raises(KeyError):
            environment.update_device("ghost", state=True)

    def test_change_room(self, environment):
        environment.change_room("bedroom")
        assert environment.snapshot().current_room.id == "bedroom"
        with pytest.raises(KeyError):
            environment.change_room("attic")

    def test_from_config(self):
        env = HomeEnvironment.from_config({
            "active_room": "kitchen",
            "rooms": [{"id": "kitchen", "name": "Kitchen", "devices": [
                {"id": "k-light", "name": "Kitchen Light", "type": "light"},
            ]}],
        })
        assert env.active_room_id == "kitchen"
        assert env.get_device_by_id("k-light").name == "Kitchen Light"

    def test_from_empty_config(self):
        env = HomeEnvironment.from_config(None)
        assert env.rooms == []
        assert env.snapshot().current_room is None
