"""
HomeValet Environment Models - Rooms, devices and the read-only snapshot
handed to the prompt builder and tool executor.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class DeviceCategory(str, Enum):
    """Coarse device grouping used for room-wide operations"""
    LIGHT = "light"
    CLIMATE = "climate"
    FAN = "fan"
    CURTAIN = "curtain"
    SHUTTER = "shutter"
    SECURITY = "security"
    MEDIA = "media"
    OTHER = "other"


# Checked in order; first substring hit wins
_CATEGORY_KEYWORDS: Tuple[Tuple[DeviceCategory, Tuple[str, ...]], ...] = (
    (DeviceCategory.LIGHT, ("light",)),
    (DeviceCategory.CLIMATE, ("air_conditioner", "thermostat", "climate")),
    (DeviceCategory.FAN, ("fan",)),
    (DeviceCategory.CURTAIN, ("curtain",)),
    (DeviceCategory.SHUTTER, ("shutter",)),
    (DeviceCategory.SECURITY, ("door", "lock", "security")),
    (DeviceCategory.MEDIA, ("speaker", "media", "tv")),
)


def categorize(device_type: Optional[str]) -> DeviceCategory:
    """Map a raw device type string (e.g. "air_conditioner") to its category"""
    lowered = (device_type or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DeviceCategory.OTHER


def time_of_day(moment: datetime) -> str:
    if moment.hour < 12:
        return "morning"
    if moment.hour < 18:
        return "afternoon"
    return "evening"


@dataclass(frozen=True)
class Device:
    """
    A single controllable device.

    Attributes:
        id: Unique device id
        name: Display name
        type: Raw type string ("light", "air_conditioner", "thermostat", ...)
        room_id: Owning room
        state: On/off
        brightness: Percent, lights only
        temperature: Celsius set point, climate only
        mode: Climate mode ("cool", "heat", ...)
        speed: Fan speed
    """
    id: str
    name: str
    type: str
    room_id: Optional[str] = None
    state: bool = False
    brightness: Optional[int] = None
    temperature: Optional[float] = None
    mode: Optional[str] = None
    speed: Optional[int] = None

    @property
    def category(self) -> DeviceCategory:
        return categorize(self.type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], room_id: Optional[str] = None) -> "Device":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            type=data.get("type", ""),
            room_id=data.get("room_id", data.get("roomId", room_id)),
            state=bool(data.get("state", False)),
            brightness=data.get("brightness"),
            temperature=data.get("temperature"),
            mode=data.get("mode"),
            speed=data.get("speed"),
        )


@dataclass(frozen=True)
class Room:
    """A room and the devices in it"""
    id: str
    name: str
    devices: Tuple[Device, ...] = ()

    def __post_init__(self):
        # Devices always know which room holds them
        devices = tuple(
            d if d.room_id else replace(d, room_id=self.id) for d in self.devices
        )
        object.__setattr__(self, "devices", devices)

    @property
    def device_count(self) -> int:
        return len(self.devices)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        room_id = str(data["id"])
        devices = tuple(
            Device.from_dict(d, room_id=room_id) for d in data.get("devices", []) or []
        )
        return cls(id=room_id, name=data.get("name") or room_id, devices=devices)


@dataclass(frozen=True)
class ActionLogEntry:
    """One record of something the assistant did"""
    type: str
    timestamp: datetime
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "timestamp": self.timestamp.isoformat(), **self.details}


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Immutable snapshot of the home as seen at one moment.

    Both the prompt builder and the tool executor work from a snapshot so a
    single turn sees one consistent picture of the home.

    Attributes:
        rooms: Every known room with its devices
        active_room_id: Room the user is currently in, if known
        recent_actions: Newest-first action log excerpt
        generated_at: When the snapshot was taken
    """
    rooms: Tuple[Room, ...] = ()
    active_room_id: Optional[str] = None
    recent_actions: Tuple[ActionLogEntry, ...] = ()
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def current_room(self) -> Optional[Room]:
        if self.active_room_id is None:
            return None
        return self.get_room(self.active_room_id)

    @property
    def time_of_day(self) -> str:
        return time_of_day(self.generated_at)

    @property
    def all_devices(self) -> List[Device]:
        return [device for room in self.rooms for device in room.devices]

    def get_room(self, room_id: str) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def get_device(self, device_id: str) -> Optional[Device]:
        """Look a device up, searching the current room first"""
        current = self.current_room
        if current is not None:
            for device in current.devices:
                if device.id == device_id:
                    return device
        for device in self.all_devices:
            if device.id == device_id:
                return device
        return None

    def get_devices_by_room(self, room_id: str) -> List[Device]:
        room = self.get_room(room_id)
        return list(room.devices) if room else []

    def devices_in_category(
        self,
        category: DeviceCategory,
        room_id: Optional[str] = None,
    ) -> List[Device]:
        """Devices of a category in one room, or across the home when room_id is None"""
        devices = self.get_devices_by_room(room_id) if room_id else self.all_devices
        return [d for d in devices if d.category == category]
