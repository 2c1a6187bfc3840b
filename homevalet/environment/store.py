"""
HomeValet Environment Store - In-memory world model of rooms and devices

Keeps the authoritative room/device state, the active room and a bounded
log of recent assistant actions, and hands out immutable
EnvironmentContext snapshots.
"""

import dataclasses
import logging
from collections import deque
from datetime import datetime
from typing import Any, Deque, Dict, Iterable, List, Optional

from .models import ActionLogEntry, Device, EnvironmentContext, Room

logger = logging.getLogger(__name__)

ACTION_LOG_SIZE = 10
SNAPSHOT_ACTION_LIMIT = 5


class HomeEnvironment:
    """
    Mutable home state with snapshot access.

    Example:
        env = HomeEnvironment(
            rooms=[Room(id="living", name="Living Room", devices=(...))],
            active_room_id="living",
        )
        context = env.snapshot()
        env.add_action("toggleLight", deviceId="lamp-1", state=True)
    """

    def __init__(
        self,
        rooms: Optional[Iterable[Room]] = None,
        active_room_id: Optional[str] = None,
        log_size: int = ACTION_LOG_SIZE,
    ):
        self._rooms: Dict[str, Room] = {}
        for room in rooms or []:
            self._rooms[room.id] = room
        self._active_room_id = active_room_id
        # Newest entry first
        self._actions: Deque[ActionLogEntry] = deque(maxlen=log_size)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "HomeEnvironment":
        """
        Build from the ``home`` section of the YAML config.

        Args:
            config: Dict with optional ``active_room`` and ``rooms`` list
        """
        config = config or {}
        rooms = [Room.from_dict(r) for r in config.get("rooms", []) or []]
        env = cls(rooms=rooms, active_room_id=config.get("active_room"))
        logger.info(
            f"Environment loaded: {len(rooms)} rooms, "
            f"{sum(r.device_count for r in rooms)} devices"
        )
        return env

    # ===== Rooms =====

    @property
    def active_room_id(self) -> Optional[str]:
        return self._active_room_id

    @property
    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def change_room(self, room_id: Optional[str]) -> None:
        if room_id is not None and room_id not in self._rooms:
            raise KeyError(f"Unknown room: {room_id}")
        self._active_room_id = room_id

    # ===== Devices =====

    def get_device_by_id(self, device_id: str) -> Optional[Device]:
        return self.snapshot().get_device(device_id)

    def update_device(self, device_id: str, **changes: Any) -> Device:
        """
        Replace a device's attributes.

        Raises:
            KeyError: If no room holds the device
        """
        for room_id, room in self._rooms.items():
            for position, device in enumerate(room.devices):
                if device.id != device_id:
                    continue
                updated = dataclasses.replace(device, **changes)
                devices = list(room.devices)
                devices[position] = updated
                self._rooms[room_id] = dataclasses.replace(room, devices=tuple(devices))
                return updated
        raise KeyError(f"Unknown device: {device_id}")

    # ===== Action log =====

    @property
    def recent_actions(self) -> List[ActionLogEntry]:
        return list(self._actions)

    def add_action(self, action_type: str, **details: Any) -> ActionLogEntry:
        entry = ActionLogEntry(type=action_type, timestamp=datetime.now(), details=details)
        self._actions.appendleft(entry)
        logger.debug(f"Action recorded: {action_type} {details}")
        return entry

    # ===== Snapshot =====

    def snapshot(self, now: Optional[datetime] = None) -> EnvironmentContext:
        return EnvironmentContext(
            rooms=tuple(self._rooms.values()),
            active_room_id=self._active_room_id,
            recent_actions=tuple(list(self._actions)[:SNAPSHOT_ACTION_LIMIT]),
            generated_at=now or datetime.now(),
        )
