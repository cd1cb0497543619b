from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional


class DeviceNotFound(Exception):
    def __init__(self, device_id: str):
        super().__init__("device_not_registered")
        self.device_id = device_id


@dataclass(frozen=True)
class DeviceRegistration:
    device_id: str
    bot_token: str
    chat_id: str


class DeviceRepository:
    """
    Process-local registry: device_id -> routing credentials.

    Nothing is persisted; registrations are lost on restart. A second upsert
    for the same device_id replaces the record in place.
    """
    def __init__(self):
        self._devices: Dict[str, DeviceRegistration] = {}

    def upsert(self, device_id: str, bot_token: str, chat_id: str) -> bool:
        """Returns True when the device was new, False when it was updated."""
        created = device_id not in self._devices
        # Whole-record assignment: readers never see fields from two registrations.
        self._devices[device_id] = DeviceRegistration(device_id=device_id, bot_token=bot_token, chat_id=chat_id)
        return created

    def find(self, device_id: str) -> Optional[DeviceRegistration]:
        return self._devices.get(device_id)

    def get(self, device_id: str) -> DeviceRegistration:
        device = self.find(device_id)
        if device is None:
            raise DeviceNotFound(device_id)
        return device

    def all(self) -> List[DeviceRegistration]:
        return list(self._devices.values())

    def __len__(self) -> int:
        return len(self._devices)
