# tracker/protocol/core/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Type, TypeVar, Union


class MessageType(IntEnum):
    FRAME_PENDING = 0x00
    POSITION = 0x03
    ENERGY_STATUS = 0x04
    HEARTBEAT = 0x05
    ACTIVITY_CONFIG = 0x07
    SHUTDOWN = 0x09
    DEBUG = 0xFF


class PositionType(IntEnum):
    GPS_FIX = 0
    GPS_TIMEOUT = 1
    OBSOLETE = 2
    WIFI_TIMEOUT = 3
    WIFI_FAILURE = 4
    LP_GPS_DATA = 5
    LP_GPS_DATA_ALT = 6
    BLE_BEACON_SCAN = 7
    BLE_BEACON_FAILURE = 8
    WIFI_BSSIDS = 9


class ActivityTag(IntEnum):
    ACTIVITY_STATUS = 1
    CONFIGURATION = 2


# Output labels ("type" tag for messages, "position_type" for positions)
MESSAGE_LABELS: dict[MessageType, str] = {
    MessageType.FRAME_PENDING: "FRAME PENDING",
    MessageType.POSITION: "POSITION",
    MessageType.ENERGY_STATUS: "ENERGY STATUS",
    MessageType.HEARTBEAT: "HEARTBEAT",
    MessageType.SHUTDOWN: "SHUTDOWN",
    MessageType.DEBUG: "DEBUG",
}

ACTIVITY_LABELS: dict[ActivityTag, str] = {
    ActivityTag.ACTIVITY_STATUS: "ACTIVITY STATUS",
    ActivityTag.CONFIGURATION: "CONFIGURATION",
}

POSITION_LABELS: dict[PositionType, str] = {
    PositionType.GPS_FIX: "GPS fix",
    PositionType.GPS_TIMEOUT: "GPS timeout",
    PositionType.WIFI_TIMEOUT: "WIFI timeout",
    PositionType.WIFI_FAILURE: "WIFI failure",
    PositionType.LP_GPS_DATA: "LP-GPS data",
    PositionType.LP_GPS_DATA_ALT: "LP-GPS data",
    PositionType.BLE_BEACON_SCAN: "BLE beacon scan",
    PositionType.BLE_BEACON_FAILURE: "BLE beacon failure",
    PositionType.WIFI_BSSIDS: "WIFI BSSIDs",
}


@dataclass(frozen=True)
class Unsupported:
    """A discriminator value with no known variant."""
    raw: int


E = TypeVar("E", bound=IntEnum)


def classify(enum_cls: Type[E], raw: int) -> Union[E, Unsupported]:
    try:
        return enum_cls(raw)
    except ValueError:
        return Unsupported(raw)
