# tracker/protocol/core/header.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from .bits import PayloadReader, bit, bits
from .fields import MessageLookup, message
from .quantize import TEMPERATURE, round_half_up

HEADER_SIZE = 12


@dataclass(frozen=True)
class StatusHeader:
    """
    Common device-state fields (bytes 1..11), present in every message
    except FRAME PENDING.

    byte 1: mode (bits 5-7) + sos/tracking/moving/periodic/on_demand flags
    byte 2: battery percentage
    byte 3: temperature (quantized)
    byte 4: ack (high nibble), data (low nibble, position sub-type)
    byte 5: last reset cause
    bytes 6-8 / 9-11: MCU / BLE firmware versions
    """
    mode: MessageLookup
    sos: bool
    tracking: bool
    moving: bool
    periodic: bool
    on_demand: bool
    battery_percentage: int
    temperature: float
    ack: int
    data: int
    last_reset_cause: str
    mcu_firmware: str
    ble_firmware: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": {
                "mode": self.mode.as_dict(),
                "sos": self.sos,
                "tracking": self.tracking,
                "moving": self.moving,
                "periodic": self.periodic,
                "on_demand": self.on_demand,
            },
            "batteryPersentage": self.battery_percentage,
            "temperature": self.temperature,
            "ack": self.ack,
            "data": self.data,
            "lastResetCause": self.last_reset_cause,
            "mcuFirmware": self.mcu_firmware,
            "bleFirmware": self.ble_firmware,
        }


def _version(reader: PayloadReader, start: int) -> str:
    return ".".join(str(reader.u8(start + i, "firmware version")) for i in range(3))


def parse_status_header(
    reader: PayloadReader,
    modes: Sequence[str],
    *,
    temperature_digits: int = 2,
) -> StatusHeader:
    reader.require(HEADER_SIZE, "status header")
    flags = reader.u8(1)
    ack_data = reader.u8(4)
    return StatusHeader(
        mode=message(bits(flags, 5, 7), modes),
        sos=bit(flags, 4),
        tracking=bit(flags, 3),
        moving=bit(flags, 2),
        periodic=bit(flags, 1),
        on_demand=bit(flags, 0),
        battery_percentage=reader.u8(2),
        temperature=round_half_up(TEMPERATURE.decode(reader.u8(3)), temperature_digits),
        ack=bits(ack_data, 4, 7),
        data=bits(ack_data, 0, 3),
        last_reset_cause=f"lastResetCause: {reader.u8(5)}",
        mcu_firmware=f"fwVersion: {_version(reader, 6)}",
        ble_firmware=f"bleFwVersion{_version(reader, 9)}",
    )
