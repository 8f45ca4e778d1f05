# tracker/protocol/core/fields.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from tracker.protocol.errors import PayloadTooShortError
from .bits import ByteSource, hex_string, int8

MAC_RSSI_GROUP = 7
UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class MacRssiEntry:
    mac_address: str
    rssi: int  # dBm

    def as_dict(self) -> dict:
        return {"mac_address": self.mac_address, "rssi": self.rssi}


@dataclass(frozen=True)
class MessageLookup:
    code: int
    description: str

    def as_dict(self) -> dict:
        return {"code": self.code, "description": self.description}


def mac_rssi(data: ByteSource, *, strict: bool = True) -> List[MacRssiEntry]:
    """
    Decode consecutive 7-byte groups: 6-byte MAC address followed by a signed RSSI byte.

    A trailing partial group raises in strict mode and is zero-filled otherwise.
    """
    raw = bytes(data)
    items: List[MacRssiEntry] = []
    for offset in range(0, len(raw), MAC_RSSI_GROUP):
        group = raw[offset: offset + MAC_RSSI_GROUP]
        if len(group) < MAC_RSSI_GROUP:
            if strict:
                raise PayloadTooShortError(
                    offset + MAC_RSSI_GROUP, len(raw), field="mac_rssi group"
                )
            group = group + bytes(MAC_RSSI_GROUP - len(group))
        items.append(MacRssiEntry(mac_address=hex_string(group[:6], ":"), rssi=int8(group[6])))
    return items


def message(code: int, descriptions: Sequence[str]) -> MessageLookup:
    if code < 0 or code >= len(descriptions):
        return MessageLookup(code=code, description=UNKNOWN)
    return MessageLookup(code=code, description=descriptions[code])


def unsupported(text: str) -> MessageLookup:
    return message(0, (text,))
