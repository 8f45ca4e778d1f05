# tracker/protocol/core/bits.py
from __future__ import annotations

import struct
from typing import Iterable, Sequence, Union

from tracker.protocol.errors import PayloadTooShortError

ByteSource = Union[bytes, bytearray, Sequence[int]]

_INT32 = struct.Struct(">i")
_UINT32 = struct.Struct(">I")
_INT8 = struct.Struct(">b")


def bits(value: int, lsb: int, msb: int) -> int:
    """Zero-based unsigned value held in the inclusive bit range [lsb, msb]."""
    if not 0 <= lsb <= msb <= 31:
        raise ValueError(f"Invalid bit range [{lsb}, {msb}]")
    mask = (1 << (msb - lsb + 1)) - 1
    return (value >> lsb) & mask


def bit(value: int, n: int) -> bool:
    return (value & (1 << n)) != 0


def hex_string(data: Iterable[int], separator: str = "") -> str:
    """Lowercase hex, two digits per byte."""
    return separator.join(f"{b & 0xFF:02x}" for b in data)


def _four(data: ByteSource) -> bytes:
    raw = bytes(data)
    if len(raw) != 4:
        raise ValueError(f"Expected exactly 4 bytes, got {len(raw)}")
    return raw


def int32(data: ByteSource) -> int:
    """Signed big-endian 32-bit integer."""
    return _INT32.unpack(_four(data))[0]


def uint32(data: ByteSource) -> int:
    """Unsigned big-endian 32-bit integer."""
    return _UINT32.unpack(_four(data))[0]


def int8(b: int) -> int:
    """Sign-extend a single byte."""
    return _INT8.unpack(bytes([b & 0xFF]))[0]


class PayloadReader:
    """
    Bounds policy for every field read of an uplink.

    strict=True:  reading past the end raises PayloadTooShortError.
    strict=False: missing trailing bytes read as zero.
    """

    def __init__(self, data: ByteSource, *, strict: bool = True):
        self.data = bytes(data)
        self.strict = strict

    def __len__(self) -> int:
        return len(self.data)

    def require(self, end: int, field: str | None = None) -> None:
        if self.strict and end > len(self.data):
            raise PayloadTooShortError(end, len(self.data), field=field)

    def u8(self, offset: int, field: str | None = None) -> int:
        self.require(offset + 1, field)
        return self.data[offset] if offset < len(self.data) else 0

    def slice(self, start: int, stop: int, field: str | None = None) -> bytes:
        self.require(stop, field)
        chunk = self.data[start:stop]
        return chunk + bytes(max(0, (stop - start) - len(chunk)))

    def remaining(self, start: int) -> bytes:
        return self.data[start:]
