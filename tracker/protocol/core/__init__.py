# tracker/protocol/core/__init__.py

from .bits import bits, bit, hex_string, int32, uint32, PayloadReader
from .quantize import QuantizationSpec, step_size, decode_value
from .fields import MacRssiEntry, MessageLookup, mac_rssi, message
from .header import StatusHeader, parse_status_header
from .types import MessageType, PositionType, ActivityTag, Unsupported
from .decoder import decode_uplink
from .defs import TrackerDecoder

__all__ = [
    "bits", "bit", "hex_string", "int32", "uint32", "PayloadReader",
    "QuantizationSpec", "step_size", "decode_value",
    "MacRssiEntry", "MessageLookup", "mac_rssi", "message",
    "StatusHeader", "parse_status_header",
    "MessageType", "PositionType", "ActivityTag", "Unsupported",
    "decode_uplink",
    "TrackerDecoder",
]
