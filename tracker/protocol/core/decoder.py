# tracker/protocol/core/decoder.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from tracker.protocol.loader import Catalogs, default_catalogs
from .bits import ByteSource, PayloadReader, hex_string, int32, uint32
from .fields import mac_rssi, message, unsupported
from .header import parse_status_header
from .quantize import ACCURACY, AGE, BATTERY_VOLTAGE, CARRIER_NOISE
from .types import (
    ACTIVITY_LABELS,
    MESSAGE_LABELS,
    POSITION_LABELS,
    ActivityTag,
    MessageType,
    PositionType,
    Unsupported,
    classify,
)

_log = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Record = Dict[str, Any]

CONFIG_SLOTS = 5
CONFIG_SLOT_SIZE = 5
BATTERY_SLOTS = 6
CN_SLOTS = 4


@dataclass(frozen=True)
class DecodeContext:
    """Everything a variant handler may read; handlers write into the output record."""
    reader: PayloadReader
    catalogs: Catalogs
    data: int = 0
    log: logging.Logger = _log


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# POSITION sub-types (header 'data' nibble)
# ---------------------------------------------------------------------------

def _gps_fix(ctx: DecodeContext, out: Record) -> None:
    r = ctx.reader
    out["age"] = AGE.decode(r.u8(5, "age"))
    # 24-bit signed, big-endian; the LSB of the 32-bit value is always zero
    out["latitude"] = int32(r.slice(6, 9, "latitude") + b"\x00") / 1e7
    out["longitude"] = int32(r.slice(9, 12, "longitude") + b"\x00") / 1e7
    out["accuracy"] = ACCURACY.decode(r.u8(12, "accuracy"))
    out["altitude"] = 0  # not transmitted


def _gps_timeout(ctx: DecodeContext, out: Record) -> None:
    r = ctx.reader
    out["timeout_cause"] = message(r.u8(5, "timeout cause"), ctx.catalogs.gps_timeout_causes).as_dict()
    for i in range(CN_SLOTS):
        out[f"cn{i}"] = CARRIER_NOISE.decode(r.u8(6 + i, "carrier over noise"))


def _battery_voltages(ctx: DecodeContext, out: Record) -> None:
    for i in range(BATTERY_SLOTS):
        out[f"v_bat{i + 1}"] = BATTERY_VOLTAGE.decode(ctx.reader.u8(5 + i, "battery voltage"))


def _wifi_failure(ctx: DecodeContext, out: Record) -> None:
    _battery_voltages(ctx, out)
    out["error"] = message(ctx.reader.u8(11, "wifi failure cause"), ctx.catalogs.wifi_failure_causes).as_dict()


def _ble_beacon_failure(ctx: DecodeContext, out: Record) -> None:
    out["error"] = message(ctx.reader.u8(5, "ble failure cause"), ctx.catalogs.ble_failure_causes).as_dict()


def _mac_scan(key: str) -> Callable[[DecodeContext, Record], None]:
    def handler(ctx: DecodeContext, out: Record) -> None:
        out["age"] = AGE.decode(ctx.reader.u8(5, "age"))
        entries = mac_rssi(ctx.reader.remaining(6), strict=ctx.reader.strict)
        out[key] = [e.as_dict() for e in entries]
    return handler


def _position_unsupported(ctx: DecodeContext, out: Record) -> None:
    out["error"] = unsupported(f"UNSUPPORTED POSITION TYPE {ctx.data}").as_dict()


POSITION_HANDLERS: dict[PositionType, Callable[[DecodeContext, Record], None]] = {
    PositionType.GPS_FIX: _gps_fix,
    PositionType.GPS_TIMEOUT: _gps_timeout,
    PositionType.OBSOLETE: _position_unsupported,
    PositionType.WIFI_TIMEOUT: _battery_voltages,
    PositionType.WIFI_FAILURE: _wifi_failure,
    PositionType.LP_GPS_DATA: _position_unsupported,  # encrypted, undocumented
    PositionType.LP_GPS_DATA_ALT: _position_unsupported,
    PositionType.BLE_BEACON_SCAN: _mac_scan("beacons"),
    PositionType.BLE_BEACON_FAILURE: _ble_beacon_failure,
    PositionType.WIFI_BSSIDS: _mac_scan("stations"),
}


def decode_position(ctx: DecodeContext) -> Record:
    out: Record = {}
    variant = classify(PositionType, ctx.data)
    if isinstance(variant, Unsupported):
        ctx.log.warning("UNSUPPORTED_POSITION_TYPE data=%d", variant.raw)
        _position_unsupported(ctx, out)
        return out

    label = POSITION_LABELS.get(variant)
    if label is not None:
        out["position_type"] = label
    POSITION_HANDLERS[variant](ctx, out)
    return out


# ---------------------------------------------------------------------------
# ACTIVITY STATUS / CONFIGURATION (share type 0x07, split on byte 5)
# ---------------------------------------------------------------------------

def _activity_status(ctx: DecodeContext, out: Record) -> None:
    out["activity_counter"] = uint32(ctx.reader.slice(6, 10, "activity counter"))


def _configuration(ctx: DecodeContext, out: Record) -> None:
    r = ctx.reader
    for i in range(CONFIG_SLOTS):
        offset = 6 + CONFIG_SLOT_SIZE * i
        out[f"param{i}"] = {
            "type": r.u8(offset, "configuration parameter"),
            "value": uint32(r.slice(offset + 1, offset + CONFIG_SLOT_SIZE, "configuration parameter")),
        }


ACTIVITY_HANDLERS: dict[ActivityTag, Callable[[DecodeContext, Record], None]] = {
    ActivityTag.ACTIVITY_STATUS: _activity_status,
    ActivityTag.CONFIGURATION: _configuration,
}


def decode_activity(ctx: DecodeContext) -> Record:
    out: Record = {}
    tag = ctx.reader.u8(5, "activity tag")
    variant = classify(ActivityTag, tag)
    if isinstance(variant, Unsupported):
        ctx.log.warning("UNSUPPORTED_ACTIVITY_TAG data=%d tag=%d", ctx.data, tag)
        out["error"] = unsupported(f"UNSUPPORTED POSITION TYPE {ctx.data}/{tag}").as_dict()
        return out

    out["type"] = ACTIVITY_LABELS[variant]
    ACTIVITY_HANDLERS[variant](ctx, out)
    return out


# ---------------------------------------------------------------------------
# Message types (byte 0)
# ---------------------------------------------------------------------------

def _frame_pending(ctx: DecodeContext) -> Record:
    return {"token": ctx.reader.u8(1, "token")}


def _header_only(ctx: DecodeContext) -> Record:
    return {}


MESSAGE_HANDLERS: dict[MessageType, Callable[[DecodeContext], Record]] = {
    MessageType.FRAME_PENDING: _frame_pending,
    MessageType.POSITION: decode_position,
    MessageType.ENERGY_STATUS: _header_only,
    MessageType.HEARTBEAT: _header_only,
    MessageType.ACTIVITY_CONFIG: decode_activity,
    MessageType.SHUTDOWN: _header_only,
    MessageType.DEBUG: _header_only,
}


def decode_uplink(
    payload: ByteSource,
    port: int,
    catalogs: Optional[Catalogs] = None,
    *,
    clock: Clock = utc_now,
    strict: bool = True,
    temperature_digits: int = 2,
    logger: Optional[logging.Logger] = None,
) -> Record:
    """
    Decode one tracker uplink into a nested record.

    The record carries a 'type' tag for recognized messages, an 'error'
    MessageLookup for unsupported ones, and always a 'debug' trailer.
    Out-of-range reads raise PayloadTooShortError unless strict=False,
    in which case missing bytes read as zero. Without catalogs the packaged
    tables are used. Events go to 'logger' when one is given.
    """
    log = logger or _log
    if catalogs is None:
        catalogs = default_catalogs()
    reader = PayloadReader(payload, strict=strict)
    decoded: Record = {}

    msg_type = reader.u8(0, "message type")
    data = 0

    # Every message type except FRAME PENDING carries the status header
    if msg_type != MessageType.FRAME_PENDING:
        header = parse_status_header(reader, catalogs.modes, temperature_digits=temperature_digits)
        decoded.update(header.as_dict())
        data = header.data

    ctx = DecodeContext(reader=reader, catalogs=catalogs, data=data, log=log)
    variant = classify(MessageType, msg_type)
    if isinstance(variant, Unsupported):
        log.warning("UNSUPPORTED_MESSAGE_TYPE type=%d", variant.raw)
        decoded["error"] = unsupported(f"UNSUPPORTED MESSAGE TYPE {variant.raw}").as_dict()
    else:
        label = MESSAGE_LABELS.get(variant)
        if label is not None:
            decoded["type"] = label
        decoded.update(MESSAGE_HANDLERS[variant](ctx))

    decoded["debug"] = {
        "payload": hex_string(reader.data),
        "length": len(reader),
        "port": port,
        "server_time": iso_timestamp(clock()),
    }

    log.debug(
        "UPLINK_DECODED type=%s len=%d port=%s",
        decoded.get("type", "-"),
        len(reader),
        port,
    )
    return decoded
