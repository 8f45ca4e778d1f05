from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

import tracker.protocol.core.decoder as dec_mod
from tracker.protocol.core.bits import PayloadReader
from tracker.protocol.core.types import ActivityTag, MessageType, PositionType
from tracker.protocol.errors import PayloadTooShortError
from tracker.protocol.loader import default_catalogs

FIXED = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


def _clock() -> datetime:
    return FIXED


def decode(payload, port: int = 18, **kw):
    return dec_mod.decode_uplink(payload, port, default_catalogs(), clock=_clock, **kw)


def _position(data_nibble: int, body: bytes, total: int = 12) -> bytes:
    """POSITION uplink: type 0x03, status byte 0, battery 100%, temp 0x80, ack 0."""
    raw = bytes([0x03, 0x00, 0x64, 0x80, data_nibble & 0x0F]) + body
    return raw + bytes(max(0, total - len(raw)))


# ---------------------------------------------------------------------------
# Variant tables
# ---------------------------------------------------------------------------

def test_handler_tables_cover_every_variant():
    assert set(dec_mod.MESSAGE_HANDLERS) == set(MessageType)
    assert set(dec_mod.POSITION_HANDLERS) == set(PositionType)
    assert set(dec_mod.ACTIVITY_HANDLERS) == set(ActivityTag)


# ---------------------------------------------------------------------------
# Header-only message types
# ---------------------------------------------------------------------------

def test_heartbeat_full_record():
    raw = bytes.fromhex("055564803a0202010703000c")
    out = decode(raw)

    assert out == {
        "status": {
            "mode": {"code": 2, "description": "Permanent tracking"},
            "sos": True,
            "tracking": False,
            "moving": True,
            "periodic": False,
            "on_demand": True,
        },
        "batteryPersentage": 100,
        "temperature": 20.75,
        "ack": 3,
        "data": 10,
        "lastResetCause": "lastResetCause: 2",
        "mcuFirmware": "fwVersion: 2.1.7",
        "bleFirmware": "bleFwVersion3.0.12",
        "type": "HEARTBEAT",
        "debug": {
            "payload": "055564803a0202010703000c",
            "length": 12,
            "port": 18,
            "server_time": "2024-01-02T03:04:05.678Z",
        },
    }


@pytest.mark.parametrize(
    "type_byte,label",
    [(0x04, "ENERGY STATUS"), (0x09, "SHUTDOWN"), (0xFF, "DEBUG")],
)
def test_header_only_types(type_byte, label):
    out = decode(bytes([type_byte]) + bytes(11))
    assert out["type"] == label
    assert out["status"]["mode"]["description"] == "Standby"
    assert "error" not in out


def test_frame_pending_skips_status_header():
    out = decode(b"\x00\x2a")
    assert out == {
        "type": "FRAME PENDING",
        "token": 42,
        "debug": {
            "payload": "002a",
            "length": 2,
            "port": 18,
            "server_time": "2024-01-02T03:04:05.678Z",
        },
    }


def test_unsupported_message_type_keeps_header_and_debug(caplog):
    with caplog.at_level(logging.WARNING, logger=dec_mod.__name__):
        out = decode(bytes([0x42]) + bytes(11))

    assert "type" not in out
    assert out["error"] == {"code": 0, "description": "UNSUPPORTED MESSAGE TYPE 66"}
    assert out["batteryPersentage"] == 0
    assert out["debug"]["length"] == 12
    assert "UNSUPPORTED_MESSAGE_TYPE" in caplog.text


# ---------------------------------------------------------------------------
# POSITION
# ---------------------------------------------------------------------------

def test_gps_fix():
    raw = bytes.fromhex("030064801" "00a1d1eecfea28b33")
    out = decode(raw)

    assert out["type"] == "POSITION"
    assert out["position_type"] == "GPS fix"
    assert out["data"] == 0
    assert out["age"] == 80.0
    assert out["latitude"] == pytest.approx(48.856576)
    assert out["longitude"] == pytest.approx(-2.2902016)
    assert out["accuracy"] == pytest.approx(200.0)
    assert out["altitude"] == 0


def test_gps_fix_strict_requires_accuracy_byte():
    raw = bytes.fromhex("030064801" "00a1d1eecfea28b33")
    with pytest.raises(PayloadTooShortError):
        decode(raw[:-1])


def test_gps_fix_zero_fill_missing_accuracy():
    raw = bytes.fromhex("030064801" "00a1d1eecfea28b33")
    out = decode(raw[:-1], strict=False)
    assert out["accuracy"] == 0.0
    assert out["debug"]["length"] == 12


def test_gps_timeout():
    out = decode(_position(1, bytes([0x00, 0x01, 0x02, 0x00, 0xFF])))
    assert out["position_type"] == "GPS timeout"
    assert out["timeout_cause"] == {"code": 0, "description": "User timeout cause"}
    assert [out[f"cn{i}"] for i in range(4)] == [8.0, 16.0, 0.0, 2040.0]


def test_gps_timeout_unknown_cause():
    out = decode(_position(1, bytes([0x03])))
    assert out["timeout_cause"] == {"code": 3, "description": "UNKNOWN"}


def test_obsolete_position_type_is_error_only():
    out = decode(_position(2, b""))
    assert out["type"] == "POSITION"
    assert "position_type" not in out
    assert out["error"] == {"code": 0, "description": "UNSUPPORTED POSITION TYPE 2"}


def test_wifi_timeout_battery_voltages():
    out = decode(_position(3, bytes([1, 254, 1, 1, 1, 1])))
    assert out["position_type"] == "WIFI timeout"
    assert out["v_bat1"] == 2.8
    assert out["v_bat2"] == pytest.approx(4.2)
    assert set(k for k in out if k.startswith("v_bat")) == {f"v_bat{i}" for i in range(1, 7)}
    assert "error" not in out


def test_wifi_failure_cause():
    out = decode(_position(4, bytes([1] * 6 + [2])))
    assert out["position_type"] == "WIFI failure"
    assert out["v_bat6"] == 2.8
    assert out["error"] == {"code": 2, "description": "Antenna unavailable"}


@pytest.mark.parametrize("nibble", [5, 6])
def test_lp_gps_data_is_unsupported(nibble):
    out = decode(_position(nibble, b""))
    assert out["position_type"] == "LP-GPS data"
    assert out["error"]["description"] == f"UNSUPPORTED POSITION TYPE {nibble}"


def test_ble_beacon_scan():
    body = bytes([0x02]) + bytes.fromhex("010203040506c5" "aabbccddeeffa6")
    out = decode(_position(7, body, total=0))
    assert out["position_type"] == "BLE beacon scan"
    assert out["age"] == 16.0
    assert out["beacons"] == [
        {"mac_address": "01:02:03:04:05:06", "rssi": -59},
        {"mac_address": "aa:bb:cc:dd:ee:ff", "rssi": -90},
    ]


def test_ble_beacon_failure():
    out = decode(_position(8, bytes([4])))
    assert out["position_type"] == "BLE beacon failure"
    assert out["error"] == {"code": 4, "description": "No beacon detected"}


def test_wifi_bssids_two_stations():
    out = decode(bytes.fromhex("032CD1890900C46E1FF44B9EC5C83A355A3898A6"))

    assert out["type"] == "POSITION"
    assert out["position_type"] == "WIFI BSSIDs"
    assert out["status"]["mode"]["description"] == "Motion tracking"
    assert out["status"]["tracking"] is True
    assert out["status"]["moving"] is True
    assert out["batteryPersentage"] == 209
    assert out["age"] == 0.0
    assert out["stations"] == [
        {"mac_address": "c4:6e:1f:f4:4b:9e", "rssi": -59},
        {"mac_address": "c8:3a:35:5a:38:98", "rssi": -90},
    ]


def test_wifi_bssids_four_stations():
    raw = bytes.fromhex("0358D895090EC46E1FF44B9EB76466B3B87454AD500959CA1ED4AD525E67DA14A1AC")
    out = decode(raw)

    assert out["age"] == 112.0
    assert [s["rssi"] for s in out["stations"]] == [-73, -83, -83, -84]
    assert out["stations"][3]["mac_address"] == "52:5e:67:da:14:a1"
    assert out["debug"]["length"] == 34


def test_wifi_bssids_partial_station_strict_raises():
    raw = bytes.fromhex("032CD1890900C46E1FF44B9EC5C83A")
    with pytest.raises(PayloadTooShortError):
        decode(raw)


def test_unsupported_position_nibble():
    out = decode(_position(0x0C, b""))
    assert out["type"] == "POSITION"
    assert "position_type" not in out
    assert out["error"] == {"code": 0, "description": "UNSUPPORTED POSITION TYPE 12"}


def test_decode_position_out_of_range_data():
    ctx = dec_mod.DecodeContext(
        reader=PayloadReader(_position(0, b"")),
        catalogs=default_catalogs(),
        data=99,
    )
    out = dec_mod.decode_position(ctx)
    assert out == {"error": {"code": 0, "description": "UNSUPPORTED POSITION TYPE 99"}}


# ---------------------------------------------------------------------------
# ACTIVITY STATUS / CONFIGURATION
# ---------------------------------------------------------------------------

def test_activity_status_counter():
    raw = bytes([0x07, 0x00, 0x64, 0x80, 0x00, 0x01, 0x00, 0x01, 0x00, 0x00, 0x00, 0x00])
    out = decode(raw)
    assert out["type"] == "ACTIVITY STATUS"
    assert out["activity_counter"] == 65536


def test_configuration_parameters():
    header = bytes([0x07, 0x00, 0x64, 0x80, 0x00, 0x02])
    params = b"".join(bytes([i + 1]) + (1000 * (i + 1)).to_bytes(4, "big") for i in range(5))
    out = decode(header + params)

    assert out["type"] == "CONFIGURATION"
    for i in range(5):
        assert out[f"param{i}"] == {"type": i + 1, "value": 1000 * (i + 1)}


def test_configuration_value_is_unsigned():
    header = bytes([0x07, 0x00, 0x64, 0x80, 0x00, 0x02])
    params = bytes([9]) + b"\xff\xff\xff\xff" + bytes(20)
    out = decode(header + params)
    assert out["param0"] == {"type": 9, "value": 0xFFFFFFFF}


def test_configuration_short_payload_strict_raises():
    header = bytes([0x07, 0x00, 0x64, 0x80, 0x00, 0x02])
    with pytest.raises(PayloadTooShortError):
        decode(header + bytes(10))


def test_unsupported_activity_tag():
    raw = bytes([0x07, 0x00, 0x64, 0x80, 0x05, 0x03]) + bytes(6)
    out = decode(raw)
    assert "type" not in out
    assert out["error"] == {"code": 0, "description": "UNSUPPORTED POSITION TYPE 5/3"}


# ---------------------------------------------------------------------------
# Bounds policy / debug trailer
# ---------------------------------------------------------------------------

def test_empty_payload_strict_raises():
    with pytest.raises(PayloadTooShortError):
        decode(b"")


def test_empty_payload_zero_fill_is_frame_pending():
    out = decode(b"", strict=False)
    assert out["type"] == "FRAME PENDING"
    assert out["token"] == 0
    assert out["debug"]["payload"] == ""
    assert out["debug"]["length"] == 0


def test_short_heartbeat_zero_fill():
    out = decode(b"\x05\x00", strict=False)
    assert out["type"] == "HEARTBEAT"
    assert out["mcuFirmware"] == "fwVersion: 0.0.0"
    assert out["debug"]["payload"] == "0500"


def test_accepts_list_of_ints():
    out = decode([0x00, 0x07])
    assert out["token"] == 7


def test_default_catalogs_and_clock():
    out = dec_mod.decode_uplink(b"\x00\x01", 2)
    assert out["debug"]["server_time"].endswith("Z")
    assert out["debug"]["port"] == 2


def test_iso_timestamp_converts_to_utc():
    from datetime import timedelta

    ts = datetime(2024, 1, 2, 5, 4, 5, 678000, tzinfo=timezone(timedelta(hours=2)))
    assert dec_mod.iso_timestamp(ts) == "2024-01-02T03:04:05.678Z"
