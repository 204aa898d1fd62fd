import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from catena_decoder import decode, encode, to_hex
from catena_decoder.encoder import float_to_uflt16
from catena_decoder.fields import uflt16_to_float


def test_encode_soil_water_frame_matches_device_bytes():
    reading = {
        "vBat": 4.2734375,
        "boot": 13,
        "tempC": 21.61328125,
        "p": 981.0,
        "rh": 76.171875,
        "lux": 0,
        "tWater": 28.06640625,
        "tSoil": 20.2734375,
        "rhSoil": 89.0625,
    }
    payload = encode(0x15, reading)
    assert to_hex(payload) == "157D44600D159D5FCDC300001C111446E4"


def test_encode_aqi_frame_matches_device_bytes():
    reading = {
        "vBat": 4.2734375,
        "boot": 13,
        "tempC": 21.61328125,
        "p": 981.0,
        "rh": 76.171875,
        "lux": 0,
        "aqi": 288.875,
    }
    assert to_hex(encode(0x17, reading)) == "173D44600D159D5FCDC30000F907"


def test_encode_power_frame():
    reading = {
        "powerUsedCount": 10,
        "powerSourcedCount": 2,
        "powerUsedPerHour": 7200.0,
        "powerSourcedPerHour": 3600.0,
    }
    payload = encode(0x14, reading)
    assert to_hex(payload) == "1460000A0002F800E800"
    assert decode(payload, 1) == reading


def test_derived_keys_are_ignored():
    decoded = decode(bytes.fromhex("14 0D F8 00 42 17 80 59 35 80"), 1)
    assert "tDewC" in decoded and "error" in decoded
    assert to_hex(encode(0x14, decoded)) == "140DF800421780593580"


def test_format_11_keeps_unsigned_water_temperature():
    assert to_hex(encode(0x11, {"tWater": 0xF91B / 256})) == "1110F91B"
    assert to_hex(encode(0x15, {"tWater": -6.89453125})) == "1520F91B"


def test_encode_clamps_to_wire_range():
    assert to_hex(encode(0x14, {"vBat": 10.0})) == "14017FFF"
    assert to_hex(encode(0x14, {"boot": 300})) == "1404FF"
    assert to_hex(encode(0x14, {"lux": -5})) == "14100000"


def test_encode_empty_reading():
    assert encode(0x17, {}) == b"\x17\x00"


def test_encode_rejects_partial_group():
    with pytest.raises(ValueError, match="rh"):
        encode(0x15, {"tempC": 20.0, "p": 1000.0})


def test_encode_rejects_unknown_format():
    with pytest.raises(ValueError):
        encode(0x99, {"vBat": 1.0})


@pytest.mark.parametrize(
    "value, raw",
    [
        (0.0, 0x0000),
        (-1.0, 0x0000),
        (math.nan, 0x0000),
        (0.5, 0xF800),
        (0.25, 0xE800),
        (2311 / 4096, 0xF907),
        (1.0, 0xFFFF),
        (5.0, 0xFFFF),
    ],
)
def test_float_to_uflt16(value, raw):
    assert float_to_uflt16(value) == raw


def test_float_to_uflt16_keeps_small_values():
    raw = float_to_uflt16(1e-5)
    assert uflt16_to_float(raw) == pytest.approx(1e-5, rel=1e-3)


def test_float_to_uflt16_rounding_carries_into_exponent():
    # just below 0.5: mantissa rounds up to 4096 at exponent 14
    assert float_to_uflt16(0.5 - 1e-9) == 0xF800
