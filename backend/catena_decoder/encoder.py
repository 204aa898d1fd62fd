# encoder.py
# Scale and pack measurements into a Catena port-1 uplink (network byte order).
# Used to build simulated uplinks and test frames; the device firmware is the
# real producer of these payloads.

from __future__ import annotations
import struct
from typing import Callable, Mapping

from .layouts import LAYOUTS, FieldGroup

_I16 = struct.Struct(">h")
_U16 = struct.Struct(">H")

# pulses per 15 min on the wire, reported per hour
_RATE_SCALE = 60 * 60 * 4
_AQI_SCALE = 512


def _to_int(v: float, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(round(v))))


def _i16(v: float, scale: float = 1) -> bytes:
    return _I16.pack(_to_int(v * scale, -32768, 32767))


def _u16(v: float, scale: float = 1) -> bytes:
    return _U16.pack(_to_int(v * scale, 0, 65535))


def _u8(v: float, scale: float = 1) -> bytes:
    return bytes([_to_int(v * scale, 0, 255)])


def _temp(v: float, signed: bool) -> bytes:
    return _i16(v, 256) if signed else _u16(v, 256)


def _rh(v: float) -> bytes:
    return _u8(v, 256 / 100)


def float_to_uflt16(v: float) -> int:
    """
    Inverse of fields.uflt16_to_float for v in [0, 1).
    Picks the largest exponent that keeps the 12-bit mantissa normalised;
    values >= 1 saturate at 0xFFFF, values <= 0 (and NaN) encode as 0.
    """
    if not v > 0:
        return 0
    exp = 15
    mant = v * 4096.0
    if mant >= 4095.5:
        return 0xFFFF
    while mant < 2048.0 and exp > 0:
        mant *= 2
        exp -= 1
    m = int(round(mant))
    if m >= 4096:  # rounding carried into the next exponent
        m = 2048
        exp += 1
    return (exp << 12) | m


def _pack_env(group: FieldGroup, values: Mapping[str, float]) -> bytes:
    return _i16(values["tempC"], 256) + _u16(values["p"], 100 / 4) + _rh(values["rh"])


def _pack_soil(group: FieldGroup, values: Mapping[str, float]) -> bytes:
    return _temp(values["tSoil"], group.signed) + _rh(values["rhSoil"])


def _pack_power_rates(group: FieldGroup, values: Mapping[str, float]) -> bytes:
    used = float_to_uflt16(values["powerUsedPerHour"] / _RATE_SCALE)
    sourced = float_to_uflt16(values["powerSourcedPerHour"] / _RATE_SCALE)
    return _U16.pack(used) + _U16.pack(sourced)


PACKERS: dict[str, Callable[[FieldGroup, Mapping[str, float]], bytes]] = {
    "vbat": lambda g, v: _i16(v["vBat"], 4096),
    "vbus": lambda g, v: _i16(v["vBus"], 4096),
    "boot": lambda g, v: _u8(v["boot"]),
    "env": _pack_env,
    "lux": lambda g, v: _u16(v["lux"]),
    "water": lambda g, v: _temp(v["tWater"], g.signed),
    "soil": _pack_soil,
    "power_counts": lambda g, v: _u16(v["powerUsedCount"]) + _u16(v["powerSourcedCount"]),
    "power_rates": _pack_power_rates,
    "aqi": lambda g, v: _U16.pack(float_to_uflt16(v["aqi"] / _AQI_SCALE)),
}


def encode(fmt: int, values: Mapping[str, float]) -> bytes:
    """
    Build [fmt][flags][groups...]. A group is sent when its keys are present
    in *values*; derived keys (tDewC, tSoilDew, error) are ignored.
    """
    layout = LAYOUTS.get(fmt)
    if layout is None:
        raise ValueError(f"Unknown format 0x{fmt:02X}")

    flags = 0
    body = bytearray()
    for mask, group in layout.groups:
        present = [k for k in group.keys if k in values]
        if not present:
            continue
        if len(present) != len(group.keys):
            missing = [k for k in group.keys if k not in values]
            raise ValueError(f"Group '{group.name}' is missing {', '.join(missing)}")
        flags |= mask
        body += PACKERS[group.name](group, values)

    return bytes([fmt, flags]) + bytes(body)


def to_hex(payload: bytes) -> str:
    return payload.hex().upper()
