# layouts.py
# Bitmask -> field-group tables for the four Catena port-1 record formats.
#
# Every record is [fmt u8][flags u8] followed by the groups whose bit is set,
# in ascending bit order. Groups are shared between formats; only the bit
# each group sits on (and, for 0x11, the signedness of two temperatures)
# differs.

from __future__ import annotations
from dataclasses import dataclass
from functools import partial
from typing import Callable, Union

from .dewpoint import dewpoint
from .fields import Cursor

Value = Union[float, int, str]
Record = dict[str, Value]

# Literal reported alongside every temp/pressure/RH group
STATUS_OK = "none"


@dataclass(frozen=True)
class FieldGroup:
    name: str
    width: int                 # bytes consumed on the wire
    keys: tuple[str, ...]      # measured keys (derived keys are not listed)
    read: Callable[[Cursor], Record]
    signed: bool = True        # only meaningful for temperature groups


def _temp(cur: Cursor, signed: bool) -> float:
    raw = cur.i16() if signed else cur.u16()
    return raw / 256


def _rh(cur: Cursor) -> float:
    return cur.u8() / 256 * 100


def _read_voltage(cur: Cursor, key: str) -> Record:
    return {key: cur.i16() / 4096.0}


def _read_boot(cur: Cursor) -> Record:
    return {"boot": cur.u8()}


def _read_env(cur: Cursor) -> Record:
    t = _temp(cur, signed=True)
    p = cur.u16() * 4 / 100.0
    rh = _rh(cur)
    return {"tempC": t, "error": STATUS_OK, "p": p, "rh": rh, "tDewC": dewpoint(t, rh)}


def _read_lux(cur: Cursor) -> Record:
    return {"lux": cur.u16()}


def _read_water(cur: Cursor, signed: bool) -> Record:
    return {"tWater": _temp(cur, signed)}


def _read_soil(cur: Cursor, signed: bool) -> Record:
    t = _temp(cur, signed)
    rh = _rh(cur)
    return {"tSoil": t, "rhSoil": rh, "tSoilDew": dewpoint(t, rh)}


def _read_power_counts(cur: Cursor) -> Record:
    used = cur.u16()
    sourced = cur.u16()
    return {"powerUsedCount": used, "powerSourcedCount": sourced}


def _read_power_rates(cur: Cursor) -> Record:
    # pulses per 15 min -> per hour
    used = cur.uflt16() * 60 * 60 * 4
    sourced = cur.uflt16() * 60 * 60 * 4
    return {"powerUsedPerHour": used, "powerSourcedPerHour": sourced}


def _read_aqi(cur: Cursor) -> Record:
    return {"aqi": cur.uflt16() * 512}


VBAT = FieldGroup("vbat", 2, ("vBat",), partial(_read_voltage, key="vBat"))
VBUS = FieldGroup("vbus", 2, ("vBus",), partial(_read_voltage, key="vBus"))
BOOT = FieldGroup("boot", 1, ("boot",), _read_boot)
ENV = FieldGroup("env", 5, ("tempC", "p", "rh"), _read_env)
LUX = FieldGroup("lux", 2, ("lux",), _read_lux)
WATER = FieldGroup("water", 2, ("tWater",), partial(_read_water, signed=True))
SOIL = FieldGroup("soil", 3, ("tSoil", "rhSoil"), partial(_read_soil, signed=True))
POWER_COUNTS = FieldGroup("power_counts", 4, ("powerUsedCount", "powerSourcedCount"), _read_power_counts)
POWER_RATES = FieldGroup("power_rates", 4, ("powerUsedPerHour", "powerSourcedPerHour"), _read_power_rates)
AQI = FieldGroup("aqi", 2, ("aqi",), _read_aqi)

# Format 0x11 firmware sends the one-wire and soil temperatures without sign
# extension; negative readings come out as large positive values.
WATER_UNSIGNED = FieldGroup("water", 2, ("tWater",), partial(_read_water, signed=False), signed=False)
SOIL_UNSIGNED = FieldGroup("soil", 3, ("tSoil", "rhSoil"), partial(_read_soil, signed=False), signed=False)


@dataclass(frozen=True)
class RecordLayout:
    fmt: int
    label: str
    groups: tuple[tuple[int, FieldGroup], ...]   # (flag bit, group), ascending

    def __post_init__(self) -> None:
        masks = [mask for mask, _ in self.groups]
        for mask in masks:
            if mask <= 0 or mask > 0x80 or mask & (mask - 1):
                raise ValueError(f"format 0x{self.fmt:02X}: bad flag bit 0x{mask:X}")
        if masks != sorted(set(masks)):
            raise ValueError(f"format 0x{self.fmt:02X}: flag bits must be unique and ascending")

    @property
    def known_bits(self) -> int:
        bits = 0
        for mask, _ in self.groups:
            bits |= mask
        return bits


LAYOUTS: dict[int, RecordLayout] = {
    layout.fmt: layout
    for layout in (
        RecordLayout(0x11, "Catena 4410 sensor", (
            (0x01, VBAT),
            (0x02, VBUS),
            (0x04, ENV),
            (0x08, LUX),
            (0x10, WATER_UNSIGNED),
            (0x20, SOIL_UNSIGNED),
        )),
        RecordLayout(0x14, "Catena 4450 M101 power", (
            (0x01, VBAT),
            (0x02, VBUS),
            (0x04, BOOT),
            (0x08, ENV),
            (0x10, LUX),
            (0x20, POWER_COUNTS),
            (0x40, POWER_RATES),
        )),
        RecordLayout(0x15, "Catena 4450 M102 soil/water", (
            (0x01, VBAT),
            (0x02, VBUS),
            (0x04, BOOT),
            (0x08, ENV),
            (0x10, LUX),
            (0x20, WATER),
            (0x40, SOIL),
        )),
        RecordLayout(0x17, "Catena 4460 AQI", (
            (0x01, VBAT),
            (0x02, VBUS),
            (0x04, BOOT),
            (0x08, ENV),
            (0x10, LUX),
            (0x20, AQI),
        )),
    )
}
