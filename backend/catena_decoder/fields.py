# fields.py
# Primitive big-endian readers for Catena uplink fields.

from __future__ import annotations
import struct
from dataclasses import dataclass

from .errors import TruncatedPayloadError

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_I16 = struct.Struct(">h")


def _check(buf: bytes, i: int, width: int) -> None:
    if i < 0 or i + width > len(buf):
        raise TruncatedPayloadError(i, width, len(buf))


def read_u8(buf: bytes, i: int) -> tuple[int, int]:
    _check(buf, i, 1)
    return _U8.unpack_from(buf, i)[0], i + 1


def read_u16be(buf: bytes, i: int) -> tuple[int, int]:
    _check(buf, i, 2)
    return _U16.unpack_from(buf, i)[0], i + 2


def read_i16be(buf: bytes, i: int) -> tuple[int, int]:
    """uint16 on the wire, reinterpreted as two's-complement int16."""
    _check(buf, i, 2)
    return _I16.unpack_from(buf, i)[0], i + 2


def uflt16_to_float(raw: int) -> float:
    """
    Unsigned mini-float: top nibble is the exponent, low 12 bits the mantissa.
      value = (mantissa / 4096) * 2 ** (exponent - 15)
    Result is in [0, 1).
    """
    exp = raw >> 12
    mant = (raw & 0xFFF) / 4096.0
    return mant * 2.0 ** (exp - 15)


def read_uflt16(buf: bytes, i: int) -> tuple[float, int]:
    raw, i = read_u16be(buf, i)
    return uflt16_to_float(raw), i


@dataclass
class Cursor:
    """Read position into one payload. Only lives for a single decode call."""

    buf: bytes
    pos: int = 0

    def u8(self) -> int:
        v, self.pos = read_u8(self.buf, self.pos)
        return v

    def u16(self) -> int:
        v, self.pos = read_u16be(self.buf, self.pos)
        return v

    def i16(self) -> int:
        v, self.pos = read_i16be(self.buf, self.pos)
        return v

    def uflt16(self) -> float:
        v, self.pos = read_uflt16(self.buf, self.pos)
        return v

    def require(self, width: int) -> None:
        """Fail before a multi-field group starts if it cannot complete."""
        _check(self.buf, self.pos, width)

    @property
    def remaining(self) -> int:
        return len(self.buf) - self.pos
