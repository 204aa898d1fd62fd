"""Port-1 uplink dispatcher: picks a layout from the format byte and walks the flag bits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Literal, Union

from .errors import TruncatedPayloadError
from .fields import Cursor
from .layouts import LAYOUTS, Record, RecordLayout

logger = logging.getLogger(__name__)

CATENA_PORT = 1

Status = Literal["ok", "unrecognized_port", "unrecognized_format", "truncated"]
Payload = Union[bytes, bytearray, memoryview, Iterable[int]]


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one uplink."""

    status: Status
    record: Record = field(default_factory=dict)
    fmt: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def _as_bytes(payload: Payload) -> bytes:
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, (str, int)):
        raise TypeError(f"payload must be bytes or a sequence of ints, not {type(payload).__name__}")
    return bytes(payload)


def _decode_layout(layout: RecordLayout, buf: bytes, record: Record) -> None:
    cur = Cursor(buf, pos=1)
    flags = cur.u8()
    logger.debug("Decoding %s (0x%02X) flags=0x%02X", layout.label, layout.fmt, flags)

    unknown = flags & ~layout.known_bits
    if unknown:
        logger.debug("Ignoring unassigned flag bits 0x%02X for format 0x%02X", unknown, layout.fmt)

    for mask, group in layout.groups:
        if not flags & mask:
            continue
        cur.require(group.width)
        record.update(group.read(cur))


def decode_message(payload: Payload, port: int, *, strict: bool = True) -> DecodeResult:
    """Decode one uplink received on *port*.

    Unknown ports and format bytes give an empty, non-ok result rather than an
    error. A payload that ends inside a field group raises
    :class:`TruncatedPayloadError`; with ``strict=False`` the groups read
    before that point are returned with status ``"truncated"`` instead.
    """

    if port != CATENA_PORT:
        logger.debug("Ignoring uplink on port %s", port)
        return DecodeResult("unrecognized_port")

    buf = _as_bytes(payload)
    if not buf:
        logger.debug("Ignoring empty uplink")
        return DecodeResult("unrecognized_format")

    fmt = buf[0]
    layout = LAYOUTS.get(fmt)
    if layout is None:
        logger.debug("Ignoring uplink with unknown format 0x%02X", fmt)
        return DecodeResult("unrecognized_format", fmt=fmt)

    record: Record = {}
    try:
        _decode_layout(layout, buf, record)
    except TruncatedPayloadError as exc:
        if strict:
            raise
        logger.warning("Truncated 0x%02X uplink: %s", fmt, exc)
        return DecodeResult("truncated", record, fmt)

    return DecodeResult("ok", record, fmt)


def decode(payload: Payload, port: int, *, strict: bool = True) -> Record:
    """Decode an uplink into a flat ``{key: value}`` mapping (empty if not ours)."""

    return decode_message(payload, port, strict=strict).record
