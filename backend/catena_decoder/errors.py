"""Exceptions raised while decoding Catena payloads."""

from __future__ import annotations


class DecodeError(ValueError):
    """Base class for malformed payloads."""


class TruncatedPayloadError(DecodeError):
    """A field needs more bytes than the payload has left."""

    def __init__(self, offset: int, width: int, length: int):
        super().__init__(
            f"need {width} byte(s) at offset {offset}, payload has {length}"
        )
        self.offset = offset
        self.width = width
        self.length = length
