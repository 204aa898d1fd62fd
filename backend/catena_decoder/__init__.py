"""Decoder for MCCI Catena sensor uplinks (port 1, formats 0x11/0x14/0x15/0x17)."""

from .decoder import DecodeResult, decode, decode_message
from .dewpoint import dewpoint
from .encoder import encode, to_hex
from .errors import DecodeError, TruncatedPayloadError

__all__ = [
    "DecodeError",
    "DecodeResult",
    "TruncatedPayloadError",
    "decode",
    "decode_message",
    "dewpoint",
    "encode",
    "to_hex",
]
