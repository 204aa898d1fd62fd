import base64
import binascii
import re

_HEX_NOISE = re.compile(r"0[xX]|[\s\-:,]")
_HEX_ONLY = re.compile(r"^[0-9A-Fa-f]*$")


def hex_to_bytes(s: str) -> bytes:
    """Accepts "15 01 18 00", "15011800", "0x15 0x01 ..." and "15-01-18-00"."""
    cleaned = _HEX_NOISE.sub("", s or "")
    if not _HEX_ONLY.match(cleaned):
        raise ValueError(f"not a hex string: {s!r}")
    if len(cleaned) % 2 != 0:
        raise ValueError(f"hex string has odd length: {len(cleaned)}")
    return binascii.unhexlify(cleaned)


def base64_to_bytes(s: str) -> bytes:
    try:
        return base64.b64decode((s or "").strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"not a base64 string: {s!r}") from exc


def text_to_bytes(s: str) -> bytes:
    """Hex first; strings that are not hex are tried as base64."""
    try:
        return hex_to_bytes(s)
    except ValueError:
        return base64_to_bytes(s)
