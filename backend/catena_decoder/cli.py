from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Iterator, Optional, TextIO

from pydantic import ValidationError

from .config import load_settings
from .decoder import CATENA_PORT, decode_message
from .errors import DecodeError
from .schemas import DecodeResultOut, UplinkIn

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="catena-decode",
        description="Decode Catena port-1 uplinks into JSON measurement records.",
    )
    ap.add_argument("payload", nargs="*", help='Hex payload, e.g. "14 01 18 00"')
    ap.add_argument("--stdin", action="store_true",
                    help="Read one uplink per line (hex, or a JSON object with port/frm_payload)")
    ap.add_argument("--port", type=int, default=CATENA_PORT, help="LoRaWAN port for hex inputs (default: 1)")
    ap.add_argument("--lenient", action="store_true",
                    help="Return the fields before a truncation instead of failing")
    ap.add_argument("--indent", type=int, default=None, help="JSON indent (default: CATENA_INDENT or compact)")
    ap.add_argument("--log-level", default=None, help="Logging level (default: CATENA_LOG_LEVEL or WARNING)")
    return ap


def _parse_line(line: str, port: int) -> UplinkIn:
    if line.startswith("{"):
        return UplinkIn.model_validate_json(line)
    return UplinkIn(port=port, payload=line)


def _iter_inputs(args: argparse.Namespace, stdin: TextIO) -> Iterator[str]:
    if args.stdin:
        for line in stdin:
            line = line.strip()
            if line:
                yield line
    else:
        yield from args.payload


def main(argv: Optional[list[str]] = None, stdin: Optional[TextIO] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if bool(args.payload) == args.stdin:
        ap.error("give either hex payloads or --stdin")
    settings = load_settings()

    level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    strict = settings.strict and not args.lenient
    indent = args.indent if args.indent is not None else settings.indent
    logger.debug("strict=%s indent=%s", strict, indent)

    failed = False
    for text in _iter_inputs(args, stdin or sys.stdin):
        try:
            uplink = _parse_line(text, args.port)
            result = decode_message(uplink.payload, uplink.port, strict=strict)
        except (ValidationError, DecodeError) as exc:
            print(f"error: {text}: {exc}", file=sys.stderr)
            failed = True
            continue

        if result.status == "truncated":
            failed = True
        out = DecodeResultOut.from_result(result, uplink.port)
        print(json.dumps(out.to_dict(), indent=indent or None))

    return 1 if failed else 0
