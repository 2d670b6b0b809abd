"""streamtyped command-line interface.

Usage:
    sqlite3 chat.db "SELECT hex(attributedBody) ..." | python3 -m streamtyped text --hex
    python3 -m streamtyped text --input body.bin
    python3 -m streamtyped dump [--input FILE] [--hex]
    python3 -m streamtyped version
"""

from __future__ import annotations

import argparse
import binascii
import json
import logging
import sys
from typing import List, Optional

from . import (
    TypedStreamError,
    __version__,
    decode_archive,
    extract_text,
    to_jsonable,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamtyped",
        description="streamtyped — recover text from typedstream archives",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # ── text ──
    text_p = sub.add_parser("text", help="Print the archived message text")
    text_p.add_argument("--input", "-i", metavar="FILE",
                        help="Read the archive from FILE instead of stdin")
    text_p.add_argument("--hex", action="store_true",
                        help="Input is a hex dump rather than raw bytes")

    # ── dump ──
    dump_p = sub.add_parser("dump", help="Print every decoded component as JSON")
    dump_p.add_argument("--input", "-i", metavar="FILE",
                        help="Read the archive from FILE instead of stdin")
    dump_p.add_argument("--hex", action="store_true",
                        help="Input is a hex dump rather than raw bytes")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str], as_hex: bool) -> bytes:
    """Read archive bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            raw = f.read()
    else:
        if sys.stdin.isatty():
            print("streamtyped: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
        raw = sys.stdin.buffer.read()

    if as_hex:
        # Blobs copied out of a database shell often carry an X'..' wrapper.
        text = b"".join(raw.split()).decode("ascii")
        if text[:2] in ("X'", "x'") and text.endswith("'"):
            text = text[2:-1]
        return binascii.unhexlify(text)
    return raw


def _cmd_text(args: argparse.Namespace) -> int:
    raw = _read_input(args.input, args.hex)
    text = extract_text(decode_archive(raw))
    if text is None:
        logger.info("no string object found in %d-byte archive", len(raw))
        return 1
    print(text)
    return 0


def _cmd_dump(args: argparse.Namespace) -> int:
    raw = _read_input(args.input, args.hex)
    archive = decode_archive(raw)
    print(json.dumps(to_jsonable(archive), indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"streamtyped {__version__}")
        return

    try:
        if args.command == "text":
            rc = _cmd_text(args)
        else:
            rc = _cmd_dump(args)
    except TypedStreamError as e:
        print(f"streamtyped: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        print(f"streamtyped: bad hex input: {e}", file=sys.stderr)
        sys.exit(2)
    if rc:
        sys.exit(rc)


if __name__ == "__main__":
    main()
