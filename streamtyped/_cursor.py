"""Positional reader over an immutable archive buffer.

All multi-byte values are little-endian.  The cursor never rewinds: every
successful read advances `position`, and every failed read leaves it where
the missing bytes would have started.
"""

from __future__ import annotations

import struct
from typing import Dict, Tuple

from ._constants import (
    REFERENCE_BASE,
    STRUCTURAL_TAGS,
    TAG_INT16,
    TAG_INT32,
)
from ._errors import MalformedStream, OutOfData

# (width, signed) -> precompiled struct
_INT_STRUCTS: Dict[Tuple[int, bool], struct.Struct] = {
    (1, False): struct.Struct("<B"),
    (1, True): struct.Struct("<b"),
    (2, False): struct.Struct("<H"),
    (2, True): struct.Struct("<h"),
    (4, False): struct.Struct("<I"),
    (4, True): struct.Struct("<i"),
    (8, False): struct.Struct("<Q"),
    (8, True): struct.Struct("<q"),
}

_FLOAT32 = struct.Struct("<f")
_FLOAT64 = struct.Struct("<d")


class Cursor:
    """Read-only view of `buf` with a monotonically increasing offset."""

    __slots__ = ("_buf", "position")

    def __init__(self, buf: bytes) -> None:
        self._buf = bytes(buf)
        self.position = 0

    def __len__(self) -> int:
        return len(self._buf)

    @property
    def remaining(self) -> int:
        return len(self._buf) - self.position

    @property
    def at_end(self) -> bool:
        return self.position >= len(self._buf)

    # ── Raw bytes ─────────────────────────────────────────────

    def peek(self) -> int:
        """Return the current byte without consuming it."""
        if self.position >= len(self._buf):
            raise OutOfData("peek past end of stream", self.position)
        return self._buf[self.position]

    def peek_at(self, ahead: int) -> int:
        """Return the byte `ahead` positions past the current one, or -1."""
        off = self.position + ahead
        if off >= len(self._buf):
            return -1
        return self._buf[off]

    def read_byte(self) -> int:
        if self.position >= len(self._buf):
            raise OutOfData("read past end of stream", self.position)
        b = self._buf[self.position]
        self.position += 1
        return b

    def read_bytes(self, n: int) -> bytes:
        if n < 0 or n > self.remaining:
            raise OutOfData(
                "need {} bytes, {} left".format(n, self.remaining), self.position
            )
        out = self._buf[self.position:self.position + n]
        self.position += n
        return out

    # ── Fixed-width numbers ───────────────────────────────────

    def read_int(self, width: int, signed: bool) -> int:
        """Read a little-endian integer of 1, 2, 4 or 8 bytes."""
        try:
            st = _INT_STRUCTS[(width, signed)]
        except KeyError:
            raise ValueError("unsupported integer width: {}".format(width))
        return st.unpack(self.read_bytes(width))[0]

    def read_float32(self) -> float:
        return _FLOAT32.unpack(self.read_bytes(4))[0]

    def read_float64(self) -> float:
        return _FLOAT64.unpack(self.read_bytes(8))[0]

    # ── Dynamically tagged integers ───────────────────────────
    # Counts and lengths are one byte unless prefixed by TAG_INT16 or
    # TAG_INT32.  A structural tag or a reference byte in this position
    # means the stream went off the rails.

    def read_dynamic_int(self, signed: bool = False) -> int:
        start = self.position
        head = self.peek()
        if head == TAG_INT16:
            self.position += 1
            return self.read_int(2, signed)
        if head == TAG_INT32:
            self.position += 1
            return self.read_int(4, signed)
        if head in STRUCTURAL_TAGS:
            raise MalformedStream(
                "expected integer, got control tag 0x{:02x}".format(head), start
            )
        if head >= REFERENCE_BASE:
            raise MalformedStream(
                "expected integer, got reference 0x{:02x}".format(head), start
            )
        return self.read_int(1, signed)

    def read_count(self) -> int:
        """Read an unsigned length or count."""
        return self.read_dynamic_int(signed=False)
