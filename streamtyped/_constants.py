"""typedstream constants — header, control tags, type encodings, limits.

Only the little-endian, version-4 flavour of the format is supported.
That is the only one the message store ever writes.
"""

from __future__ import annotations

from typing import Tuple

# ── Header ────────────────────────────────────────────────────
# byte 0: streamer version, byte 1: signature length, then the signature,
# then a 4-byte system-version field.
STREAMER_VERSION: int = 4
SIGNATURE: bytes = b"streamtyped"
SYSTEM_VERSION_LENGTH: int = 4
# Every Mac OS X archiver writes 1000 here.  Informational only.
SYSTEM_VERSION_MAC_OS_X: int = 1000

# ── Control tags (single byte each) ───────────────────────────
TAG_INT16: int = 0x81     # a 16-bit integer follows
TAG_INT32: int = 0x82     # a 32-bit integer follows
TAG_DECIMAL: int = 0x83   # a float/double follows
TAG_START: int = 0x84     # begin object
TAG_EMPTY: int = 0x85     # nil / end of a class chain
TAG_END: int = 0x86       # end of an object's field list

# Bytes at or above this value are back-references: index = byte - 0x92.
REFERENCE_BASE: int = 0x92

# Tags that can never stand in for a count or length.
STRUCTURAL_TAGS: Tuple[int, ...] = (TAG_START, TAG_EMPTY, TAG_END)

# ── Type encoding bytes (Objective-C @encode characters) ─────
ENC_OBJECT: int = 0x40     # '@'
ENC_UTF8: int = 0x2B       # '+'
ENC_EMBEDDED: int = 0x2A   # '*'
ENC_FLOAT: int = 0x66      # 'f'
ENC_DOUBLE: int = 0x64     # 'd'
ENC_CHAR: int = 0x63       # 'c'
ENC_UCHAR: int = 0x43      # 'C'
ENC_SHORT: int = 0x73      # 's'
ENC_USHORT: int = 0x53     # 'S'
ENC_INT: int = 0x69        # 'i'
ENC_UINT: int = 0x49       # 'I'
# 'l'/'L' are 32 bits on the archiving platform in theory, but the
# message store always writes them as 8 bytes.
ENC_LONG: int = 0x6C       # 'l'
ENC_ULONG: int = 0x4C      # 'L'
ENC_LONGLONG: int = 0x71   # 'q'
ENC_ULONGLONG: int = 0x51  # 'Q'

# ── Text extraction ───────────────────────────────────────────
STRING_CLASSES: Tuple[str, ...] = ("NSString", "NSMutableString")

# ── Safety limits ─────────────────────────────────────────────
# Bounds nested objects + embedded streams so hostile input raises
# MalformedStream instead of exhausting the interpreter stack.
MAX_DEPTH: int = 64
