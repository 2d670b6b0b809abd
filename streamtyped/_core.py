"""typedstream core — header validation, type/value/object decoding, driver.

Grammar handled here, one byte at a time through a Cursor:

    archive    := header component*  [END | EMPTY]
    header     := version(1) siglen(1) signature(siglen) sysversion(4)
    component  := typedef value*          (one value per type tag)
    typedef    := REF | count encoding-bytes
    object     := START class field* [EMPTY] END
    class      := object | REF | count name version(1)

REF is any byte >= 0x92 and indexes the Type Table or the Object Table
depending on where it appears.  Both tables are owned by one
TypedStreamDecoder and shared by every nested decode step of that call,
including embedded streams.

Object slots are reserved *before* the class and fields are read.  A
class chain pointing back at its own unfinished slot therefore finds a
reservation and fails with MalformedStream rather than recursing forever.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ._constants import (
    MAX_DEPTH,
    REFERENCE_BASE,
    SIGNATURE,
    STREAMER_VERSION,
    SYSTEM_VERSION_LENGTH,
    SYSTEM_VERSION_MAC_OS_X,
    TAG_EMPTY,
    TAG_END,
    TAG_START,
)
from ._cursor import Cursor
from ._errors import HeaderError, MalformedStream, TypedStreamError
from ._model import (
    INTEGER_TAGS,
    T_EMBEDDED,
    T_FLOAT32,
    T_FLOAT64,
    T_OBJECT,
    T_UNKNOWN,
    T_UTF8,
    Archive,
    ClassInfo,
    Component,
    EmptyMarker,
    Float,
    Header,
    Integer,
    Object,
    ObjectReference,
    Opaque,
    String,
    TypeDef,
)
from ._tables import ObjectTable, TypeTable

logger = logging.getLogger(__name__)


def _text(raw: bytes) -> str:
    # Source text is expected to be valid already; never fail on it.
    return raw.decode("utf-8", errors="replace")


# ── Header ────────────────────────────────────────────────────

def _system_version(raw: bytes) -> Optional[int]:
    """Best-effort integer reading of the system-version field."""
    try:
        return Cursor(raw).read_dynamic_int(signed=True)
    except TypedStreamError:
        return None


def read_header(cur: Cursor) -> Header:
    """Consume and validate the preamble.  Nothing else is read on failure."""
    version = cur.read_byte()
    if version != STREAMER_VERSION:
        raise HeaderError(
            "unsupported streamer version {} (expected {})".format(
                version, STREAMER_VERSION),
            0,
        )

    sig_len = cur.read_byte()
    if sig_len != len(SIGNATURE):
        raise HeaderError(
            "signature length {} (expected {})".format(sig_len, len(SIGNATURE)), 1
        )
    signature = _text(cur.read_bytes(sig_len))
    if signature != SIGNATURE.decode("ascii"):
        raise HeaderError("bad signature {!r}".format(signature), 2)

    system_version = cur.read_bytes(SYSTEM_VERSION_LENGTH)
    sysver = _system_version(system_version)
    if sysver != SYSTEM_VERSION_MAC_OS_X:
        logger.debug("unexpected system version field %s", system_version.hex())
    logger.debug("header ok: version=%d signature=%s system_version=%s",
                 version, signature, system_version.hex())
    return Header(version, signature, system_version)


# ── Decoder ───────────────────────────────────────────────────

class TypedStreamDecoder:
    """Decodes one archive buffer.

    Not thread-safe; use one instance per concurrent decode.  Calling
    decode() again starts over with empty tables and yields an equal
    Archive.
    """

    def __init__(self, buf: bytes) -> None:
        self._buf = bytes(buf)
        self._cur = Cursor(self._buf)
        self.types = TypeTable()
        self.objects = ObjectTable()
        self._depth = 0

    def decode(self) -> Archive:
        self._cur = Cursor(self._buf)
        self.types = TypeTable()
        self.objects = ObjectTable()
        self._depth = 0

        header = read_header(self._cur)

        components: List[Component] = []
        while not self._cur.at_end:
            if self._cur.peek() in (TAG_END, TAG_EMPTY):
                break
            components.append(self._read_component())

        logger.debug(
            "decoded %d components (%d types, %d objects, %d/%d bytes)",
            len(components), len(self.types), len(self.objects),
            self._cur.position, len(self._cur),
        )
        return Archive(
            header=header,
            components=tuple(components),
            types=self.types.snapshot(),
            objects=self.objects.snapshot(),
        )

    # ── Nesting guard ─────────────────────────────────────────

    def _enter(self, offset: int) -> None:
        self._depth += 1
        if self._depth > MAX_DEPTH:
            raise MalformedStream(
                "nesting exceeds MAX_DEPTH ({})".format(MAX_DEPTH), offset)

    # ── Components ────────────────────────────────────────────

    def _read_component(self) -> Component:
        typedef = self._read_typedef()
        values = self._read_values(typedef)
        if len(values) == 1:
            return values[0]
        return tuple(values)

    def _read_typedef(self) -> TypeDef:
        """Read a fresh type definition, or resolve a type back-reference."""
        cur = self._cur
        start = cur.position
        head = cur.peek()
        if head >= REFERENCE_BASE:
            cur.read_byte()
            return self.types.get(head - REFERENCE_BASE, start)

        length = cur.read_count()
        typedef = TypeDef.from_encoding(cur.read_bytes(length))
        index = self.types.add(typedef)
        logger.debug("type %d: encoding %r", index, typedef.encoding)
        if T_UNKNOWN in typedef.tags:
            logger.debug(
                "type %d: unknown encoding in %r, carried as opaque",
                index, typedef.encoding)
        return typedef

    # ── Values ────────────────────────────────────────────────

    def _read_values(self, typedef: TypeDef) -> List[Any]:
        return [
            self._read_value(tag, enc)
            for enc, tag in zip(typedef.encoding, typedef.tags)
        ]

    def _read_value(self, tag: str, enc: int) -> Any:
        cur = self._cur

        if tag in INTEGER_TAGS:
            width, signed = INTEGER_TAGS[tag]
            return Integer(cur.read_int(width, signed), width * 8, signed)

        if tag == T_FLOAT32:
            return Float(cur.read_float32(), 32)

        if tag == T_FLOAT64:
            return Float(cur.read_float64(), 64)

        if tag == T_UTF8:
            n = cur.read_count()
            return String(_text(cur.read_bytes(n)))

        if tag == T_OBJECT:
            return self._read_object_or_reference()

        if tag == T_EMBEDDED:
            return self._read_embedded()

        # Zero-width: an unknown encoding says nothing about its payload size.
        return Opaque(enc)

    def _read_embedded(self) -> Component:
        cur = self._cur
        start = cur.position
        head = cur.peek()
        if head != TAG_START:
            raise MalformedStream(
                "embedded stream must begin with START, got 0x{:02x}".format(head),
                start)
        cur.read_byte()
        # Nothing inside: the END/EMPTY belongs to the enclosing field list
        # or top-level loop, so it is left unconsumed.
        if cur.peek() in (TAG_END, TAG_EMPTY):
            return EmptyMarker()

        self._enter(start)
        try:
            return self._read_component()
        finally:
            self._depth -= 1

    # ── Objects ───────────────────────────────────────────────

    def _read_object_or_reference(self) -> Any:
        cur = self._cur
        start = cur.position
        head = cur.peek()
        if head == TAG_START:
            return self._read_object()
        if head >= REFERENCE_BASE:
            cur.read_byte()
            index = head - REFERENCE_BASE
            self.objects.check(index, start)
            return ObjectReference(index)
        raise MalformedStream(
            "expected START or object reference, got 0x{:02x}".format(head), start)

    def _read_object(self) -> Object:
        cur = self._cur
        start = cur.position
        cur.read_byte()  # START

        self._enter(start)
        try:
            index = self.objects.reserve()
            cls = self._read_class()
            fields = self._read_fields(cls, start)
        finally:
            self._depth -= 1

        obj = Object(cls, tuple(fields))
        self.objects.resolve(index, obj)
        return obj

    def _read_class(self) -> ClassInfo:
        cur = self._cur
        start = cur.position
        head = cur.peek()

        if head == TAG_START:
            return self._read_object().cls

        if head >= REFERENCE_BASE:
            cur.read_byte()
            index = head - REFERENCE_BASE
            obj = self.objects.get(index, start)
            if obj is None:
                raise MalformedStream(
                    "class reference to unfinished object {}".format(index), start)
            return obj.cls

        n = cur.read_count()
        name = _text(cur.read_bytes(n))
        version = cur.read_byte()
        return ClassInfo(name, version)

    def _read_fields(self, cls: ClassInfo, start: int) -> List[Any]:
        cur = self._cur
        fields: List[Any] = []
        while True:
            if cur.at_end:
                raise MalformedStream(
                    "unterminated field list for {}".format(cls.name), start)
            head = cur.peek()
            if head == TAG_END:
                break
            if head == TAG_EMPTY and cur.peek_at(1) == TAG_END:
                cur.read_byte()
                fields.append(EmptyMarker())
                break
            typedef = self._read_typedef()
            fields.extend(self._read_values(typedef))
        cur.read_byte()  # END
        return fields


# ── Public helpers ────────────────────────────────────────────

def decode_archive(buffer: bytes) -> Archive:
    """Decode a typedstream buffer into an Archive (components + tables)."""
    return TypedStreamDecoder(buffer).decode()


def decode(buffer: bytes) -> List[Component]:
    """Decode a typedstream buffer and return its top-level components."""
    return list(decode_archive(buffer).components)
