"""Decoded data model — type tags, values, objects and the archive result.

Type tags form a closed set of strings.  Each decoded value is one of a
handful of frozen dataclasses, so two decodes of the same buffer compare
equal field by field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union

from ._constants import (
    ENC_CHAR,
    ENC_DOUBLE,
    ENC_EMBEDDED,
    ENC_FLOAT,
    ENC_INT,
    ENC_LONG,
    ENC_LONGLONG,
    ENC_OBJECT,
    ENC_SHORT,
    ENC_UCHAR,
    ENC_UINT,
    ENC_ULONG,
    ENC_ULONGLONG,
    ENC_USHORT,
    ENC_UTF8,
)

# ── Type tags ─────────────────────────────────────────────────

T_SINT8: str = "sint8"
T_SINT16: str = "sint16"
T_SINT32: str = "sint32"
T_SINT64: str = "sint64"
T_UINT8: str = "uint8"
T_UINT16: str = "uint16"
T_UINT32: str = "uint32"
T_UINT64: str = "uint64"
T_FLOAT32: str = "float32"
T_FLOAT64: str = "float64"
T_UTF8: str = "utf8"
T_OBJECT: str = "object"
T_EMBEDDED: str = "embedded"
T_UNKNOWN: str = "unknown"

ENCODING_TO_TAG: Dict[int, str] = {
    ENC_OBJECT: T_OBJECT,
    ENC_UTF8: T_UTF8,
    ENC_EMBEDDED: T_EMBEDDED,
    ENC_FLOAT: T_FLOAT32,
    ENC_DOUBLE: T_FLOAT64,
    ENC_CHAR: T_SINT8,
    ENC_SHORT: T_SINT16,
    ENC_INT: T_SINT32,
    ENC_LONG: T_SINT64,
    ENC_LONGLONG: T_SINT64,
    ENC_UCHAR: T_UINT8,
    ENC_USHORT: T_UINT16,
    ENC_UINT: T_UINT32,
    ENC_ULONG: T_UINT64,
    ENC_ULONGLONG: T_UINT64,
}

# tag -> (byte width, signed)
INTEGER_TAGS: Dict[str, Tuple[int, bool]] = {
    T_SINT8: (1, True),
    T_SINT16: (2, True),
    T_SINT32: (4, True),
    T_SINT64: (8, True),
    T_UINT8: (1, False),
    T_UINT16: (2, False),
    T_UINT32: (4, False),
    T_UINT64: (8, False),
}


@dataclass(frozen=True)
class TypeDef:
    """One type-encoding run: the raw bytes and the tag each one maps to."""

    encoding: bytes
    tags: Tuple[str, ...]

    @classmethod
    def from_encoding(cls, encoding: bytes) -> "TypeDef":
        tags = tuple(ENCODING_TO_TAG.get(b, T_UNKNOWN) for b in encoding)
        return cls(bytes(encoding), tags)


# ── Values ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Integer:
    value: int
    bits: int
    signed: bool


@dataclass(frozen=True)
class Float:
    value: float
    bits: int


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class ClassInfo:
    name: str
    version: int


@dataclass(frozen=True)
class Object:
    cls: ClassInfo
    fields: Tuple[Any, ...]


@dataclass(frozen=True)
class ObjectReference:
    """Back-reference to Object Table slot `index`.  Never expanded inline."""

    index: int


@dataclass(frozen=True)
class EmptyMarker:
    """EMPTY tag ending a field list ("no further superclass/fields")."""


@dataclass(frozen=True)
class Opaque:
    """Value of a type encoding byte the decoder does not model.

    Carries no payload: unknown encodings are zero-width.
    """

    encoding: int


Value = Union[Integer, Float, String, Object, ObjectReference, EmptyMarker, Opaque]
# A component is a lone value, or the tuple of values when its type
# definition has more than one tag.
Component = Union[Value, Tuple[Value, ...]]


# ── Archive result ────────────────────────────────────────────

@dataclass(frozen=True)
class Header:
    version: int
    signature: str
    system_version: bytes


@dataclass(frozen=True)
class Archive:
    """Everything one decode call produced.

    `objects` is the final Object Table, indexed exactly as the stream's
    object references are.
    """

    header: Header
    components: Tuple[Component, ...]
    types: Tuple[TypeDef, ...]
    objects: Tuple[Object, ...]

    def resolve(self, value: Any) -> Any:
        """Follow an ObjectReference to its object; pass anything else through."""
        if isinstance(value, ObjectReference):
            return self.objects[value.index]
        return value


def iter_values(components: Any) -> List[Any]:
    """Flatten components (lone values and value tuples) to a value list."""
    out: List[Any] = []
    for comp in components:
        if isinstance(comp, tuple):
            out.extend(comp)
        else:
            out.append(comp)
    return out
