"""streamtyped — decoder for legacy typedstream archives.

Recovers message text from the binary `attributedBody` blobs found in a
message store, without any platform unarchiving API.

Quick start:
    >>> from streamtyped import text_from_bytes
    >>> text_from_bytes(blob)
    'hello'

For everything the stream contains:
    >>> from streamtyped import decode_archive, to_jsonable
    >>> archive = decode_archive(blob)
    >>> archive.components[0].cls.name
    'NSString'
"""

from __future__ import annotations

from ._constants import STRING_CLASSES
from ._core import TypedStreamDecoder, decode, decode_archive
from ._dump import to_jsonable
from ._errors import (
    ERR_HEADER,
    ERR_INVALID_REFERENCE,
    ERR_MALFORMED,
    ERR_OUT_OF_DATA,
    HeaderError,
    InvalidReference,
    MalformedStream,
    OutOfData,
    TypedStreamError,
)
from ._model import (
    Archive,
    ClassInfo,
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
from ._text import extract_text, text_from_bytes

__version__ = "0.1.0"

__all__ = [
    # Public API functions
    "decode",
    "decode_archive",
    "extract_text",
    "text_from_bytes",
    "to_jsonable",
    "TypedStreamDecoder",
    "STRING_CLASSES",
    # Result model
    "Archive",
    "Header",
    "TypeDef",
    "ClassInfo",
    "Object",
    "ObjectReference",
    "Integer",
    "Float",
    "String",
    "EmptyMarker",
    "Opaque",
    # Exceptions
    "TypedStreamError",
    "OutOfData",
    "HeaderError",
    "InvalidReference",
    "MalformedStream",
    # Error codes
    "ERR_OUT_OF_DATA",
    "ERR_HEADER",
    "ERR_INVALID_REFERENCE",
    "ERR_MALFORMED",
]
