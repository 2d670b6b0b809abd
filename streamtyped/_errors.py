"""Error codes and exception classes.

Every failure raised while decoding is a TypedStreamError subclass.  The
`.code` attribute holds one of the ERR_* strings below and is what the
conformance vectors compare against.
"""

from __future__ import annotations

ERR_OUT_OF_DATA: str = "ERR_OUT_OF_DATA"              # read past end of buffer
ERR_HEADER: str = "ERR_HEADER"                        # bad version / signature
ERR_INVALID_REFERENCE: str = "ERR_INVALID_REFERENCE"  # table index not registered
ERR_MALFORMED: str = "ERR_MALFORMED"                  # grammar violation


class TypedStreamError(Exception):
    """Base exception for typedstream decoding errors."""

    code: str = ERR_MALFORMED

    def __init__(self, msg: str = "", offset: int = -1) -> None:
        super().__init__(msg or self.code)
        self.offset = offset

    def __str__(self) -> str:
        msg = super().__str__()
        if self.offset >= 0:
            return "{} (at offset {})".format(msg, self.offset)
        return msg


class OutOfData(TypedStreamError):
    """A read would run past the end of the buffer."""

    code = ERR_OUT_OF_DATA


class HeaderError(TypedStreamError):
    """The preamble does not describe a supported typedstream."""

    code = ERR_HEADER


class InvalidReference(TypedStreamError):
    """A type or object back-reference points outside its table."""

    code = ERR_INVALID_REFERENCE


class MalformedStream(TypedStreamError):
    """The byte sequence violates the typedstream grammar."""

    code = ERR_MALFORMED
