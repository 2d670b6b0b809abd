"""Text extraction — find the message body in a decoded archive.

A message body is archived as a string-bearing object (NSString and
friends) whose first field is the UTF-8 text.  It is often buried inside
an attributed-string object rather than sitting at the top level, so the
whole Object Table is scanned after the top-level components.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from ._constants import STRING_CLASSES
from ._core import decode_archive
from ._model import Archive, Object, ObjectReference, String, iter_values


def _string_of(value: Any, classes: Sequence[str]) -> Optional[str]:
    if not isinstance(value, Object) or value.cls.name not in classes:
        return None
    if value.fields and isinstance(value.fields[0], String):
        return value.fields[0].value
    return None


def extract_text(decoded: Any,
                 classes: Sequence[str] = STRING_CLASSES) -> Optional[str]:
    """Return the text of the first string-bearing object, or None.

    `decoded` is an Archive (from decode_archive) or a plain component
    list (from decode).  A plain list has no Object Table, so only its
    top-level objects are searched and references are skipped.

    None means the archive is well formed but carries no recognized
    string object; decode failures raise before this is ever called.
    """
    if isinstance(decoded, Archive):
        components: Iterable[Any] = decoded.components
        objects: Sequence[Object] = decoded.objects
    else:
        components = decoded
        objects = ()

    for value in iter_values(components):
        if isinstance(value, ObjectReference):
            if value.index >= len(objects):
                continue
            value = objects[value.index]
        text = _string_of(value, classes)
        if text is not None:
            return text

    for obj in objects:
        text = _string_of(obj, classes)
        if text is not None:
            return text

    return None


def text_from_bytes(blob: Optional[bytes],
                    classes: Sequence[str] = STRING_CLASSES) -> Optional[str]:
    """Decode `blob` and extract its text.  Empty input yields None."""
    if not blob:
        return None
    return extract_text(decode_archive(blob), classes)
