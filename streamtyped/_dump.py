"""JSON-ready rendering of decoded archives, for diagnostics.

Type mapping:
    Integer         → {"type": "int", "value", "bits", "signed"}
    Float           → {"type": "float", "value", "bits"}
    String          → {"type": "string", "value"}
    Object          → {"type": "object", "class": {"name", "version"}, "fields"}
    ObjectReference → {"type": "ref", "index"}
    EmptyMarker     → {"type": "empty"}
    Opaque          → {"type": "opaque", "encoding": "0x5b"}
    tuple           → list (multi-value component)

References are rendered by index and never followed, so a cyclic object
graph still dumps finitely.  NaN and infinite floats are rendered as
strings because JSON has no spelling for them.
"""

from __future__ import annotations

import math
from typing import Any

from ._model import (
    Archive,
    EmptyMarker,
    Float,
    Integer,
    Object,
    ObjectReference,
    Opaque,
    String,
    TypeDef,
)


def _float(x: float) -> Any:
    if math.isnan(x) or math.isinf(x):
        return repr(x)
    return x


def to_jsonable(x: Any) -> Any:
    """Convert an Archive, component or value into plain JSON types."""
    if isinstance(x, Archive):
        return {
            "header": {
                "version": x.header.version,
                "signature": x.header.signature,
                "system_version": x.header.system_version.hex(),
            },
            "components": [to_jsonable(c) for c in x.components],
            "types": [to_jsonable(t) for t in x.types],
            "objects": [to_jsonable(o) for o in x.objects],
        }

    if isinstance(x, tuple):
        return [to_jsonable(v) for v in x]

    if isinstance(x, Integer):
        return {"type": "int", "value": x.value, "bits": x.bits, "signed": x.signed}

    if isinstance(x, Float):
        return {"type": "float", "value": _float(x.value), "bits": x.bits}

    if isinstance(x, String):
        return {"type": "string", "value": x.value}

    if isinstance(x, Object):
        return {
            "type": "object",
            "class": {"name": x.cls.name, "version": x.cls.version},
            "fields": [to_jsonable(f) for f in x.fields],
        }

    if isinstance(x, ObjectReference):
        return {"type": "ref", "index": x.index}

    if isinstance(x, EmptyMarker):
        return {"type": "empty"}

    if isinstance(x, Opaque):
        return {"type": "opaque", "encoding": "0x{:02x}".format(x.encoding)}

    if isinstance(x, TypeDef):
        return {"encoding": x.encoding.hex(), "tags": list(x.tags)}

    raise TypeError("cannot render {}".format(type(x).__name__))
