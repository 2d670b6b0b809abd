"""Append-only registries backing type and object back-references.

An index is only valid once its entry has been appended, which is what
makes forward references fail with InvalidReference.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ._errors import InvalidReference
from ._model import Object, TypeDef


class TypeTable:
    def __init__(self) -> None:
        self._entries: List[TypeDef] = []

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, typedef: TypeDef) -> int:
        self._entries.append(typedef)
        return len(self._entries) - 1

    def get(self, index: int, offset: int = -1) -> TypeDef:
        if index < 0 or index >= len(self._entries):
            raise InvalidReference(
                "type reference {} (table has {})".format(index, len(self._entries)),
                offset,
            )
        return self._entries[index]

    def snapshot(self) -> Tuple[TypeDef, ...]:
        return tuple(self._entries)


class ObjectTable:
    """Object slots: reserved (None) while under construction, then resolved.

    Slots are reserved before an object's class and fields are decoded, so
    the slot index is fixed for the object's whole lifetime and a class
    chain that points back at it hits the reservation instead of recursing.
    """

    def __init__(self) -> None:
        self._slots: List[Optional[Object]] = []

    def __len__(self) -> int:
        return len(self._slots)

    def add(self, obj: Object) -> int:
        self._slots.append(obj)
        return len(self._slots) - 1

    def reserve(self) -> int:
        self._slots.append(None)
        return len(self._slots) - 1

    def resolve(self, index: int, obj: Object) -> None:
        if index < 0 or index >= len(self._slots):
            raise RuntimeError("object slot {} was never reserved".format(index))
        if self._slots[index] is not None:
            raise RuntimeError("object slot {} already resolved".format(index))
        self._slots[index] = obj

    def check(self, index: int, offset: int = -1) -> None:
        """Raise InvalidReference unless slot `index` exists (in any state)."""
        if index < 0 or index >= len(self._slots):
            raise InvalidReference(
                "object reference {} (table has {})".format(index, len(self._slots)),
                offset,
            )

    def get(self, index: int, offset: int = -1) -> Optional[Object]:
        """Return the slot's object, or None while it is still reserved."""
        self.check(index, offset)
        return self._slots[index]

    def snapshot(self) -> Tuple[Object, ...]:
        if any(slot is None for slot in self._slots):
            raise RuntimeError("object table has unresolved slots")
        return tuple(self._slots)  # type: ignore[arg-type]
