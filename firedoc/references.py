"""Document reference markers and their conversion into Firestore reference values."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from firedoc.errors import FirestoreSerializeError
from firedoc.value import FirestoreValue, Value

_UNSUPPORTED = "Reference serializer doesn't support this type"


@dataclass(frozen=True)
class FirestoreReference:
    """A path to another document, stored as a native Firestore reference."""

    path: str = ""


def serialize_reference_for_firestore(value: Any, none_as_null: bool) -> FirestoreValue:
    """Convert a document path into a reference value.

    ``None`` gives an explicit null when ``none_as_null`` is set and an unset
    value otherwise. An enum member gives a reference to its name.
    """
    if value is None:
        return FirestoreValue(Value.null() if none_as_null else Value())
    if isinstance(value, FirestoreReference):
        return serialize_reference_for_firestore(value.path, none_as_null)
    if isinstance(value, enum.Enum):
        return FirestoreValue(Value.reference(value.name))
    if isinstance(value, str):
        return FirestoreValue(Value.reference(str(value)))
    raise FirestoreSerializeError(_UNSUPPORTED)