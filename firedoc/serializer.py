"""Conversion of Python objects into Firestore values and documents."""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from firedoc.errors import (
    ErrorPublicGenericDetails,
    FirestoreSerializeError,
    FirestoreSystemError,
)
from firedoc.geo import FirestoreLatLng, serialize_latlng_for_firestore
from firedoc.references import FirestoreReference, serialize_reference_for_firestore
from firedoc.timestamps import (
    FirestoreNull,
    FirestoreTimestamp,
    NullableTimestamp,
    serialize_timestamp_for_firestore,
)
from firedoc.value import Document, FirestoreValue, Value, ValueKind

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1


def _format_datetime(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    micros = dt.microsecond
    if micros:
        if micros % 1000 == 0:
            text += f".{micros // 1000:03d}"
        else:
            text += f".{micros:06d}"
    return text + "Z"


def _integer(number: int) -> Value:
    if _I64_MIN <= number <= _I64_MAX:
        return Value.integer(number)
    if _I64_MAX < number <= _U64_MAX:
        # Unsigned 64-bit values are stored with their bits reinterpreted as signed.
        return Value.integer(number - 2**64)
    raise FirestoreSerializeError(f"Integer {number} does not fit in 64 bits")


@dataclass(frozen=True)
class FirestoreValueSerializer:
    """Turns Python data into Firestore values.

    Unset values (``None`` unless ``none_as_null`` is set) are left out of
    arrays and maps.
    """

    none_as_null: bool = False

    def serialize(self, obj: Any) -> FirestoreValue:
        """Convert ``obj`` into a Firestore value."""
        return FirestoreValue(self._to_value(obj))

    def _to_value(self, obj: Any) -> Value:
        if obj is None:
            return Value.null() if self.none_as_null else Value()
        if isinstance(obj, FirestoreValue):
            return obj.value
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, FirestoreTimestamp):
            return serialize_timestamp_for_firestore(obj.value, False).value
        if isinstance(obj, NullableTimestamp):
            return serialize_timestamp_for_firestore(obj.value, True).value
        if isinstance(obj, FirestoreNull):
            return FirestoreValueSerializer(none_as_null=True)._to_value(obj.value)
        if isinstance(obj, FirestoreLatLng):
            return serialize_latlng_for_firestore(obj).value
        if isinstance(obj, FirestoreReference):
            return serialize_reference_for_firestore(obj.path, False).value
        if isinstance(obj, bool):
            return Value.boolean(obj)
        if isinstance(obj, enum.Enum):
            return Value.string(obj.name)
        if isinstance(obj, int):
            return _integer(obj)
        if isinstance(obj, float):
            return Value.double(obj)
        if isinstance(obj, str):
            return Value.string(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return Value.bytes_(obj)
        if isinstance(obj, datetime):
            return Value.string(_format_datetime(obj))
        if isinstance(obj, date):
            return Value.string(obj.isoformat())
        if isinstance(obj, Mapping):
            return self._map(obj.items())
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return self._map(
                (f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)
            )
        if isinstance(obj, (list, tuple, set, frozenset)):
            return Value.array(
                item for item in map(self._to_value, obj) if item.is_set()
            )
        raise FirestoreSerializeError(
            f"Unsupported type for serialization: {type(obj).__name__}"
        )

    def _key(self, key: Any) -> str:
        converted = self._to_value(key)
        if converted.kind is ValueKind.STRING:
            return converted.data
        if converted.kind is ValueKind.INTEGER:
            return str(converted.data)
        raise FirestoreSerializeError("Map key should be a string format")

    def _map(self, items: Any) -> Value:
        fields: dict[str, Value] = {}
        for key, item in items:
            name = self._key(key)
            converted = self._to_value(item)
            if converted.is_set():
                fields[name] = converted
        return Value.map(fields)


def to_firestore_value(obj: Any) -> FirestoreValue:
    """Convert ``obj`` into a Firestore value; anything unsupported gives an unset value."""
    try:
        return FirestoreValueSerializer().serialize(obj)
    except FirestoreSerializeError:
        return FirestoreValue(Value())


def firestore_document_from_serializable(document_path: str, obj: Any) -> Document:
    """Build a document at ``document_path`` from an object that serializes to a map."""
    value = FirestoreValueSerializer(none_as_null=False).serialize(obj).value
    if value.kind is not ValueKind.MAP:
        raise FirestoreSystemError(
            ErrorPublicGenericDetails("SystemError"),
            "Unable to create document from value. No object found",
        )
    return Document(name=document_path, fields=value.data)