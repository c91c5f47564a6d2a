"""Conversion of Firestore values and documents into Python objects."""

from __future__ import annotations

import dataclasses
import enum
import types
import typing
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Union

from firedoc.errors import FirestoreDeserializeError
from firedoc.geo import FirestoreGeoPoint, FirestoreLatLng
from firedoc.references import FirestoreReference
from firedoc.timestamps import (
    FirestoreNull,
    FirestoreTimestamp,
    NullableTimestamp,
    from_timestamp,
    serialize_timestamp_for_firestore,
)
from firedoc.value import Document, FirestoreValue, Value, ValueKind

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1

_SCALAR_KINDS = frozenset(
    {
        ValueKind.BOOLEAN,
        ValueKind.INTEGER,
        ValueKind.DOUBLE,
        ValueKind.STRING,
        ValueKind.REFERENCE,
    }
)
_STRING_KINDS = frozenset({ValueKind.STRING, ValueKind.REFERENCE, ValueKind.TIMESTAMP})
_SEQUENCE_TYPES = (list, tuple, set, frozenset)

# Annotation names understood when a dataclass stores its field types as text.
_NAMED_TYPES: dict[str, Any] = {
    "None": type(None),
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "bytes": bytes,
    "bytearray": bytearray,
    "list": list,
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "dict": dict,
    "Any": Any,
    "object": object,
    "datetime": datetime,
    "FirestoreValue": FirestoreValue,
    "FirestoreTimestamp": FirestoreTimestamp,
    "NullableTimestamp": NullableTimestamp,
    "FirestoreNull": FirestoreNull,
    "FirestoreLatLng": FirestoreLatLng,
    "FirestoreGeoPoint": FirestoreGeoPoint,
    "FirestoreReference": FirestoreReference,
}


def _format_rfc3339(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    text = (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )
    micros = dt.microsecond
    if micros:
        if micros % 1000 == 0:
            text += f".{micros // 1000:03d}"
        else:
            text += f".{micros:06d}"
    return text + "+00:00"


def _unwrap(value: Value | FirestoreValue) -> Value:
    if isinstance(value, FirestoreValue):
        return value.value
    if isinstance(value, Value):
        return value
    raise TypeError(f"expected a Value, got {type(value).__name__}")


def _is_empty(value: Value) -> bool:
    return value.kind is None or value.kind is ValueKind.NULL


def _describe(value: Value) -> str:
    if _is_empty(value):
        return "unit value"
    return value.kind.name.lower().replace("_", " ")


def _invalid(value: Value, expected: str) -> FirestoreDeserializeError:
    return FirestoreDeserializeError(
        f"invalid type: {_describe(value)}, expected {expected}"
    )


def value_to_python(value: Value | FirestoreValue) -> Any:
    """Convert a value into plain Python data.

    References become their path, geo points a dict with ``latitude`` and
    ``longitude`` and timestamps an RFC 3339 string.
    """
    value = _unwrap(value)
    kind = value.kind
    if kind is None or kind is ValueKind.NULL:
        return None
    if kind in _SCALAR_KINDS:
        return value.data
    if kind is ValueKind.BYTES:
        return bytes(value.data)
    if kind is ValueKind.GEO_POINT:
        return {"latitude": value.data.latitude, "longitude": value.data.longitude}
    if kind is ValueKind.TIMESTAMP:
        return _format_rfc3339(from_timestamp(value.data))
    if kind is ValueKind.ARRAY:
        return [value_to_python(item) for item in value.data]
    return {key: value_to_python(item) for key, item in value.data.items()}


def python_to_value(obj: Any) -> Value:
    """Convert plain Python data (None, scalars, lists and dicts) into a value."""
    if obj is None:
        return Value()
    if isinstance(obj, bool):
        return Value.boolean(obj)
    if isinstance(obj, int):
        if _I64_MAX < obj <= _U64_MAX:
            obj -= 2**64
        elif not _I64_MIN <= obj <= _I64_MAX:
            raise FirestoreDeserializeError(f"Integer {obj} does not fit in 64 bits")
        return Value.integer(obj)
    if isinstance(obj, float):
        return Value.double(obj)
    if isinstance(obj, str):
        return Value.string(obj)
    if isinstance(obj, Mapping):
        fields = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise FirestoreDeserializeError(
                    f"invalid type: map key {type(key).__name__}, expected a string"
                )
            fields[key] = python_to_value(item)
        return Value.map(fields)
    if isinstance(obj, (list, tuple)):
        return Value.array(python_to_value(item) for item in obj)
    raise FirestoreDeserializeError(
        f"invalid type: {type(obj).__name__}, expected any valid value"
    )


def _map_entries(value: Value) -> dict[str, Value] | None:
    if value.kind is ValueKind.MAP:
        return value.data
    if value.kind is ValueKind.GEO_POINT:
        return {
            "latitude": Value.double(value.data.latitude),
            "longitude": Value.double(value.data.longitude),
        }
    return None


def _is_union(target: Any) -> bool:
    return typing.get_origin(target) in (Union, types.UnionType)


def _is_optional(target: Any) -> bool:
    return _is_union(target) and type(None) in typing.get_args(target)


def _union(value: Value, target: Any) -> Any:
    args = typing.get_args(target)
    candidates = [arg for arg in args if arg is not type(None)]
    if len(candidates) < len(args) and _is_empty(value):
        return None
    last_error: FirestoreDeserializeError | None = None
    for candidate in candidates:
        try:
            return _deserialize(value, candidate)
        except FirestoreDeserializeError as exc:
            last_error = exc
    if len(candidates) == 1 and last_error is not None:
        raise last_error
    raise FirestoreDeserializeError(
        f"data did not match any variant of {target!r}: {_describe(value)}"
    )


def _enum(value: Value, target: type[enum.Enum]) -> enum.Enum:
    if value.kind is ValueKind.STRING:
        name = value.data
    elif value.kind is ValueKind.MAP:
        if not value.data:
            raise FirestoreDeserializeError(
                f"Unexpected enum empty map type: {_describe(value)}"
            )
        name = next(iter(value.data))
    else:
        raise FirestoreDeserializeError(f"Unexpected enum type: {_describe(value)}")
    try:
        return target[name]
    except KeyError:
        expected = ", ".join(f"`{member.name}`" for member in target)
        raise FirestoreDeserializeError(
            f"unknown variant `{name}`, expected one of {expected}"
        ) from None


def _resolve_annotation_text(text: str) -> Any:
    """Map a textual annotation onto a type; unknown names mean plain data."""
    parts = [part.strip() for part in text.split("|")]
    resolved = [_NAMED_TYPES.get(part, Any) for part in parts]
    if len(resolved) == 1:
        return resolved[0]
    if Any in resolved:
        return Any
    return Union[tuple(resolved)]


def _field_type(field: dataclasses.Field) -> Any:
    if isinstance(field.type, str):
        return _resolve_annotation_text(field.type)
    return field.type


def _dataclass(value: Value, target: type) -> Any:
    fields = [f for f in dataclasses.fields(target) if f.init]
    entries = _map_entries(value)
    if entries is not None:
        kwargs = {}
        for f in fields:
            field_type = _field_type(f)
            if f.name in entries:
                kwargs[f.name] = _deserialize(entries[f.name], field_type)
            elif (
                f.default is not dataclasses.MISSING
                or f.default_factory is not dataclasses.MISSING
            ):
                continue
            elif _is_optional(field_type):
                kwargs[f.name] = None
            else:
                raise FirestoreDeserializeError(f"missing field `{f.name}`")
        return target(**kwargs)
    if value.kind is ValueKind.ARRAY:
        items = value.data
        if len(items) != len(fields):
            raise FirestoreDeserializeError(
                f"invalid length {len(items)}, expected struct "
                f"{target.__name__} with {len(fields)} elements"
            )
        return target(
            **{
                f.name: _deserialize(item, _field_type(f))
                for f, item in zip(fields, items)
            }
        )
    raise _invalid(value, f"struct {target.__name__}")


def _sequence(value: Value, container: type, args: tuple[Any, ...]) -> Any:
    if value.kind is not ValueKind.ARRAY:
        raise _invalid(value, "a sequence")
    items = value.data
    if container is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
        if len(items) != len(args):
            raise FirestoreDeserializeError(
                f"invalid length {len(items)}, expected a tuple of size {len(args)}"
            )
        return tuple(_deserialize(item, arg) for item, arg in zip(items, args))
    element_type = args[0] if args else Any
    return container(_deserialize(item, element_type) for item in items)


def _mapping(value: Value, args: tuple[Any, ...]) -> dict[Any, Any]:
    entries = _map_entries(value)
    if entries is None:
        raise _invalid(value, "a map")
    key_type, item_type = args if len(args) == 2 else (Any, Any)
    return {
        _deserialize(Value.string(key), key_type): _deserialize(item, item_type)
        for key, item in entries.items()
    }


def _datetime(value: Value) -> datetime:
    text = _deserialize(value, str)
    return from_timestamp(serialize_timestamp_for_firestore(text, False).value.data)


def _deserialize(value: Value, target: Any) -> Any:
    if target is None or target is Any or target is object:
        return value_to_python(value)
    if target is type(None):
        if _is_empty(value):
            return None
        raise _invalid(value, "unit")
    if _is_union(target):
        return _union(value, target)

    origin = typing.get_origin(target)
    args = typing.get_args(target)
    if origin is not None:
        if origin in _SEQUENCE_TYPES:
            return _sequence(value, origin, args)
        if origin in (dict, Mapping):
            return _mapping(value, args)
        raise FirestoreDeserializeError(f"Unsupported target type: {target!r}")

    if target is FirestoreValue:
        return FirestoreValue(python_to_value(value_to_python(value)))
    if target is FirestoreTimestamp:
        return FirestoreTimestamp(_datetime(value))
    if target is NullableTimestamp:
        return NullableTimestamp(None if _is_empty(value) else _datetime(value))
    if target is FirestoreNull:
        return FirestoreNull(value_to_python(value))
    if target is FirestoreLatLng:
        return FirestoreLatLng(_deserialize(value, FirestoreGeoPoint))
    if target is FirestoreReference:
        return FirestoreReference(_deserialize(value, str))
    if target is datetime:
        return _datetime(value)
    if isinstance(target, type) and issubclass(target, enum.Enum):
        return _enum(value, target)
    if target is bool:
        if value.kind is ValueKind.BOOLEAN:
            return value.data
        raise _invalid(value, "a boolean")
    if target is int:
        if value.kind is ValueKind.INTEGER:
            return value.data
        raise _invalid(value, "an integer")
    if target is float:
        if value.kind in (ValueKind.INTEGER, ValueKind.DOUBLE):
            return float(value.data)
        raise _invalid(value, "a float")
    if target is str:
        if value.kind in _STRING_KINDS:
            return value_to_python(value)
        raise _invalid(value, "a string")
    if target in (bytes, bytearray):
        if value.kind is ValueKind.BYTES:
            return target(value.data)
        raise _invalid(value, "a byte array")
    if target in _SEQUENCE_TYPES:
        return _sequence(value, target, ())
    if target is dict:
        return _mapping(value, ())
    if dataclasses.is_dataclass(target) and isinstance(target, type):
        return _dataclass(value, target)
    raise FirestoreDeserializeError(f"Unsupported target type: {target!r}")


def deserialize_value(value: Value | FirestoreValue, target: Any = None) -> Any:
    """Convert a value into an instance of ``target``; no target gives plain data."""
    return _deserialize(_unwrap(value), target)


def firestore_document_to_serializable(document: Document, target: Any = None) -> Any:
    """Convert a document into ``target``, adding its id, full path and server times.

    The extra fields are ``_firestore_id``, ``_firestore_full_id`` and, when the
    document carries them, ``_firestore_created`` and ``_firestore_updated``.
    """
    fields = dict(document.fields)
    name = document.name
    fields["_firestore_id"] = Value.string(name.split("/")[-1])
    fields["_firestore_full_id"] = Value.string(name)
    if document.create_time is not None:
        fields["_firestore_created"] = Value.timestamp(document.create_time)
    if document.update_time is not None:
        fields["_firestore_updated"] = Value.timestamp(document.update_time)
    return deserialize_value(Value.map(fields), target)