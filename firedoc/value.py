"""Typed model of Firestore values and documents."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class ValueKind(enum.Enum):
    """Which kind of data a value holds."""

    NULL = "null_value"
    BOOLEAN = "boolean_value"
    INTEGER = "integer_value"
    DOUBLE = "double_value"
    TIMESTAMP = "timestamp_value"
    STRING = "string_value"
    BYTES = "bytes_value"
    REFERENCE = "reference_value"
    GEO_POINT = "geo_point_value"
    ARRAY = "array_value"
    MAP = "map_value"


@dataclass(frozen=True)
class LatLng:
    """A geographic point in degrees."""

    latitude: float = 0.0
    longitude: float = 0.0


@dataclass(frozen=True, order=True)
class Timestamp:
    """A point in time as seconds and nanoseconds since the Unix epoch."""

    seconds: int = 0
    nanos: int = 0


@dataclass
class Value:
    """A single Firestore value; a value with no kind is unset."""

    kind: ValueKind | None = None
    data: Any = None

    def is_set(self) -> bool:
        return self.kind is not None

    @staticmethod
    def null() -> Value:
        return Value(ValueKind.NULL, None)

    @staticmethod
    def boolean(data: bool) -> Value:
        if not isinstance(data, bool):
            raise TypeError(f"expected bool, got {type(data).__name__}")
        return Value(ValueKind.BOOLEAN, data)

    @staticmethod
    def integer(data: int) -> Value:
        if isinstance(data, bool) or not isinstance(data, int):
            raise TypeError(f"expected int, got {type(data).__name__}")
        if not _I64_MIN <= data <= _I64_MAX:
            raise ValueError(f"integer {data} does not fit in 64 bits")
        return Value(ValueKind.INTEGER, data)

    @staticmethod
    def double(data: float) -> Value:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise TypeError(f"expected float, got {type(data).__name__}")
        return Value(ValueKind.DOUBLE, float(data))

    @staticmethod
    def string(data: str) -> Value:
        if not isinstance(data, str):
            raise TypeError(f"expected str, got {type(data).__name__}")
        return Value(ValueKind.STRING, data)

    @staticmethod
    def bytes_(data: bytes | bytearray | memoryview) -> Value:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"expected bytes, got {type(data).__name__}")
        return Value(ValueKind.BYTES, bytes(data))

    @staticmethod
    def reference(data: str) -> Value:
        if not isinstance(data, str):
            raise TypeError(f"expected str, got {type(data).__name__}")
        return Value(ValueKind.REFERENCE, data)

    @staticmethod
    def timestamp(data: Timestamp) -> Value:
        if not isinstance(data, Timestamp):
            raise TypeError(f"expected Timestamp, got {type(data).__name__}")
        return Value(ValueKind.TIMESTAMP, data)

    @staticmethod
    def geo_point(data: LatLng) -> Value:
        if not isinstance(data, LatLng):
            raise TypeError(f"expected LatLng, got {type(data).__name__}")
        return Value(ValueKind.GEO_POINT, data)

    @staticmethod
    def array(values: Iterable[Value]) -> Value:
        items = list(values)
        for item in items:
            if not isinstance(item, Value):
                raise TypeError(f"array element must be a Value, got {type(item).__name__}")
        return Value(ValueKind.ARRAY, items)

    @staticmethod
    def map(fields: Mapping[str, Value]) -> Value:
        entries = dict(fields)
        for key, item in entries.items():
            if not isinstance(key, str):
                raise TypeError(f"map key must be str, got {type(key).__name__}")
            if not isinstance(item, Value):
                raise TypeError(f"map value must be a Value, got {type(item).__name__}")
        return Value(ValueKind.MAP, entries)


@dataclass
class Document:
    """A stored document: its full path, fields and server times."""

    name: str = ""
    fields: dict[str, Value] = field(default_factory=dict)
    create_time: Timestamp | None = None
    update_time: Timestamp | None = None


@dataclass
class FirestoreValue:
    """A value as used in queries, cursors and transforms."""

    value: Value = field(default_factory=Value)