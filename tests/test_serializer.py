import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import pytest

from firedoc.errors import FirestoreSerializeError, FirestoreSystemError
from firedoc.geo import FirestoreGeoPoint, FirestoreLatLng
from firedoc.references import FirestoreReference
from firedoc.serializer import (
    FirestoreValueSerializer,
    firestore_document_from_serializable,
    to_firestore_value,
)
from firedoc.timestamps import (
    FirestoreNull,
    FirestoreTimestamp,
    NullableTimestamp,
    serialize_timestamp_for_firestore,
    to_timestamp,
)
from firedoc.value import LatLng, Value, ValueKind


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Inner:
    label: str
    count: int


@dataclass
class Outer:
    name: str
    inner: Inner
    note: Optional[str] = None
    tags: list = field(default_factory=list)


def ser(obj, none_as_null=False):
    return FirestoreValueSerializer(none_as_null=none_as_null).serialize(obj).value


@pytest.mark.parametrize(
    "obj, expected",
    [
        (True, Value.boolean(True)),
        (42, Value.integer(42)),
        (2.5, Value.double(2.5)),
        ("abc", Value.string("abc")),
        (b"\x00\x01", Value.bytes_(b"\x00\x01")),
    ],
)
def test_scalars(obj, expected):
    assert ser(obj) == expected


def test_none_unset_or_null():
    assert ser(None) == Value()
    assert ser(None, none_as_null=True) == Value.null()


def test_unsigned_64_bit_wraps():
    assert ser(2**64 - 1) == Value.integer(-1)


def test_integer_too_large_raises():
    with pytest.raises(FirestoreSerializeError):
        ser(2**70)


def test_enum_serializes_to_name():
    assert ser(Color.GREEN) == Value.string("GREEN")


def test_list_drops_unset_elements():
    assert ser([1, None, 2]) == Value.array([Value.integer(1), Value.integer(2)])


def test_list_keeps_nulls_when_requested():
    result = ser([None], none_as_null=True)
    assert result == Value.array([Value.null()])


def test_map_integer_keys_become_strings():
    assert ser({7: "x"}) == Value.map({"7": Value.string("x")})


def test_map_bool_key_rejected():
    with pytest.raises(FirestoreSerializeError) as info:
        ser({True: 1})
    assert info.value.public.code == "Map key should be a string format"


def test_map_drops_unset_values():
    assert ser({"a": None, "b": 1}) == Value.map({"b": Value.integer(1)})


def test_dataclass_to_nested_map():
    result = ser(Outer("n", Inner("l", 3), tags=["t"]))
    assert result.kind is ValueKind.MAP
    assert set(result.data) == {"name", "inner", "tags"}
    assert result.data["inner"] == Value.map(
        {"label": Value.string("l"), "count": Value.integer(3)}
    )
    assert result.data["tags"] == Value.array([Value.string("t")])


def test_firestore_null_marker():
    assert ser({"x": FirestoreNull(None)}) == Value.map({"x": Value.null()})
    assert ser(FirestoreNull(5)) == Value.integer(5)


def test_timestamp_markers():
    dt = datetime(2020, 1, 1, 12, 30, tzinfo=timezone.utc)
    assert ser(FirestoreTimestamp(dt)) == Value.timestamp(to_timestamp(dt))
    assert ser(NullableTimestamp(None)) == Value.null()
    assert ser(NullableTimestamp(dt)) == Value.timestamp(to_timestamp(dt))


def test_plain_datetime_is_rfc3339_string_round_trip():
    dt = datetime(2021, 3, 4, 5, 6, 7, 250000, tzinfo=timezone.utc)
    result = ser(dt)
    assert result.kind is ValueKind.STRING
    assert result.data.endswith("Z")
    parsed = serialize_timestamp_for_firestore(result.data, False).value
    assert parsed == Value.timestamp(to_timestamp(dt))


def test_reference_marker():
    path = "projects/p/databases/d/documents/c/1"
    assert ser(FirestoreReference(path)) == Value.reference(path)


def test_latlng_marker():
    result = ser(FirestoreLatLng(FirestoreGeoPoint(1.5, -2.5)))
    assert result == Value.geo_point(LatLng(1.5, -2.5))


def test_value_passes_through():
    inner = Value.reference("a/b")
    assert ser([inner]) == Value.array([inner])


def test_unsupported_type_raises():
    with pytest.raises(FirestoreSerializeError):
        ser(object())


def test_to_firestore_value_unset_on_error():
    assert to_firestore_value(object()).value == Value()
    assert to_firestore_value("s").value == Value.string("s")


def test_document_from_serializable():
    doc = firestore_document_from_serializable("c/doc1", {"a": 1, "b": None})
    assert doc.name == "c/doc1"
    assert doc.fields == {"a": Value.integer(1)}
    assert doc.create_time is None
    assert doc.update_time is None


def test_document_from_non_object_raises():
    with pytest.raises(FirestoreSystemError) as info:
        firestore_document_from_serializable("c/doc1", [1, 2])
    assert info.value.public.code == "SystemError"
    assert info.value.message == "Unable to create document from value. No object found"