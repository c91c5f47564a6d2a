from dataclasses import dataclass
from typing import Optional

import pytest

from firedoc.errors import FirestoreSerializeError
from firedoc.geo import (
    FirestoreGeoPoint,
    FirestoreLatLng,
    serialize_latlng_for_firestore,
)
from firedoc.value import FirestoreValue, LatLng, Value, ValueKind

UNSUPPORTED = "LatLng serializer doesn't support this type"
UNRECOGNIZED = "LatLng serializer doesn't recognize the structure of the object"


@dataclass
class Place:
    name: str
    latitude: float
    longitude: float


@dataclass
class PartialPoint:
    latitude: float
    longitude: Optional[float] = None


@dataclass
class IntPoint:
    latitude: int
    longitude: int


def test_geo_point_serializes_to_geo_value():
    result = serialize_latlng_for_firestore(FirestoreGeoPoint(1.5, -2.25))
    assert result == FirestoreValue(Value.geo_point(LatLng(1.5, -2.25)))
    assert result.value.kind is ValueKind.GEO_POINT


def test_latlng_wrapper_is_unwrapped():
    wrapped = FirestoreLatLng(FirestoreGeoPoint(10.0, 20.0))
    assert serialize_latlng_for_firestore(wrapped) == serialize_latlng_for_firestore(
        FirestoreGeoPoint(10.0, 20.0)
    )


def test_value_latlng_is_accepted():
    result = serialize_latlng_for_firestore(LatLng(3.0, 4.0))
    assert result.value.data == LatLng(3.0, 4.0)


def test_extra_fields_are_ignored():
    result = serialize_latlng_for_firestore(Place("home", 51.5, -0.125))
    assert result.value.data == LatLng(51.5, -0.125)


def test_none_gives_unset_value():
    result = serialize_latlng_for_firestore(None)
    assert result.value.is_set() is False


def test_integer_fields_are_rejected():
    with pytest.raises(FirestoreSerializeError) as info:
        serialize_latlng_for_firestore(IntPoint(1, 2))
    assert info.value.public.code == UNRECOGNIZED


def test_missing_longitude_is_rejected():
    with pytest.raises(FirestoreSerializeError) as info:
        serialize_latlng_for_firestore(PartialPoint(1.0))
    assert info.value.public.code == UNRECOGNIZED


@pytest.mark.parametrize(
    "value",
    ["text", 5, 1.5, True, [1.0, 2.0], {"latitude": 1.0, "longitude": 2.0}, b"xy"],
)
def test_non_struct_values_are_unsupported(value):
    with pytest.raises(FirestoreSerializeError) as info:
        serialize_latlng_for_firestore(value)
    assert info.value.public.code == UNSUPPORTED


def test_dataclass_type_itself_is_unsupported():
    with pytest.raises(FirestoreSerializeError):
        serialize_latlng_for_firestore(FirestoreGeoPoint)


def test_geo_points_are_ordered():
    points = [FirestoreGeoPoint(1.0, 3.0), FirestoreGeoPoint(0.5, 9.0), FirestoreGeoPoint(1.0, 2.0)]
    assert sorted(points) == [
        FirestoreGeoPoint(0.5, 9.0),
        FirestoreGeoPoint(1.0, 2.0),
        FirestoreGeoPoint(1.0, 3.0),
    ]