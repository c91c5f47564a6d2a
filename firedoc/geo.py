"""Geographic point markers and their conversion into Firestore geo point values."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from firedoc.errors import FirestoreSerializeError
from firedoc.value import FirestoreValue, LatLng, Value

_UNSUPPORTED = "LatLng serializer doesn't support this type"
_UNRECOGNIZED = "LatLng serializer doesn't recognize the structure of the object"


@dataclass(frozen=True, order=True)
class FirestoreGeoPoint:
    """A latitude and longitude pair in degrees."""

    latitude: float = 0.0
    longitude: float = 0.0


@dataclass(frozen=True, order=True)
class FirestoreLatLng:
    """A geographic point stored as a native Firestore geo point."""

    point: FirestoreGeoPoint = field(default_factory=FirestoreGeoPoint)


def _is_double(item: Any) -> bool:
    return isinstance(item, float) and not isinstance(item, bool)


def _struct_to_geo_point(obj: Any) -> FirestoreValue:
    # Fields that are unset (None) are dropped, exactly like any other struct field.
    fields = {
        f.name: getattr(obj, f.name)
        for f in dataclasses.fields(obj)
        if getattr(obj, f.name) is not None
    }
    latitude = fields.get("latitude")
    longitude = fields.get("longitude")
    if not (_is_double(latitude) and _is_double(longitude)):
        raise FirestoreSerializeError(_UNRECOGNIZED)
    return FirestoreValue(Value.geo_point(LatLng(float(latitude), float(longitude))))


def serialize_latlng_for_firestore(value: Any) -> FirestoreValue:
    """Convert a point-like structure with float latitude and longitude into a geo point.

    ``None`` gives an unset value. Anything that is not a structure raises
    :class:`FirestoreSerializeError`.
    """
    if value is None:
        return FirestoreValue(Value())
    if isinstance(value, FirestoreLatLng):
        return serialize_latlng_for_firestore(value.point)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _struct_to_geo_point(value)
    raise FirestoreSerializeError(_UNSUPPORTED)