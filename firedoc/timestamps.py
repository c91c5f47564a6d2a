"""Timestamp and explicit-null markers, and conversion of times into Firestore values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from firedoc.errors import (
    FirestoreDeserializeError,
    FirestoreSerializeError,
    error_from_parse_error,
)
from firedoc.value import FirestoreValue, Timestamp, Value

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NANOS_PER_SECOND = 1_000_000_000
_UNSUPPORTED = "Timestamp serializer doesn't support this type"

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?"
    r"([Zz]|[+-]\d{2}:?\d{2})$"
)


@dataclass(frozen=True, order=True)
class FirestoreTimestamp:
    """A point in time stored as a native Firestore timestamp."""

    value: datetime = field(default_factory=lambda: _EPOCH)


@dataclass(frozen=True)
class NullableTimestamp:
    """An optional point in time; a missing time is stored as an explicit null."""

    value: datetime | None = None


@dataclass(frozen=True)
class FirestoreNull:
    """An optional value whose absence is stored as an explicit null."""

    value: Any = None


def to_timestamp(dt: datetime) -> Timestamp:
    """Convert a datetime to seconds and nanoseconds since the epoch; naive means UTC."""
    if not isinstance(dt, datetime):
        raise TypeError(f"expected datetime, got {type(dt).__name__}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    seconds = delta.days * 86_400 + delta.seconds
    return Timestamp(seconds, delta.microseconds * 1_000)


def from_timestamp(ts: Timestamp) -> datetime:
    """Convert a timestamp to an aware UTC datetime, dropping sub-microsecond digits."""
    if not 0 <= ts.nanos < _NANOS_PER_SECOND:
        raise FirestoreDeserializeError(f"Invalid or out-of-range datetime: {ts}")
    try:
        return _EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1_000)
    except OverflowError as exc:
        raise FirestoreDeserializeError(
            f"Invalid or out-of-range datetime: {ts}"
        ) from exc


def _parse_rfc3339(text: str) -> Timestamp:
    match = _RFC3339.match(text.strip())
    if match is None:
        raise error_from_parse_error(f"input is not a valid RFC 3339 date-time: {text!r}")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    try:
        naive = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second),
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise error_from_parse_error(f"input is out of range: {text!r}") from exc

    if offset in ("Z", "z"):
        offset_seconds = 0
    else:
        sign = -1 if offset[0] == "-" else 1
        digits = offset[1:].replace(":", "")
        hours, minutes = int(digits[:2]), int(digits[2:])
        if hours > 23 or minutes > 59:
            raise error_from_parse_error(f"input is out of range: {text!r}")
        offset_seconds = sign * (hours * 3600 + minutes * 60)

    nanos = int((fraction or "")[:9].ljust(9, "0"))
    seconds = to_timestamp(naive).seconds - offset_seconds
    return Timestamp(seconds, nanos)


def serialize_timestamp_for_firestore(value: Any, none_as_null: bool) -> FirestoreValue:
    """Convert a datetime, an RFC 3339 string or a marker into a timestamp value."""
    if value is None:
        return FirestoreValue(Value.null() if none_as_null else Value())
    if isinstance(value, (FirestoreTimestamp, NullableTimestamp, FirestoreNull)):
        return serialize_timestamp_for_firestore(value.value, none_as_null)
    if isinstance(value, datetime):
        return FirestoreValue(Value.timestamp(to_timestamp(value)))
    if isinstance(value, str):
        return FirestoreValue(Value.timestamp(_parse_rfc3339(value)))
    raise FirestoreSerializeError(_UNSUPPORTED)