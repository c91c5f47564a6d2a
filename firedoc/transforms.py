"""Server-side field transforms and the results of writes."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from firedoc.serializer import FirestoreValueSerializer
from firedoc.timestamps import from_timestamp
from firedoc.value import FirestoreValue, Value


def _as_firestore_value(obj: Any) -> FirestoreValue:
    if isinstance(obj, FirestoreValue):
        return obj
    if isinstance(obj, Value):
        return FirestoreValue(obj)
    return FirestoreValueSerializer().serialize(obj)


class FirestoreTransformServerValue(enum.IntEnum):
    """Values the server fills in itself."""

    UNSPECIFIED = 0
    REQUEST_TIME = 1


class FieldTransformKind(enum.Enum):
    """Which transform is applied to a field."""

    SET_TO_SERVER_VALUE = "set_to_server_value"
    INCREMENT = "increment"
    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    APPEND_MISSING_ELEMENTS = "append_missing_elements"
    REMOVE_ALL_FROM_ARRAY = "remove_all_from_array"


_SINGLE_VALUE_KINDS = frozenset(
    {FieldTransformKind.INCREMENT, FieldTransformKind.MAXIMUM, FieldTransformKind.MINIMUM}
)


@dataclass
class FirestoreFieldTransformType:
    """A transform together with its argument."""

    kind: FieldTransformKind
    argument: Any

    def __post_init__(self) -> None:
        self.kind = FieldTransformKind(self.kind)
        if self.kind is FieldTransformKind.SET_TO_SERVER_VALUE:
            self.argument = FirestoreTransformServerValue(self.argument)
        elif self.kind in _SINGLE_VALUE_KINDS:
            self.argument = _as_firestore_value(self.argument)
        else:
            self.argument = [_as_firestore_value(item) for item in self.argument]

    @classmethod
    def set_to_server_value(
        cls, server_value: FirestoreTransformServerValue
    ) -> FirestoreFieldTransformType:
        return cls(FieldTransformKind.SET_TO_SERVER_VALUE, server_value)

    @classmethod
    def increment(cls, value: Any) -> FirestoreFieldTransformType:
        return cls(FieldTransformKind.INCREMENT, value)

    @classmethod
    def maximum(cls, value: Any) -> FirestoreFieldTransformType:
        return cls(FieldTransformKind.MAXIMUM, value)

    @classmethod
    def minimum(cls, value: Any) -> FirestoreFieldTransformType:
        return cls(FieldTransformKind.MINIMUM, value)

    @classmethod
    def append_missing_elements(cls, values: Iterable[Any]) -> FirestoreFieldTransformType:
        return cls(FieldTransformKind.APPEND_MISSING_ELEMENTS, list(values))

    @classmethod
    def remove_all_from_array(cls, values: Iterable[Any]) -> FirestoreFieldTransformType:
        return cls(FieldTransformKind.REMOVE_ALL_FROM_ARRAY, list(values))

    def to_proto(self) -> dict[str, Any]:
        if self.kind is FieldTransformKind.SET_TO_SERVER_VALUE:
            payload: Any = int(self.argument)
        elif self.kind in _SINGLE_VALUE_KINDS:
            payload = self.argument.value
        else:
            payload = {"values": [item.value for item in self.argument]}
        return {self.kind.value: payload}


@dataclass
class FirestoreFieldTransform:
    """A transform applied to one field of a document."""

    field: str
    transform_type: FirestoreFieldTransformType

    def to_proto(self) -> dict[str, Any]:
        return {"field_path": self.field, **self.transform_type.to_proto()}


@dataclass
class FirestoreWriteResult:
    """The outcome of one write: its time and the values its transforms produced."""

    transform_results: list[FirestoreValue] = field(default_factory=list)
    update_time: Optional[datetime] = None

    @classmethod
    def from_proto(cls, write_result: Mapping[str, Any]) -> FirestoreWriteResult:
        raw_time = write_result.get("update_time")
        return cls(
            transform_results=[
                FirestoreValue(item) for item in write_result.get("transform_results", ())
            ],
            update_time=None if raw_time is None else from_timestamp(raw_time),
        )