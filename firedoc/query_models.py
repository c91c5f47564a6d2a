"""Query parameters, filters, orderings and cursors, and their structured query form."""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from firedoc.serializer import FirestoreValueSerializer
from firedoc.value import FirestoreValue, Value

_U32_MAX = 2**32 - 1


def _field_ref(path: str) -> dict[str, str]:
    return {"field_path": path}


def _as_i32(number: int) -> int:
    return number - 2**32 if number >= 2**31 else number


def _check_u32(name: str, number: Any) -> None:
    if number is None:
        return
    if isinstance(number, bool) or not isinstance(number, int):
        raise TypeError(f"{name} must be an int, got {type(number).__name__}")
    if not 0 <= number <= _U32_MAX:
        raise ValueError(f"{name} {number} does not fit in an unsigned 32-bit integer")


def _as_firestore_value(obj: Any) -> FirestoreValue:
    if isinstance(obj, FirestoreValue):
        return obj
    if isinstance(obj, Value):
        return FirestoreValue(obj)
    return FirestoreValueSerializer().serialize(obj)


@dataclass(frozen=True)
class FirestoreQueryCollection:
    """One collection, or a group of collections queried together."""

    collection_ids: tuple[str, ...]
    is_group: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.collection_ids, str):
            raise TypeError("collection_ids must be a sequence of strings, not a string")
        ids = tuple(self.collection_ids)
        for cid in ids:
            if not isinstance(cid, str):
                raise TypeError(f"collection id must be str, got {type(cid).__name__}")
        if not self.is_group and len(ids) != 1:
            raise ValueError("a single collection needs exactly one collection id")
        object.__setattr__(self, "collection_ids", ids)

    @classmethod
    def single(cls, collection_id: str) -> FirestoreQueryCollection:
        return cls((collection_id,), False)

    @classmethod
    def group(cls, collection_ids: Iterable[str]) -> FirestoreQueryCollection:
        if isinstance(collection_ids, str):
            raise TypeError("collection_ids must be a sequence of strings, not a string")
        return cls(tuple(collection_ids), True)

    def __str__(self) -> str:
        return ",".join(self.collection_ids)


class FirestoreQueryDirection(enum.Enum):
    """Sort direction of an ordering."""

    ASCENDING = "asc"
    DESCENDING = "desc"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FirestoreQueryOrder:
    """Ordering of results by one field."""

    field_name: str
    direction: FirestoreQueryDirection = FirestoreQueryDirection.ASCENDING

    def to_string_format(self) -> str:
        return f"{self.field_name} {self.direction}"

    def to_proto(self) -> dict[str, Any]:
        return {"field": _field_ref(self.field_name), "direction": self.direction.name}


def _order(item: Any) -> FirestoreQueryOrder:
    if isinstance(item, FirestoreQueryOrder):
        return item
    if isinstance(item, tuple) and len(item) == 2:
        name, direction = item
        return FirestoreQueryOrder(str(name), FirestoreQueryDirection(direction))
    raise TypeError(f"cannot use {item!r} as an ordering")


class CompareOperator(enum.Enum):
    """Operators of a field comparison."""

    LESS_THAN = "LESS_THAN"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    ARRAY_CONTAINS = "ARRAY_CONTAINS"
    IN = "IN"
    ARRAY_CONTAINS_ANY = "ARRAY_CONTAINS_ANY"
    NOT_IN = "NOT_IN"


@dataclass
class FirestoreQueryFilterCompare:
    """Compares a field with a value."""

    operator: CompareOperator
    field_name: str
    value: Any

    def __post_init__(self) -> None:
        self.operator = CompareOperator(self.operator)
        self.value = _as_firestore_value(self.value)


class UnaryOperator(enum.Enum):
    """Operators of a single-field test."""

    IS_NAN = "IS_NAN"
    IS_NULL = "IS_NULL"
    IS_NOT_NAN = "IS_NOT_NAN"
    IS_NOT_NULL = "IS_NOT_NULL"


@dataclass(frozen=True)
class FirestoreQueryFilterUnary:
    """Tests one field for NaN or null."""

    operator: UnaryOperator
    field_name: str


@dataclass
class FirestoreQueryFilterComposite:
    """All of the given filters must match; ``None`` entries are ignored."""

    for_all_filters: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.for_all_filters = list(self.for_all_filters)


QueryFilter = Union[
    FirestoreQueryFilterCompare,
    FirestoreQueryFilterUnary,
    FirestoreQueryFilterComposite,
    None,
]


def filter_to_proto(query_filter: QueryFilter) -> dict[str, Any]:
    """Convert a filter into its structured form; ``None`` gives an empty filter."""
    if query_filter is None:
        return {}
    if isinstance(query_filter, FirestoreQueryFilterCompare):
        return {
            "field_filter": {
                "field": _field_ref(query_filter.field_name),
                "op": query_filter.operator.value,
                "value": query_filter.value.value,
            }
        }
    if isinstance(query_filter, FirestoreQueryFilterUnary):
        return {
            "unary_filter": {
                "op": query_filter.operator.value,
                "field": _field_ref(query_filter.field_name),
            }
        }
    if isinstance(query_filter, FirestoreQueryFilterComposite):
        converted = (filter_to_proto(item) for item in query_filter.for_all_filters)
        return {
            "composite_filter": {
                "op": "AND",
                "filters": [item for item in converted if item],
            }
        }
    raise TypeError(f"cannot use {type(query_filter).__name__} as a query filter")


@dataclass
class FirestoreQueryCursor:
    """A position in ordered results, just before or just after the given values."""

    values: list[FirestoreValue] = field(default_factory=list)
    before: bool = True

    def __post_init__(self) -> None:
        self.values = [_as_firestore_value(item) for item in self.values]

    @classmethod
    def before_value(cls, values: Iterable[Any]) -> FirestoreQueryCursor:
        return cls(list(values), True)

    @classmethod
    def after_value(cls, values: Iterable[Any]) -> FirestoreQueryCursor:
        return cls(list(values), False)

    def to_proto(self) -> dict[str, Any]:
        return {"values": [item.value for item in self.values], "before": self.before}

    @classmethod
    def from_proto(cls, cursor: Mapping[str, Any]) -> FirestoreQueryCursor:
        values = [FirestoreValue(item) for item in cursor.get("values", ())]
        return cls(values, bool(cursor.get("before", False)))


@dataclass
class FirestoreQueryParams:
    """Everything that describes one query."""

    collection_id: FirestoreQueryCollection
    parent: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    order_by: Optional[list[FirestoreQueryOrder]] = None
    filter: QueryFilter = None
    all_descendants: Optional[bool] = None
    return_only_fields: Optional[list[str]] = None
    start_at: Optional[FirestoreQueryCursor] = None
    end_at: Optional[FirestoreQueryCursor] = None

    def __post_init__(self) -> None:
        if isinstance(self.collection_id, str):
            self.collection_id = FirestoreQueryCollection.single(self.collection_id)
        elif not isinstance(self.collection_id, FirestoreQueryCollection):
            raise TypeError("collection_id must be a str or a FirestoreQueryCollection")
        _check_u32("limit", self.limit)
        _check_u32("offset", self.offset)
        if self.order_by is not None:
            self.order_by = [_order(item) for item in self.order_by]
        if self.return_only_fields is not None:
            self.return_only_fields = list(self.return_only_fields)

    def to_structured_query(self) -> dict[str, Any]:
        """The query in structured form."""
        all_descendants = bool(self.all_descendants)
        return {
            "select": None
            if self.return_only_fields is None
            else {"fields": [_field_ref(name) for name in self.return_only_fields]},
            "from": [
                {"collection_id": cid, "all_descendants": all_descendants}
                for cid in self.collection_id.collection_ids
            ],
            "where": None if self.filter is None else filter_to_proto(self.filter),
            "order_by": [order.to_proto() for order in self.order_by or ()],
            "start_at": None if self.start_at is None else self.start_at.to_proto(),
            "end_at": None if self.end_at is None else self.end_at.to_proto(),
            "offset": 0 if self.offset is None else _as_i32(self.offset),
            "limit": None if self.limit is None else _as_i32(self.limit),
        }


@dataclass
class FirestorePartitionQueryParams:
    """A query to split into partitions, with paging of the partition cursors."""

    query_params: FirestoreQueryParams
    partition_count: int
    page_size: int
    page_token: Optional[str] = None

    def __post_init__(self) -> None:
        _check_u32("partition_count", self.partition_count)
        _check_u32("page_size", self.page_size)

    def with_page_token(self, page_token: str) -> FirestorePartitionQueryParams:
        return dataclasses.replace(self, page_token=page_token)


@dataclass
class FirestorePartition:
    """The cursor bounds of one partition of a query."""

    start_at: Optional[FirestoreQueryCursor] = None
    end_at: Optional[FirestoreQueryCursor] = None