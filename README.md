# firedoc

A pure-Python model of Firestore documents and of the requests built around
them. It has no dependencies outside the standard library.

## Modules

- `firedoc.value`: typed Firestore values. `Value` holds a `ValueKind` and its
  data and is built with `Value.null()`, `Value.boolean()`, `Value.integer()`,
  `Value.double()`, `Value.string()`, `Value.bytes_()`, `Value.reference()`,
  `Value.timestamp()`, `Value.geo_point()`, `Value.array()` and `Value.map()`.
  A `Value()` with no kind is unset. `Timestamp`, `LatLng`, `Document` and
  `FirestoreValue` complete the model.
- `firedoc.serializer`: `FirestoreValueSerializer`, `to_firestore_value` and
  `firestore_document_from_serializable` turn dataclasses, mappings, lists,
  tuples, sets and scalars into values and documents. `None` fields and items
  are left out of maps and arrays; enum members are stored by name; plain
  `datetime` objects are stored as RFC 3339 strings. `to_firestore_value`
  gives an unset value for anything it cannot convert, and
  `firestore_document_from_serializable` raises `FirestoreSystemError` when
  the object does not serialize to a map.
- `firedoc.deserializer`: `value_to_python`, `python_to_value`,
  `deserialize_value` and `firestore_document_to_serializable` turn values and
  documents back into Python data, or into a target type such as a dataclass,
  `dict`, `list[int]`, `Optional[...]`, an enum or `datetime`. Documents gain
  the fields `_firestore_id`, `_firestore_full_id` and, when present,
  `_firestore_created` and `_firestore_updated`.
- `firedoc.timestamps`: the markers `FirestoreTimestamp` (store a native
  timestamp), `NullableTimestamp` (a missing time is stored as an explicit
  null) and `FirestoreNull` (a missing value is stored as an explicit null),
  plus `to_timestamp`, `from_timestamp` and
  `serialize_timestamp_for_firestore`, which accepts datetimes and RFC 3339
  strings.
- `firedoc.geo`: `FirestoreGeoPoint`, the marker `FirestoreLatLng` and
  `serialize_latlng_for_firestore`.
- `firedoc.references`: the marker `FirestoreReference` and
  `serialize_reference_for_firestore`.
- `firedoc.query_models`: `FirestoreQueryParams`, `FirestoreQueryCollection`,
  `FirestoreQueryOrder`, `FirestoreQueryDirection`, the filters
  `FirestoreQueryFilterCompare`, `FirestoreQueryFilterUnary` and
  `FirestoreQueryFilterComposite` with `CompareOperator` and `UnaryOperator`,
  `FirestoreQueryCursor`, `FirestorePartitionQueryParams` and
  `FirestorePartition`. `FirestoreQueryParams.to_structured_query()` and
  `filter_to_proto()` give the structured-query form as plain dicts.
- `firedoc.transforms`: `FirestoreFieldTransform`,
  `FirestoreFieldTransformType`, `FieldTransformKind`,
  `FirestoreTransformServerValue` and `FirestoreWriteResult`.
- `firedoc.errors`: the hierarchy rooted at `FirestoreError`,
  `error_from_status` to classify an RPC `StatusCode`, and `BackoffError` with
  `firestore_err_to_backoff` to mark errors as permanent or retryable.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

A dataclass to a document and back:

```python
from dataclasses import dataclass

from firedoc.serializer import firestore_document_from_serializable
from firedoc.deserializer import firestore_document_to_serializable


@dataclass
class City:
    name: str
    population: int


doc = firestore_document_from_serializable(
    "projects/demo/databases/(default)/documents/cities/paris",
    City("Paris", 2_100_000),
)
data = firestore_document_to_serializable(doc, dict)
assert data["_firestore_id"] == "paris"
assert data["population"] == 2_100_000
```

Choosing how a field is stored:

```python
from datetime import datetime, timezone

from firedoc.geo import FirestoreGeoPoint, FirestoreLatLng
from firedoc.serializer import to_firestore_value
from firedoc.timestamps import FirestoreTimestamp
from firedoc.value import ValueKind

when = to_firestore_value(FirestoreTimestamp(datetime(2024, 1, 1, tzinfo=timezone.utc)))
assert when.value.kind is ValueKind.TIMESTAMP

where = to_firestore_value(FirestoreLatLng(FirestoreGeoPoint(48.85, 2.35)))
assert where.value.kind is ValueKind.GEO_POINT
```

Describing a query:

```python
from firedoc.query_models import (
    CompareOperator,
    FirestoreQueryCollection,
    FirestoreQueryFilterCompare,
    FirestoreQueryParams,
)
from firedoc.value import Value

params = FirestoreQueryParams(
    collection_id=FirestoreQueryCollection.single("cities"),
    filter=FirestoreQueryFilterCompare(
        CompareOperator.GREATER_THAN, "population", Value.integer(1000)
    ),
    limit=10,
)
query = params.to_structured_query()
```

## What it does not do

firedoc does not connect to Firestore. It has no client, and it does not send
queries, writes or transactions or store any data; it builds and reads the
values, documents, query descriptions and transforms that such a client would
exchange with the service.