import pytest

from firedoc.value import (
    Document,
    FirestoreValue,
    LatLng,
    Timestamp,
    Value,
    ValueKind,
)


def test_default_value_is_unset():
    value = Value()
    assert value.is_set() is False
    assert value.kind is None


def test_null_is_set():
    value = Value.null()
    assert value.is_set() is True
    assert value.kind is ValueKind.NULL
    assert value.data is None


def test_boolean():
    value = Value.boolean(True)
    assert (value.kind, value.data) == (ValueKind.BOOLEAN, True)


def test_boolean_rejects_int():
    with pytest.raises(TypeError):
        Value.boolean(1)


def test_integer():
    value = Value.integer(-42)
    assert (value.kind, value.data) == (ValueKind.INTEGER, -42)


@pytest.mark.parametrize("number", [2**63, -(2**63) - 1])
def test_integer_out_of_range(number):
    with pytest.raises(ValueError):
        Value.integer(number)


def test_integer_bounds_accepted():
    assert Value.integer(2**63 - 1).data == 2**63 - 1
    assert Value.integer(-(2**63)).data == -(2**63)


def test_integer_rejects_bool():
    with pytest.raises(TypeError):
        Value.integer(False)


def test_double_converts_int():
    value = Value.double(3)
    assert value.kind is ValueKind.DOUBLE
    assert isinstance(value.data, float)
    assert value.data == 3


def test_string_and_reference_differ():
    assert Value.string("a/b") != Value.reference("a/b")
    assert Value.reference("a/b").kind is ValueKind.REFERENCE


def test_string_rejects_bytes():
    with pytest.raises(TypeError):
        Value.string(b"x")


def test_bytes_from_bytearray():
    value = Value.bytes_(bytearray(b"\x01\x02"))
    assert value.kind is ValueKind.BYTES
    assert value.data == b"\x01\x02"
    assert isinstance(value.data, bytes)


def test_timestamp_and_geo_point():
    ts = Timestamp(seconds=10, nanos=5)
    point = LatLng(latitude=1.5, longitude=-2.5)
    assert Value.timestamp(ts).data == ts
    assert Value.geo_point(point).data == point


def test_timestamp_requires_timestamp():
    with pytest.raises(TypeError):
        Value.timestamp(10)


def test_timestamp_ordering():
    assert Timestamp(1, 999) < Timestamp(2, 0)


def test_array_copies_input():
    items = [Value.integer(1), Value.string("x")]
    value = Value.array(items)
    items.append(Value.null())
    assert value.kind is ValueKind.ARRAY
    assert value.data == [Value.integer(1), Value.string("x")]


def test_array_rejects_raw_items():
    with pytest.raises(TypeError):
        Value.array([1])


def test_map_roundtrip_equality():
    fields = {"a": Value.integer(1), "b": Value.array([Value.boolean(False)])}
    assert Value.map(fields) == Value.map(dict(fields))
    assert Value.map(fields).data["b"].data[0].data is False


def test_map_rejects_non_string_key():
    with pytest.raises(TypeError):
        Value.map({1: Value.null()})


def test_map_rejects_raw_value():
    with pytest.raises(TypeError):
        Value.map({"a": 1})


def test_document_defaults_are_independent():
    first = Document(name="projects/p/databases/d/documents/c/1")
    second = Document()
    first.fields["x"] = Value.integer(1)
    assert second.fields == {}
    assert first.create_time is None and first.update_time is None


def test_firestore_value_wraps_value():
    wrapped = FirestoreValue(Value.string("s"))
    assert wrapped.value == Value.string("s")
    assert FirestoreValue().value.is_set() is False