import enum
from dataclasses import dataclass

import pytest

from firedoc.errors import FirestoreSerializeError
from firedoc.references import FirestoreReference, serialize_reference_for_firestore
from firedoc.value import FirestoreValue, Value, ValueKind

UNSUPPORTED = "Reference serializer doesn't support this type"
PATH = "projects/demo/databases/(default)/documents/users/alice"


class Kind(enum.Enum):
    Admin = 1
    Guest = 2


@dataclass
class Holder:
    path: str


def test_string_becomes_reference():
    result = serialize_reference_for_firestore(PATH, False)
    assert result == FirestoreValue(Value.reference(PATH))
    assert result.value.kind is ValueKind.REFERENCE


def test_reference_marker_is_unwrapped():
    result = serialize_reference_for_firestore(FirestoreReference(PATH), False)
    assert result.value.data == PATH


def test_none_without_null_flag_is_unset():
    result = serialize_reference_for_firestore(None, False)
    assert result.value.is_set() is False


def test_none_with_null_flag_is_null():
    result = serialize_reference_for_firestore(None, True)
    assert result.value.kind is ValueKind.NULL


def test_enum_member_uses_its_name():
    result = serialize_reference_for_firestore(Kind.Guest, False)
    assert result.value == Value.reference("Guest")


@pytest.mark.parametrize(
    "value", [True, 7, 2.5, b"bytes", ["a"], ("a",), {"a": "b"}, Holder("x")]
)
def test_other_values_are_unsupported(value):
    with pytest.raises(FirestoreSerializeError) as info:
        serialize_reference_for_firestore(value, False)
    assert info.value.public.code == UNSUPPORTED


def test_references_are_hashable_and_comparable():
    refs = {FirestoreReference(PATH), FirestoreReference(PATH), FirestoreReference("other")}
    assert len(refs) == 2


def test_empty_reference_round_trips_to_empty_path():
    result = serialize_reference_for_firestore(FirestoreReference(), True)
    assert result.value == Value.reference("")