import datetime
import pickle
import sys

import pytest

from filecache.domain.models.common import CodecKind
from filecache.domain.models.errors import CacheCorruptionError, CacheValidationError
from filecache.infrastructure.cache.serializers import (
    JsonSerializer,
    LiteralSerializer,
    PickleSerializer,
    create_serializer,
)


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __eq__(self, other):
        return isinstance(other, Point) and (self.x, self.y) == (other.x, other.y)


def test_pickle_keeps_arbitrary_objects():
    serializer = PickleSerializer()
    value = {"when": datetime.date(2024, 1, 2), "point": Point(1, 2)}
    assert serializer.deserialize(serializer.serialize(value)) == value


def test_pickle_rejects_unpicklable_values():
    with pytest.raises(CacheValidationError):
        PickleSerializer().serialize(lambda: None)


def test_pickle_garbage_is_corruption():
    with pytest.raises(CacheCorruptionError):
        PickleSerializer().deserialize(b"\x80\x04\x95")


def test_pickle_invalid_protocol_falls_back_to_highest():
    assert PickleSerializer(protocol=99).protocol == pickle.HIGHEST_PROTOCOL


def test_json_rejects_non_json_values():
    with pytest.raises(CacheValidationError):
        JsonSerializer().serialize({"when": datetime.date(2024, 1, 2)})
    with pytest.raises(CacheValidationError):
        JsonSerializer().serialize(float("nan"))


def test_json_keeps_unicode_readable():
    assert JsonSerializer().serialize("café") == '"café"'.encode("utf-8")


@pytest.mark.parametrize("value", [
    None,
    True,
    42,
    -3.5,
    1 + 2j,
    "text with 'quotes' and \n newline",
    b"\x00\xff",
    (1, "two", [3.0]),
    {"nested": {"list": [1, 2, {3}], ("tuple", "key"): None}},
    set(),
])
def test_literal_accepts_static_values(value):
    serializer = LiteralSerializer()
    serializer.validate(value)
    assert serializer.deserialize(serializer.serialize(value)) == value


@pytest.mark.parametrize("value", [
    object(),
    Point(1, 2),
    frozenset({1}),
    float("inf"),
    float("nan"),
    [1, {"deep": datetime.date(2024, 1, 2)}],
    {("ok",): object()},
])
def test_literal_rejects_values_without_literal_form(value):
    with pytest.raises(CacheValidationError):
        LiteralSerializer().validate(value)


def test_literal_rejects_self_referencing_containers():
    looped = []
    looped.append(looped)
    nested = {"inner": {}}
    nested["inner"]["outer"] = nested
    for value in (looped, nested):
        with pytest.raises(CacheValidationError):
            LiteralSerializer().validate(value)


def test_literal_accepts_shared_non_cyclic_references():
    shared = [1, 2]
    value = {"a": shared, "b": (shared, shared)}
    serializer = LiteralSerializer()
    serializer.validate(value)
    assert serializer.deserialize(serializer.serialize(value)) == value


@pytest.mark.skipif(not getattr(sys, "get_int_max_str_digits", lambda: 0)(), reason="no int-to-str digit limit")
def test_literal_rejects_integers_too_large_to_write():
    huge = 10 ** (sys.get_int_max_str_digits() + 1)
    with pytest.raises(CacheValidationError):
        LiteralSerializer().serialize(huge)


def test_literal_never_executes_code():
    with pytest.raises(CacheCorruptionError):
        LiteralSerializer().deserialize(b"__import__('os').getcwd()")


@pytest.mark.parametrize("codec, expected", [
    (CodecKind.PICKLE, PickleSerializer),
    ("json", JsonSerializer),
    ("literal", LiteralSerializer),
])
def test_create_serializer(codec, expected):
    assert isinstance(create_serializer(codec), expected)


def test_create_serializer_unknown():
    with pytest.raises(CacheValidationError):
        create_serializer("yaml")
