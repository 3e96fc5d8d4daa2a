"""Serializers for the payload part of cache entries.

- PickleSerializer: arbitrary Python object graphs (the default).
- JsonSerializer: UTF-8 JSON, readable by other tools.
- LiteralSerializer: Python literal source read back with ast.literal_eval.
  Only values that can be written as a static literal are accepted; anything
  else is rejected before the cache touches the disk.
"""

import ast
import json
import logging
import math
import pickle
from typing import Any, Dict, Set, Type

from filecache.domain.interfaces.serializer import Serializer
from filecache.domain.models.common import CodecKind
from filecache.domain.models.errors import CacheCorruptionError, CacheValidationError

logger = logging.getLogger(__name__)


class PickleSerializer(Serializer):
    """Pickle serializer. Only use it on cache directories you trust."""

    name = CodecKind.PICKLE.value

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        if protocol < 0 or protocol > pickle.HIGHEST_PROTOCOL:
            protocol = pickle.HIGHEST_PROTOCOL
        self.protocol = protocol

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError, ValueError) as e:
            raise CacheValidationError(f"Value of type {type(value).__name__} cannot be pickled: {e}") from e

    def deserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, KeyError, ValueError) as e:
            raise CacheCorruptionError(f"Pickle payload cannot be loaded: {e}") from e


class JsonSerializer(Serializer):
    """JSON serializer for interoperable payloads."""

    name = CodecKind.JSON.value

    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = False):
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys

    def serialize(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                ensure_ascii=self.ensure_ascii,
                sort_keys=self.sort_keys,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise CacheValidationError(f"Value of type {type(value).__name__} is not JSON serializable: {e}") from e
        return text.encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise CacheCorruptionError(f"JSON payload cannot be decoded: {e}") from e


_LITERAL_SCALARS = (str, bytes, int, bool, type(None))


class LiteralSerializer(Serializer):
    """Stores values as Python literal source text.

    The file never gets executed: ast.literal_eval only builds the literal.
    Supported values are None, booleans, numbers, strings, bytes and tuples,
    lists, sets and dicts of those. Custom objects, frozensets and non-finite
    floats have no literal form and are refused. Use the PickleSerializer to
    store arbitrary object graphs.
    """

    name = CodecKind.LITERAL.value

    def validate(self, value: Any) -> None:
        try:
            self._check(value, path="value", parents=set())
        except RecursionError as e:
            raise CacheValidationError("value is nested too deeply to be written as a static literal") from e

    def _check(self, value: Any, path: str, parents: Set[int]) -> None:
        # bool and int subclasses with a custom repr would not round-trip
        if type(value) in _LITERAL_SCALARS:
            return
        if type(value) is float:
            if not math.isfinite(value):
                raise CacheValidationError(f"{path} is a non-finite float, which has no literal form")
            return
        if type(value) is complex:
            if not (math.isfinite(value.real) and math.isfinite(value.imag)):
                raise CacheValidationError(f"{path} is a non-finite complex, which has no literal form")
            return
        if type(value) not in (list, tuple, set, dict):
            raise CacheValidationError(
                f"Invalid argument given, {path} of type {type(value).__name__} cannot be written as a "
                "static literal. Use the pickle codec to save arbitrary object graphs."
            )
        if id(value) in parents:
            raise CacheValidationError(f"{path} refers back to one of its containers, which has no literal form")
        parents.add(id(value))
        if type(value) is dict:
            for index, (item_key, item) in enumerate(value.items()):
                self._check(item_key, f"{path} key #{index}", parents)
                self._check(item, f"{path} value #{index}", parents)
        else:
            for index, item in enumerate(value):
                self._check(item, f"{path}[{index}]", parents)
        parents.discard(id(value))

    def serialize(self, value: Any) -> bytes:
        # EntryCodec.encode has already run validate()
        try:
            text = repr(value)
        except (ValueError, RecursionError) as e:
            # e.g. integers over the interpreter's int-to-str digit limit
            raise CacheValidationError(f"Value cannot be written as a static literal: {e}") from e
        return text.encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        try:
            return ast.literal_eval(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, SyntaxError, MemoryError, RecursionError) as e:
            raise CacheCorruptionError(f"Literal payload cannot be evaluated: {e}") from e


SERIALIZERS: Dict[CodecKind, Type[Serializer]] = {
    CodecKind.PICKLE: PickleSerializer,
    CodecKind.JSON: JsonSerializer,
    CodecKind.LITERAL: LiteralSerializer,
}


def create_serializer(codec: CodecKind) -> Serializer:
    """Instantiates the serializer registered for `codec`."""
    try:
        serializer_class = SERIALIZERS[CodecKind(codec)]
    except (KeyError, ValueError) as e:
        raise CacheValidationError(f"Unknown cache codec: {codec!r}") from e
    logger.debug(f"Using {serializer_class.__name__} for cache payloads.")
    return serializer_class()
