"""Interface for value serializers.

The payload of a cache entry is produced by a pluggable serializer so the
same file layout can hold pickled objects, JSON documents or literal source.
"""

import abc
from typing import Any


class Serializer(abc.ABC):
    """Abstract Base Class turning values into bytes and back."""

    #: Short name recorded in logs and shown by the CLI.
    name: str = "abstract"

    def validate(self, value: Any) -> None:
        """Rejects values this serializer cannot store.

        Called before anything touches the filesystem.

        Raises:
            CacheValidationError: If the value is not representable.
        """

    @abc.abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Encodes a value into bytes.

        Raises:
            CacheValidationError: If the value cannot be encoded.
        """
        pass

    @abc.abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Decodes bytes produced by `serialize`.

        Raises:
            CacheCorruptionError: If the bytes cannot be decoded.
        """
        pass
