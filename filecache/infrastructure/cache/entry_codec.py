"""Encoding of a cache entry file.

Line 1 is the absolute expiration time in epoch seconds as ASCII digits
(0 means never expires). Everything after the first newline is the payload
produced by the configured serializer, read up to end of file.
"""

import io
from typing import Any, BinaryIO

from filecache.domain.interfaces.serializer import Serializer
from filecache.domain.models.common import CacheEntry
from filecache.domain.models.errors import CacheCorruptionError

# A 64-bit timestamp never needs more digits than this
_MAX_HEADER_LENGTH = 32


class EntryCodec:
    """Writes and reads `<expires_at>\\n<payload>` entries."""

    def __init__(self, serializer: Serializer):
        self.serializer = serializer

    def encode(self, value: Any, expires_at: int) -> bytes:
        """Serializes `value` behind its expiration header.

        Raises:
            CacheValidationError: If the serializer refuses the value.
        """
        self.serializer.validate(value)
        payload = self.serializer.serialize(value)
        return b"%d\n" % int(expires_at) + payload

    def read_expires_at(self, stream: BinaryIO) -> int:
        """Reads the header line, leaving the stream positioned at the payload."""
        header = stream.readline(_MAX_HEADER_LENGTH + 1)
        if not header.endswith(b"\n"):
            raise CacheCorruptionError(f"Cache entry header is missing or too long: {header[:_MAX_HEADER_LENGTH]!r}")
        text = header[:-1].strip()
        if not text.isdigit():
            raise CacheCorruptionError(f"Cache entry header is not a timestamp: {text!r}")
        return int(text)

    def read_value(self, stream: BinaryIO) -> Any:
        """Reads the payload to end of stream and deserializes it."""
        return self.serializer.deserialize(stream.read())

    def decode(self, data: bytes) -> CacheEntry:
        """Decodes a complete entry held in memory."""
        stream = io.BytesIO(data)
        expires_at = self.read_expires_at(stream)
        return CacheEntry(expires_at=expires_at, value=self.read_value(stream))
