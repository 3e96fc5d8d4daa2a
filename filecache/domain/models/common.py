"""Defines common Value Objects used across the cache layers.

These objects represent the cache key, the on-disk entry and the namespace
configuration a cache instance is built from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType, Optional

from filecache.domain.models.errors import CacheValidationError

# === Caching Context ===
CacheKey = NewType("CacheKey", str)          # Caller-chosen key, any characters
CachePrefix = NewType("CachePrefix", str)    # Prepended to every key of a namespace

DEFAULT_CACHE_DIRECTORY = "filecache/"
DEFAULT_HASH_DEPTH = 2
MIN_HASH_DEPTH = 1
MAX_HASH_DEPTH = 4  # 16^4 subdirectories is already the practical ceiling

# Cache is shared with group, not with the rest of the world.
DEFAULT_DIRECTORY_MODE = 0o770
DEFAULT_FILE_MODE = 0o660


class LayoutKind(str, Enum):
    """How entry files are distributed below the cache root."""
    FLAT = "flat"
    SHARDED = "sharded"


class CodecKind(str, Enum):
    """Which serializer encodes the payload part of an entry."""
    PICKLE = "pickle"
    JSON = "json"
    LITERAL = "literal"


@dataclass
class CacheEntry:
    """A decoded cache file: absolute expiration plus the stored value.

    Args:
        expires_at: Epoch seconds after which the entry is stale (0 = never expires)
        value: The deserialized payload
    """

    expires_at: int
    value: Any = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at != 0 and self.expires_at <= now


@dataclass(frozen=True)
class CacheNamespace:
    """Configuration bundle a cache instance is constructed from."""

    cache_directory: str = DEFAULT_CACHE_DIRECTORY
    relative_to_system_temp_directory: bool = True
    prefix: CachePrefix = CachePrefix("")
    default_time_to_live: Optional[float] = None
    layout: LayoutKind = LayoutKind.FLAT
    hash_depth: int = DEFAULT_HASH_DEPTH
    codec: CodecKind = CodecKind.PICKLE
    directory_mode: int = DEFAULT_DIRECTORY_MODE
    file_mode: int = DEFAULT_FILE_MODE
    # Resolved process temp directory; filled in by the factory when unset
    temp_directory: Optional[str] = None

    def validate(self) -> "CacheNamespace":
        """Checks the bundle and returns it, raising CacheValidationError on bad values."""
        try:
            LayoutKind(self.layout)
        except ValueError as e:
            raise CacheValidationError(f"Unknown cache layout: {self.layout!r}") from e
        try:
            CodecKind(self.codec)
        except ValueError as e:
            raise CacheValidationError(f"Unknown cache codec: {self.codec!r}") from e
        if LayoutKind(self.layout) is LayoutKind.SHARDED:
            validate_hash_depth(self.hash_depth)
        if self.default_time_to_live is not None and self.default_time_to_live < 0:
            raise CacheValidationError(
                f"default_time_to_live must be positive, got {self.default_time_to_live}"
            )
        return self


def validate_hash_depth(hash_depth: int) -> int:
    """Ensures the shard depth stays within 1 and 4 (inclusive)."""
    if isinstance(hash_depth, bool) or not isinstance(hash_depth, int):
        raise CacheValidationError(f"hash_depth must be an integer, got {hash_depth!r}")
    if hash_depth < MIN_HASH_DEPTH or hash_depth > MAX_HASH_DEPTH:
        raise CacheValidationError(
            f"hash_depth should be between {MIN_HASH_DEPTH} and {MAX_HASH_DEPTH}, got {hash_depth}"
        )
    return hash_depth
