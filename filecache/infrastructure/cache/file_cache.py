"""Concrete implementation of the file-backed Caching Service.

Each entry is one file holding its expiration header and serialized payload.
Expiration is only checked when an entry is read: a stale entry is deleted
by the `get` that discovers it. There is no background sweep.

Writes go to a temporary file in the target directory which is then renamed
over the entry, so concurrent readers see either the old or the new value.
"""

import logging
import os
import tempfile
import time
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Optional

from filecache.domain.interfaces.cache import CacheService, TimeToLive
from filecache.domain.interfaces.layout import LayoutStrategy
from filecache.domain.interfaces.serializer import Serializer
from filecache.domain.models.common import CacheEntry, CacheKey, CacheNamespace, LayoutKind
from filecache.domain.models.errors import CacheIOError, CacheValidationError
from filecache.infrastructure.cache.entry_codec import EntryCodec
from filecache.infrastructure.cache.key_encoder import encode_file_name, escape_key
from filecache.infrastructure.cache.layout import (
    TEMP_FILE_PREFIX,
    TEMP_FILE_SUFFIX,
    FlatLayout,
    ShardedLayout,
    ensure_directory,
    root_directory,
)
from filecache.infrastructure.cache.serializers import create_serializer

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class FileCacheStore(CacheService):
    """File cache over a pluggable directory layout and payload serializer."""

    def __init__(
        self,
        namespace: CacheNamespace,
        layout: LayoutStrategy,
        serializer: Serializer,
        log: Optional[logging.Logger] = None,
        clock: Optional[Clock] = None,
    ):
        """Initializes the store.

        Args:
            namespace: Validated configuration (prefix, default TTL, modes).
            layout: Decides the directory of each entry and how to wipe them.
            serializer: Encodes the payload part of each entry.
            log: Logger receiving the cache traces. Defaults to this module's
                logger, which stays silent unless logging is configured.
            clock: Returns the current time in epoch seconds.
        """
        self.namespace = namespace.validate()
        self.layout = layout
        self.codec = EntryCodec(serializer)
        self.log = log or logger
        self.clock = clock or time.time

    @property
    def root(self) -> Path:
        return self.layout.root

    def locate(self, key: CacheKey) -> Path:
        """Returns the path of the file backing `key`."""
        directory = self.layout.directory_for(key)
        return directory / encode_file_name(key, self.namespace.prefix, directory)

    # --- CacheService Interface Implementation ---

    def get(self, key: CacheKey, default: Any = None) -> Any:
        """Returns the cached value for `key`, or `default` on a miss."""
        path = self.locate(key)
        try:
            stream = open(path, "rb")
        except (FileNotFoundError, NotADirectoryError):
            # Also covers a file deleted between a purge and this open
            self.log.debug(f"Retrieving key '{key}' from file cache: cache miss.")
            return default
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to open cache file {path}: {e.strerror}") from e

        with stream:
            entry = CacheEntry(expires_at=self.codec.read_expires_at(stream))
            stale = self.is_expired(entry)
            if not stale:
                entry.value = self.codec.read_value(stream)

        if stale:
            self._evict_stale(key, path)
            return default

        self.log.debug(f"Retrieving key '{key}' from file cache.")
        return entry.value

    def set(self, key: CacheKey, value: Any, time_to_live: Optional[TimeToLive] = None) -> None:
        """Stores `value` under `key`, replacing any previous entry.

        Raises:
            CacheValidationError: If the serializer refuses the value; nothing
                is written in that case.
            CacheIOError: If the directory or the file cannot be written.
        """
        expires_at = self._expiration_for(time_to_live)
        data = self.codec.encode(value, expires_at)

        directory = self.layout.directory_for(key)
        path = directory / encode_file_name(key, self.namespace.prefix, directory)
        # Only the key is logged, never the value
        self.log.debug(f"Storing value in cache: key '{key}'")

        if directory != self.root:
            # Shard directories: the root gets the same restricted mode
            ensure_directory(self.root, self.namespace.directory_mode)
        ensure_directory(directory, self.namespace.directory_mode)
        self._write_atomically(path, data)

    def purge(self, key: CacheKey) -> None:
        """Removes the entry of `key`, if any."""
        self.log.info(f"Purging key '{key}' from file cache.")
        path = self.locate(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to delete cache file {path}: {e.strerror}") from e

    def purge_all(self) -> None:
        """Removes all the entries of this cache.

        The flat layout only deletes files carrying this namespace's prefix.
        The sharded layout deletes the whole cache directory.
        """
        self.log.info("Purging the whole file cache.")
        removed = self.layout.clear(escape_key(self.namespace.prefix))
        self.log.debug(f"Removed {removed} file(s) from {self.root}")

    # --- Inspection ---

    def peek(self, key: CacheKey) -> Optional[CacheEntry]:
        """Reads the entry of `key` without evicting it, even when stale."""
        path = self.locate(key)
        try:
            data = path.read_bytes()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to read cache file {path}: {e.strerror}") from e
        return self.codec.decode(data)

    def is_expired(self, entry: CacheEntry) -> bool:
        return entry.is_expired(self.clock())

    # --- Internals ---

    def _evict_stale(self, key: CacheKey, path: Path) -> None:
        """Deletes an entry found stale by a read."""
        try:
            path.unlink()
        except FileNotFoundError:
            pass  # Already evicted by a concurrent reader or purge
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to delete stale cache file {path}: {e.strerror}") from e
        self.log.debug(f"Retrieving key '{key}' from file cache: key outdated, cache miss.")

    def _expiration_for(self, time_to_live: Optional[TimeToLive]) -> int:
        """Converts a time to live into an absolute timestamp (0 = never)."""
        if isinstance(time_to_live, timedelta):
            time_to_live = time_to_live.total_seconds()
        if not time_to_live:
            time_to_live = self.namespace.default_time_to_live
            if not time_to_live:
                return 0
        if time_to_live < 0:
            raise CacheValidationError(f"time_to_live must be positive, got {time_to_live}")
        return int(self.clock() + time_to_live)

    def _write_atomically(self, path: Path, data: bytes) -> None:
        # Leading dot keeps temp files out of prefix-filtered purges
        try:
            fd, temp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f"{TEMP_FILE_PREFIX}{path.name}.", suffix=TEMP_FILE_SUFFIX,
            )
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to create a temporary file in {path.parent}: {e.strerror}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(temp_name, self.namespace.file_mode)
            os.replace(temp_name, path)
        except OSError as e:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
            raise CacheIOError(e.errno, f"Failed to write cache file {path}: {e.strerror}") from e


def create_cache_store(
    namespace: CacheNamespace,
    log: Optional[logging.Logger] = None,
    clock: Optional[Clock] = None,
) -> FileCacheStore:
    """Builds a FileCacheStore with the layout and serializer the namespace asks for."""
    namespace.validate()
    root = root_directory(namespace)
    if LayoutKind(namespace.layout) is LayoutKind.SHARDED:
        layout: LayoutStrategy = ShardedLayout(root, namespace.hash_depth)
    else:
        layout = FlatLayout(root)
    store = FileCacheStore(namespace, layout, create_serializer(namespace.codec), log=log, clock=clock)
    logger.info(f"FileCacheStore initialized. root={root}, layout={layout.__class__.__name__}, "
                f"codec={store.codec.serializer.name}, prefix='{namespace.prefix}'")
    return store
