"""Directory layouts for the file cache.

The flat layout keeps every entry directly under the cache root. The sharded
layout spreads entries over `16 ** hash_depth` subdirectories named after the
first hex characters of the key's sha256 digest, so no single directory grows
too large. As an example, 1 000 000 items with hash_depth == 2 land in 256
subfolders, around 4 000 files each; with hash_depth == 3 in 4096 subfolders,
around 250 files each.

WARNING: a sharded cache directory cannot be shared with other caches or other
files. Purging it removes the whole directory tree.
"""

import hashlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from filecache.domain.interfaces.layout import LayoutStrategy
from filecache.domain.models.common import (
    DEFAULT_CACHE_DIRECTORY,
    DEFAULT_DIRECTORY_MODE,
    CacheKey,
    CacheNamespace,
    validate_hash_depth,
)
from filecache.domain.models.errors import CacheIOError

logger = logging.getLogger(__name__)

# Writers fill ".<entry name>.XXXXXXXX.tmp" before renaming it over the entry
TEMP_FILE_PREFIX = "."
TEMP_FILE_SUFFIX = ".tmp"


def is_temporary_file(name: str) -> bool:
    return name.startswith(TEMP_FILE_PREFIX) and name.endswith(TEMP_FILE_SUFFIX)


def root_directory(namespace: CacheNamespace) -> Path:
    """Computes the cache root for a namespace.

    The configured directory (or "filecache/") is taken relative to the
    system temp directory when `relative_to_system_temp_directory` is set.
    """
    cache_directory = namespace.cache_directory or DEFAULT_CACHE_DIRECTORY
    if not namespace.relative_to_system_temp_directory:
        return Path(cache_directory)
    temp_directory = namespace.temp_directory or tempfile.gettempdir()
    # Plain concatenation: an absolute cache directory still lives below temp
    return Path(temp_directory) / cache_directory.lstrip("/\\")


def ensure_directory(directory: Path, mode: int = DEFAULT_DIRECTORY_MODE) -> None:
    """Creates `directory` and its parents if missing."""
    if directory.is_dir():
        return
    try:
        directory.mkdir(mode=mode, parents=True, exist_ok=True)
        # mkdir applies the umask; the cache directory itself gets the exact mode
        os.chmod(directory, mode)
        logger.debug(f"Created cache directory: {directory}")
    except OSError as e:
        raise CacheIOError(e.errno, f"Failed to create cache directory {directory}: {e.strerror}") from e


class FlatLayout(LayoutStrategy):
    """All entry files directly under the root directory."""

    def directory_for(self, key: CacheKey) -> Path:
        return self.root

    def clear(self, escaped_prefix: str) -> int:
        """Deletes the files under root whose name starts with `escaped_prefix`.

        An empty prefix matches every file except the temporary files of
        writes in progress. Subdirectories are left alone.
        """
        removed = 0
        try:
            entries = list(os.scandir(self.root))
        except FileNotFoundError:
            logger.debug(f"Cache directory {self.root} does not exist, nothing to clear.")
            return 0
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to list cache directory {self.root}: {e.strerror}") from e

        for entry in entries:
            if escaped_prefix and not entry.name.startswith(escaped_prefix):
                continue
            if is_temporary_file(entry.name):
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            try:
                os.unlink(entry.path)
                removed += 1
            except FileNotFoundError:
                pass  # Deleted concurrently
            except OSError as e:
                raise CacheIOError(e.errno, f"Failed to delete cache file {entry.path}: {e.strerror}") from e
        return removed


class ShardedLayout(LayoutStrategy):
    """Entry files spread over hash-named subdirectories of the root."""

    def __init__(self, root: Path, hash_depth: int):
        super().__init__(root)
        self.hash_depth = validate_hash_depth(hash_depth)

    def shard_name(self, key: CacheKey) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()[:self.hash_depth]

    def directory_for(self, key: CacheKey) -> Path:
        return self.root / self.shard_name(key)

    def clear(self, escaped_prefix: Optional[str] = None) -> int:
        """Removes the entire root tree. The prefix is deliberately ignored."""
        if not self.root.exists():
            logger.debug(f"Cache directory {self.root} does not exist, nothing to clear.")
            return 0
        removed = sum(len(files) for _, _, files in os.walk(self.root))
        try:
            shutil.rmtree(self.root)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CacheIOError(e.errno, f"Failed to remove cache directory {self.root}: {e.strerror}") from e
        return removed
