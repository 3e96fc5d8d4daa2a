"""Interface for cache directory layouts.

A layout decides in which directory an entry file lives and how the whole
cache is wiped.
"""

import abc
from pathlib import Path

from filecache.domain.models.common import CacheKey


class LayoutStrategy(abc.ABC):
    """Abstract Base Class mapping keys to directories below a cache root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    @abc.abstractmethod
    def directory_for(self, key: CacheKey) -> Path:
        """Returns the directory holding the entry file of `key`."""
        pass

    @abc.abstractmethod
    def clear(self, escaped_prefix: str) -> int:
        """Deletes the entries owned by this cache.

        Args:
            escaped_prefix: The filesystem-safe form of the namespace prefix.

        Returns:
            The number of files removed.
        """
        pass
