"""Interface for caching mechanisms.

Defines the contract for storing, retrieving, and purging cached data
with optional per-entry expiration.
"""

import abc
from datetime import timedelta
from typing import Any, Optional, Union

from filecache.domain.models.common import CacheKey

TimeToLive = Union[int, float, timedelta]


class CacheService(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    def get(self, key: CacheKey, default: Any = None) -> Any:
        """Retrieves an item from the cache.

        Args:
            key: The cache key to retrieve.
            default: Returned on a miss (absent or expired entry).

        Returns:
            The cached item if found and not expired, otherwise `default`.
        """
        pass

    @abc.abstractmethod
    def set(self, key: CacheKey, value: Any, time_to_live: Optional[TimeToLive] = None) -> None:
        """Stores an item in the cache, replacing any previous value.

        Args:
            key: The cache key to store the item under.
            value: The item to store.
            time_to_live: Seconds (or a timedelta) before the entry expires.
                Uses the namespace default if None.
        """
        pass

    @abc.abstractmethod
    def purge(self, key: CacheKey) -> None:
        """Deletes an item from the cache. Missing keys are ignored.

        Args:
            key: The cache key to delete.
        """
        pass

    @abc.abstractmethod
    def purge_all(self) -> None:
        """Removes all the items of this cache."""
        pass
