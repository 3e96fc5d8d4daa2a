"""Exception hierarchy raised by the file cache."""


class FileCacheError(Exception):
    """Base class for all exceptions raised by filecache."""


class CacheValidationError(FileCacheError, ValueError):
    """Raised when configuration or a value to store is rejected before any write."""


class CacheIOError(FileCacheError, OSError):
    """Raised when the filesystem refuses an operation (permissions, disk full...)."""


class CacheCorruptionError(FileCacheError):
    """Raised when an entry file exists but cannot be decoded."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
