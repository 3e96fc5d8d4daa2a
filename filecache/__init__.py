"""filecache: a filesystem-backed key/value cache with lazy expiration."""

__version__ = "1.0.0"
