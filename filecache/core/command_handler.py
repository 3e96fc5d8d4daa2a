"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the cache store, reporting results and failures through the
UserInterface. Every handler returns the process exit code.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from filecache.domain.interfaces.user_interface import UserInterface
from filecache.domain.models.common import CacheKey
from filecache.domain.models.errors import FileCacheError
from filecache.infrastructure.cache.file_cache import FileCacheStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISS = 1
EXIT_ERROR = 2

_MISS = object()


class CommandHandler:
    """Handles incoming commands and delegates to the cache store."""

    def __init__(self, cache_service: FileCacheStore, ui: UserInterface):
        self.cache_service = cache_service
        self.ui = ui

    def handle_get(self, key_str: str) -> int:
        """Handles the 'get' command: prints the value or reports a miss."""
        logger.info(f"Handling 'get' command for key: {key_str}")
        try:
            value = self.cache_service.get(CacheKey(key_str), default=_MISS)
        except FileCacheError as e:
            return self._fail("Get", e)
        if value is _MISS:
            self.ui.display_warning(f"Cache miss for key '{key_str}'.")
            return EXIT_MISS
        self.ui.display_output(render_value(value))
        return EXIT_OK

    def handle_set(self, key_str: str, raw_value: str, ttl: Optional[float] = None, as_json: bool = False) -> int:
        """Handles the 'set' command, optionally parsing the value as JSON."""
        logger.info(f"Handling 'set' command for key: {key_str}")
        value: Any = raw_value
        if as_json:
            try:
                value = json.loads(raw_value)
            except ValueError as e:
                self.ui.display_error(f"Value is not valid JSON: {e}")
                return EXIT_ERROR
        try:
            self.cache_service.set(CacheKey(key_str), value, ttl)
        except FileCacheError as e:
            return self._fail("Set", e)
        self.ui.display_info(f"Stored key '{key_str}'.")
        return EXIT_OK

    def handle_purge(self, key_str: str) -> int:
        logger.info(f"Handling 'purge' command for key: {key_str}")
        try:
            self.cache_service.purge(CacheKey(key_str))
        except FileCacheError as e:
            return self._fail("Purge", e)
        self.ui.display_info(f"Purged key '{key_str}'.")
        return EXIT_OK

    def handle_purge_all(self) -> int:
        logger.info("Handling 'purge-all' command.")
        try:
            self.cache_service.purge_all()
        except FileCacheError as e:
            return self._fail("Purge all", e)
        self.ui.display_info(f"Cache at {self.cache_service.root} purged.")
        return EXIT_OK

    def handle_inspect(self, key_str: str) -> int:
        """Shows where an entry lives and when it expires, without evicting it."""
        key = CacheKey(key_str)
        path = self.cache_service.locate(key)
        try:
            entry = self.cache_service.peek(key)
        except FileCacheError as e:
            return self._fail("Inspect", e)

        rows = {"key": key_str, "path": str(path)}
        if entry is None:
            rows["state"] = "absent"
        else:
            rows["state"] = "stale" if self.cache_service.is_expired(entry) else "fresh"
            rows["expires"] = format_expiration(entry.expires_at)
            rows["type"] = type(entry.value).__name__
        self.ui.display_details(f"Cache entry '{key_str}'", rows)
        return EXIT_OK if entry is not None else EXIT_MISS

    def _fail(self, action: str, error: FileCacheError) -> int:
        logger.error(f"{action} command failed: {error}", exc_info=True)
        self.ui.display_error(f"{action} failed: {error}")
        return EXIT_ERROR


def render_value(value: Any) -> str:
    """Text shown for a cached value: strings as-is, the rest as JSON or repr."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


def format_expiration(expires_at: int) -> str:
    if expires_at == 0:
        return "never"
    moment = datetime.fromtimestamp(expires_at, tz=timezone.utc)
    return f"{moment.isoformat()} ({expires_at})"
