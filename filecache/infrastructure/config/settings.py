"""Provides functions for loading and accessing configuration settings.

Supports loading from environment variables, .env files and a YAML
configuration file (e.g., ~/.filecache/config.yaml), and turns the result
into a validated CacheNamespace.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from filecache.domain.models.common import (
    DEFAULT_CACHE_DIRECTORY,
    DEFAULT_HASH_DEPTH,
    CacheNamespace,
    CachePrefix,
    CodecKind,
    LayoutKind,
)
from filecache.domain.models.errors import CacheValidationError

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".filecache"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "FILECACHE_"

# Default time to live of entries created through the CLI (in seconds)
DEFAULT_CLI_TIME_TO_LIVE = 3600

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables (FILECACHE_CACHE_DIRECTORY, ...)
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (override=False: ENV VARS take precedence)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path, override=False):
        logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (path not found or empty).")

    _loaded = True


def reset_configuration() -> None:
    """Forgets everything loaded so the next load_configuration starts afresh."""
    global _config, _loaded
    _config = {}
    _loaded = False


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by dotted key (e.g. 'cache.directory').

    Priority:
    1. Test configuration
    2. Environment variable FILECACHE_<KEY> with dots as underscores
    3. YAML config
    4. Default value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _convert(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default


def env_var_name(key: str) -> str:
    return ENV_PREFIX + key.upper().replace(".", "_")


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def build_namespace(overrides: Optional[Dict[str, Any]] = None) -> CacheNamespace:
    """Creates a validated CacheNamespace from configuration.

    Args:
        overrides: Dotted keys taking precedence over every other source
            (e.g. values given on the command line). None values are ignored.

    Raises:
        CacheValidationError: If a value has the wrong type or is out of range.
    """
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    def lookup(key: str, default: Any) -> Any:
        return overrides[key] if key in overrides else get_config(key, default)

    try:
        namespace = CacheNamespace(
            cache_directory=str(lookup("cache.directory", DEFAULT_CACHE_DIRECTORY)),
            relative_to_system_temp_directory=_as_bool(lookup("cache.relative_to_temp", True)),
            prefix=CachePrefix(str(lookup("cache.prefix", ""))),
            default_time_to_live=_as_seconds(lookup("cache.default_ttl", DEFAULT_CLI_TIME_TO_LIVE)),
            layout=LayoutKind(str(lookup("cache.layout", LayoutKind.FLAT.value))),
            hash_depth=int(lookup("cache.hash_depth", DEFAULT_HASH_DEPTH)),
            codec=CodecKind(str(lookup("cache.codec", CodecKind.PICKLE.value))),
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, CacheValidationError):
            raise
        raise CacheValidationError(f"Invalid cache configuration: {e}") from e
    return namespace.validate()


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Set configuration values that override any other source."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")


def _flatten(tree: Dict[str, Any], parent: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in tree.items():
        dotted = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


def _convert(value: str) -> Any:
    if value.lower() == "true":
        return True
    elif value.lower() == "false":
        return False
    try:
        if "." in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def _as_seconds(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        if value.lower() in ("true", "1", "yes", "on"):
            return True
        if value.lower() in ("false", "0", "no", "off", ""):
            return False
        raise ValueError(f"Expected a boolean, got '{value}'")
    return bool(value)
