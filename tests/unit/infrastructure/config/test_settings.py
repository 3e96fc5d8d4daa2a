from pathlib import Path

import pytest

from filecache.domain.models.common import CodecKind, LayoutKind
from filecache.domain.models.errors import CacheValidationError
from filecache.infrastructure.config import settings


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "cache:\n"
        "  directory: /srv/cache/\n"
        "  relative_to_temp: false\n"
        "  layout: sharded\n"
        "  hash_depth: 3\n"
        "logging:\n"
        "  level: DEBUG\n"
    )
    return path


def test_yaml_values_are_flattened(config_file: Path):
    settings.load_configuration(config_file=config_file)
    assert settings.get_config("cache.directory") == "/srv/cache/"
    assert settings.get_config("cache.hash_depth") == 3
    assert settings.get_config("logging.level") == "DEBUG"
    assert settings.get_config("cache.prefix", "default") == "default"


def test_environment_overrides_yaml(config_file: Path, monkeypatch):
    monkeypatch.setenv("FILECACHE_CACHE_HASH_DEPTH", "4")
    monkeypatch.setenv("FILECACHE_CACHE_RELATIVE_TO_TEMP", "true")
    settings.load_configuration(config_file=config_file)
    assert settings.get_config("cache.hash_depth") == 4
    assert settings.get_config("cache.relative_to_temp") is True


def test_test_config_overrides_environment(monkeypatch):
    monkeypatch.setenv("FILECACHE_CACHE_PREFIX", "env")
    settings.set_config_for_testing({"cache.prefix": "test"})
    assert settings.get_config("cache.prefix") == "test"


def test_dotenv_file_is_loaded(tmp_path: Path, monkeypatch):
    # Register the variable so monkeypatch removes what load_dotenv sets
    monkeypatch.setenv("FILECACHE_CACHE_PREFIX", "placeholder")
    monkeypatch.delenv("FILECACHE_CACHE_PREFIX")
    env_file = tmp_path / ".env"
    env_file.write_text("FILECACHE_CACHE_PREFIX=from_dotenv\n")

    settings.load_configuration(config_file=tmp_path / "missing.yaml", env_file=env_file)

    assert settings.get_config("cache.prefix") == "from_dotenv"


def test_invalid_yaml_is_ignored(tmp_path: Path):
    broken = tmp_path / "broken.yaml"
    broken.write_text("cache: [unclosed\n")
    settings.load_configuration(config_file=broken)
    assert settings.get_config("cache.directory") is None


def test_build_namespace_from_configuration(config_file: Path):
    settings.load_configuration(config_file=config_file)
    namespace = settings.build_namespace()
    assert namespace.cache_directory == "/srv/cache/"
    assert namespace.relative_to_system_temp_directory is False
    assert namespace.layout is LayoutKind.SHARDED
    assert namespace.hash_depth == 3
    assert namespace.codec is CodecKind.PICKLE
    assert namespace.default_time_to_live == settings.DEFAULT_CLI_TIME_TO_LIVE


def test_build_namespace_overrides_win_and_none_is_ignored(config_file: Path):
    settings.load_configuration(config_file=config_file)
    namespace = settings.build_namespace({"cache.hash_depth": 1, "cache.layout": None, "cache.default_ttl": 0})
    assert namespace.hash_depth == 1
    assert namespace.layout is LayoutKind.SHARDED
    assert namespace.default_time_to_live == 0


@pytest.mark.parametrize("overrides", [
    {"cache.layout": "sharded", "cache.hash_depth": 9},
    {"cache.hash_depth": "deep"},
    {"cache.layout": "tree"},
    {"cache.codec": "xml"},
    {"cache.relative_to_temp": "maybe"},
])
def test_build_namespace_rejects_bad_values(overrides):
    with pytest.raises(CacheValidationError):
        settings.build_namespace(overrides)
