import os

import pytest
from typer.testing import CliRunner
from pathlib import Path

from filecache.domain.models.common import CacheNamespace, CachePrefix, LayoutKind
from filecache.infrastructure.cache.file_cache import create_cache_store
from filecache.infrastructure.config import settings


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cachedir"


@pytest.fixture
def namespace(cache_dir: Path) -> CacheNamespace:
    """Flat namespace below tmp_path with a one hour default TTL."""
    return CacheNamespace(
        cache_directory=str(cache_dir),
        relative_to_system_temp_directory=False,
        prefix=CachePrefix("TOTO"),
        default_time_to_live=3600,
    )


@pytest.fixture
def flat_cache(namespace: CacheNamespace, clock: FakeClock):
    return create_cache_store(namespace, clock=clock)


@pytest.fixture
def sharded_cache(cache_dir: Path, clock: FakeClock):
    sharded = CacheNamespace(
        cache_directory=str(cache_dir),
        relative_to_system_temp_directory=False,
        default_time_to_live=3600,
        layout=LayoutKind.SHARDED,
        hash_depth=2,
    )
    return create_cache_store(sharded, clock=clock)


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path: Path):
    """Keeps user config files and FILECACHE_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    settings.reset_configuration()
    settings.clear_test_config()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
