"""Pytest configuration and fixtures for webstats tests."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from webstats.config import Config  # noqa: E402
from webstats.options import MemoryOptionStore  # noqa: E402

CONFIG_ENV_VARS = [
    "PATH_ROOT", "INSTANCE_ID", "CACHE_BACKEND", "CACHE_CHAINED_BACKENDS",
    "CACHE_FILE_DIR", "CACHE_PROCESS_DIR", "CACHE_REDIS_URL", "CACHE_REDIS_KEY_PREFIX",
    "CACHE_MAX_MEMORY_SIZE", "ENABLE_AUTO_UPDATE", "RELEASE_CHANNEL",
    "API_SERVICE_URL", "BUILDS_URL", "SITE_URL", "LOG_LEVEL", "LOG_FORMAT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of configuration tests."""
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_config(tmp_path):
    """Build a Config rooted in a temporary directory."""
    def _make(**overrides) -> Config:
        values = {"path_root": str(tmp_path), "_env_file": None}
        values.update(overrides)
        return Config(**values)
    return _make


@pytest.fixture
def option_store():
    """Empty in-memory option store."""
    return MemoryOptionStore()


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
