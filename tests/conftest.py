"""
Pytest configuration and fixtures for rcache tests.
"""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from rcache.cache import FilesystemCache
from rcache.config import Settings, clear_settings_cache


class FakeClock:
    """Settable clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


TTL = timedelta(minutes=10)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def manager(temp_dir: Path, clock: FakeClock) -> FilesystemCache:
    """Provide a cache manager rooted in the temp directory."""
    return FilesystemCache.from_dir(temp_dir / "cache", TTL, clock=clock)


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "CACHE_DIR": str(temp_dir / "env_cache"),
        "CACHE_TTL": "3600",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        os.environ.pop("LOG_FILE", None)
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str]) -> Generator[Settings, None, None]:
    """Provide a Settings instance with mock configuration."""
    from rcache.config import get_settings

    settings = get_settings()
    settings.ensure_directories()
    yield settings
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
