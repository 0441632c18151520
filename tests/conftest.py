"""Shared fixtures for the AirScope tests."""

from datetime import datetime, timezone

import pytest

from city_profiles import get_profiles
from settings import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test with default settings and no stray .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ("LOG_LEVEL", "TRACE", "DB_PATH", "MODEL_DIR", "CITY_PROFILES_PATH", "OVERRIDE_RATIO"):
        monkeypatch.delenv(f"AIRSCOPE_{name}", raising=False)
    get_settings.cache_clear()
    get_profiles.cache_clear()
    yield
    get_settings.cache_clear()
    get_profiles.cache_clear()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 1, 10, 15, tzinfo=timezone.utc)
