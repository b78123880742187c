"""
Pytest configuration for datastore-touch.

Provides fixtures for:
- Settings with a small work queue and the default retry budget
- A recording sleep so retry tests never wait
- Settings cache isolation between tests
"""

from __future__ import annotations

from typing import List

import pytest

from datastore_touch.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture independent of the environment and any `.env` file.
    """
    return Settings(
        _env_file=None,
        datastore_project_id="test-project",
        queue_per_worker=2,
    )


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps: List[float]):
    return sleeps.append
