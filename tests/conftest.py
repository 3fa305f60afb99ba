# tests/conftest.py

"""Shared pytest fixtures for the price_watch test-suite."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from src.config.settings import Settings

TEST_ENDPOINTS: dict[str, str] = {
    "SEARCH_URL": "https://hooks.test/search",
    "TRACK_ADD_URL": "https://hooks.test/track/add",
    "TRACK_LIST_URL": "https://hooks.test/track/list",
    "TRACK_REMOVE_URL": "https://hooks.test/track/remove",
}


@pytest.fixture(autouse=True)
def endpoint_urls() -> Generator[None, None, None]:
    """Point every endpoint at a fixed test URL, whatever .env says."""
    with patch.multiple(Settings, **TEST_ENDPOINTS):
        yield
