"""Shared fixtures for all tests."""

from collections.abc import Generator

import pytest


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear storage-related environment variables for testing.

    This ensures tests don't accidentally use real credentials from the environment.
    """
    env_vars_to_clear = [
        "STOWAGE_URL",
        "STOWAGE_API_KEY",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def mock_api_key() -> str:
    """Mock storage API key for testing."""
    return "test_api_key_123456789"


@pytest.fixture
def mock_storage_url() -> str:
    """Mock storage endpoint for testing."""
    return "https://project.example.com/storage/v1"
