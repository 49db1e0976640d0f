"""Pytest configuration and fixtures."""

import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest
import respx

from wakatime_client.auth import AccessTokenAuth, ApiTokenAuth
from wakatime_client.config import Config
from wakatime_client.utils import StorageManager

BASE_URL = "https://wakatime.com"
REDIRECT_URI = "http://localhost:8000/callback"


@pytest.fixture
def temp_config_dir() -> Iterator[Path]:
    """Create a temporary configuration directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_manager(temp_config_dir: Path) -> StorageManager:
    """Create a storage manager with temporary directory."""
    return StorageManager(temp_config_dir)


@pytest.fixture
def config(temp_config_dir: Path) -> Config:
    """Create a config instance that ignores the real environment."""
    return Config(temp_config_dir, environ={})


@pytest.fixture
def api_auth() -> ApiTokenAuth:
    """Create an API key credential."""
    return ApiTokenAuth("waka_test_key")


@pytest.fixture
def oauth_auth() -> Iterator[AccessTokenAuth]:
    """Create an OAuth credential holding a stale access token."""
    auth = AccessTokenAuth(
        client_id="test_client_id",
        client_secret="test_client_secret",
        redirect_uri=REDIRECT_URI,
        access_token="stale_access_token",
        refresh_token="test_refresh_token",
    )
    yield auth
    auth.close()


@pytest.fixture
def empty_oauth_auth() -> Iterator[AccessTokenAuth]:
    """Create an OAuth credential that has not been authorized yet."""
    auth = AccessTokenAuth(
        client_id="test_client_id",
        client_secret="test_client_secret",
        redirect_uri=REDIRECT_URI,
    )
    yield auth
    auth.close()


@pytest.fixture
def http_client() -> Iterator[httpx.Client]:
    """Create a plain HTTP client."""
    with httpx.Client() as client:
        yield client


@pytest.fixture
def mock_wakatime() -> Iterator[respx.MockRouter]:
    """Mock every request to wakatime.com.

    Yields a RESPX router that tests register responses on.
    """
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


def _token_body(
    access_token: str = "new_access_token",
    refresh_token: str = "new_refresh_token",
    expires_in: int = 3600,
) -> str:
    return f"access_token={access_token}&refresh_token={refresh_token}&expires_in={expires_in}"


@pytest.fixture
def token_body() -> Callable[..., str]:
    """Build form-encoded token endpoint responses."""
    return _token_body
