"""Tests for storage manager."""

import stat
from pathlib import Path

import yaml

from wakatime_client.utils import StorageManager


class TestStorageManager:
    """Test StorageManager functionality."""

    def test_init_creates_directory(self, temp_config_dir: Path) -> None:
        """Test that initialization creates the config directory."""
        nested = temp_config_dir / "nested" / "dir"
        storage = StorageManager(nested)

        assert nested.exists()
        assert storage.config_dir == nested

    def test_settings_persistence(self, storage_manager: StorageManager) -> None:
        """Test saving and loading settings."""
        settings = {
            "base_url": "https://wakatime.com",
            "client_id": "app_id",
            "scopes": ["read_stats", "email"],
        }

        storage_manager.save_settings(settings)
        loaded = storage_manager.load_settings()

        assert loaded == settings

    def test_settings_written_as_yaml(self, storage_manager: StorageManager) -> None:
        storage_manager.save_settings({"timeout": 12.5})

        with open(storage_manager.settings_file) as f:
            assert yaml.safe_load(f) == {"timeout": 12.5}

    def test_token_persistence(self, storage_manager: StorageManager) -> None:
        """Test saving and loading tokens."""
        tokens = {
            "api_key": "waka_key",
            "refresh_token": "ref",
        }

        storage_manager.save_tokens(tokens)
        loaded = storage_manager.load_tokens()

        assert loaded == tokens

    def test_tokens_file_private(self, storage_manager: StorageManager) -> None:
        """Test that the secrets file is readable by the owner only."""
        storage_manager.set_token("api_key", "waka_key")

        mode = stat.S_IMODE(storage_manager.tokens_file.stat().st_mode)
        assert mode == 0o600

    def test_get_set_token(self, storage_manager: StorageManager) -> None:
        """Test getting and setting individual tokens."""
        storage_manager.set_token("api_key", "my_api_key")
        storage_manager.set_token("client_secret", "shh")

        assert storage_manager.get_token("api_key") == "my_api_key"
        assert storage_manager.get_token("client_secret") == "shh"

    def test_delete_token(self, storage_manager: StorageManager) -> None:
        storage_manager.set_token("access_token", "acc")
        storage_manager.set_token("api_key", "key")

        storage_manager.delete_token("access_token")
        storage_manager.delete_token("never_stored")

        assert storage_manager.load_tokens() == {"api_key": "key"}

    def test_get_nonexistent_token(self, storage_manager: StorageManager) -> None:
        """Test getting a token that doesn't exist."""
        token = storage_manager.get_token("nonexistent")
        assert token is None

    def test_empty_settings_default(self, storage_manager: StorageManager) -> None:
        """Test that loading non-existent settings returns empty dict."""
        settings = storage_manager.load_settings()
        assert settings == {}

    def test_empty_tokens_default(self, storage_manager: StorageManager) -> None:
        """Test that loading non-existent tokens returns empty dict."""
        tokens = storage_manager.load_tokens()
        assert tokens == {}
