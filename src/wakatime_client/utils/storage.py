"""Settings and token storage for the WakaTime command-line client."""

import json
from pathlib import Path
from typing import Any

import yaml

from wakatime_client.utils.logging import DEFAULT_CONFIG_DIR


class StorageManager:
    """Manages settings and secret storage on disk."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize storage manager.

        Args:
            config_dir: Directory to store configuration. Defaults to ~/.wakatime-client/
        """
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.settings_file = self.config_dir / "config.yaml"
        self.tokens_file = self.config_dir / "tokens.json"

    def load_settings(self) -> dict[str, Any]:
        """Load non-secret settings.

        Returns:
            Settings dictionary, empty if nothing was saved yet.
        """
        if self.settings_file.exists():
            with open(self.settings_file) as f:
                return yaml.safe_load(f) or {}
        return {}

    def save_settings(self, settings: dict[str, Any]) -> None:
        """Save non-secret settings.

        Args:
            settings: Settings to save.
        """
        with open(self.settings_file, "w") as f:
            yaml.dump(settings, f, default_flow_style=False, sort_keys=False)

    def load_tokens(self) -> dict[str, str]:
        """Load stored secrets.

        Returns:
            Dictionary of secret names to values.
        """
        if self.tokens_file.exists():
            with open(self.tokens_file) as f:
                return json.load(f)
        return {}

    def save_tokens(self, tokens: dict[str, str]) -> None:
        """Save secrets, readable by the current user only.

        Args:
            tokens: Dictionary of secret names to values.
        """
        self.tokens_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.tokens_file, "w") as f:
            json.dump(tokens, f)
        self.tokens_file.chmod(0o600)

    def get_token(self, name: str) -> str | None:
        """Get a stored secret.

        Args:
            name: Secret name (e.g., "api_key", "access_token").

        Returns:
            Value if available, None otherwise.
        """
        return self.load_tokens().get(name)

    def set_token(self, name: str, value: str) -> None:
        """Store a secret.

        Args:
            name: Secret name.
            value: Secret value.
        """
        tokens = self.load_tokens()
        tokens[name] = value
        self.save_tokens(tokens)

    def delete_token(self, name: str) -> None:
        """Remove a stored secret if present."""
        tokens = self.load_tokens()
        if tokens.pop(name, None) is not None:
            self.save_tokens(tokens)
