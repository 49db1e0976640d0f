"""Configuration management for the WakaTime command-line client."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from wakatime_client.auth import AccessTokenAuth, ApiTokenAuth, BaseAuth, OAuthToken
from wakatime_client.auth.oauth import DEFAULT_BASE_URL, DEFAULT_REDIRECT_URI
from wakatime_client.exceptions import AuthError
from wakatime_client.utils.storage import StorageManager

logger = logging.getLogger(__name__)

ENV_API_KEY = "WAKATIME_API_KEY"
ENV_CLIENT_ID = "WAKATIME_CLIENT_ID"
ENV_CLIENT_SECRET = "WAKATIME_CLIENT_SECRET"
ENV_BASE_URL = "WAKATIME_BASE_URL"


class Settings(BaseModel):
    """Non-secret settings kept in config.yaml."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    client_id: str | None = None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: list[str] = Field(default_factory=list)


class Config:
    """Resolves settings and credentials from storage and the environment."""

    def __init__(
        self,
        config_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize configuration.

        Args:
            config_dir: Directory for storing configuration.
            environ: Environment to read overrides from. Defaults to os.environ.
        """
        self.storage = StorageManager(config_dir)
        self.environ = os.environ if environ is None else environ
        self._settings = Settings.model_validate(self.storage.load_settings())

    @property
    def settings(self) -> Settings:
        """Stored settings with environment overrides applied."""
        overrides: dict[str, Any] = {}
        if self.environ.get(ENV_BASE_URL):
            overrides["base_url"] = self.environ[ENV_BASE_URL]
        if self.environ.get(ENV_CLIENT_ID):
            overrides["client_id"] = self.environ[ENV_CLIENT_ID]
        return self._settings.model_copy(update=overrides)

    def update(self, **fields: Any) -> Settings:
        """Change stored settings.

        Args:
            **fields: Settings fields to replace.

        Returns:
            Updated stored settings.
        """
        self._settings = Settings.model_validate({**self._settings.model_dump(), **fields})
        self.storage.save_settings(self._settings.model_dump())
        return self._settings

    @property
    def api_key(self) -> str | None:
        return self.environ.get(ENV_API_KEY) or self.storage.get_token("api_key")

    @property
    def client_secret(self) -> str | None:
        return self.environ.get(ENV_CLIENT_SECRET) or self.storage.get_token("client_secret")

    def has_oauth_app(self) -> bool:
        """Check whether OAuth application credentials are configured."""
        return bool(self.settings.client_id and self.client_secret)

    def save_oauth_token(self, token: OAuthToken) -> None:
        """Persist tokens issued to the OAuth credential.

        Args:
            token: Token set from the latest exchange or refresh.
        """
        tokens = self.storage.load_tokens()
        for name in ("access_token", "refresh_token"):
            value = getattr(token, name)
            if value:
                tokens[name] = value
            else:
                tokens.pop(name, None)
        self.storage.save_tokens(tokens)
        logger.debug("Stored OAuth tokens")

    def clear_oauth_tokens(self) -> None:
        self.storage.delete_token("access_token")
        self.storage.delete_token("refresh_token")

    def build_oauth(self) -> AccessTokenAuth:
        """Create the OAuth credential from the configured application.

        Stored tokens are loaded and every later token change is written back.

        Raises:
            AuthError: If the OAuth application is not configured.
        """
        settings = self.settings
        if not self.has_oauth_app():
            raise AuthError("OAuth application not configured. Run: wakatime-client configure")

        return AccessTokenAuth(
            client_id=settings.client_id,
            client_secret=self.client_secret,
            redirect_uri=settings.redirect_uri,
            scope=settings.scopes or None,
            access_token=self.storage.get_token("access_token"),
            refresh_token=self.storage.get_token("refresh_token"),
            base_url=settings.base_url,
            timeout=settings.timeout,
            on_token_update=self.save_oauth_token,
        )

    def build_auth(self) -> BaseAuth:
        """Pick the credential for API calls.

        OAuth is preferred once an access token has been stored; otherwise the
        API key is used.

        Raises:
            AuthError: If neither credential is available.
        """
        if self.has_oauth_app() and self.storage.get_token("access_token"):
            return self.build_oauth()

        api_key = self.api_key
        if api_key:
            return ApiTokenAuth(api_key)

        raise AuthError(
            f"No WakaTime credentials found. Set {ENV_API_KEY} or run: wakatime-client configure"
        )
