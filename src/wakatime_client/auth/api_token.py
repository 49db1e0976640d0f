"""Static API key authentication."""

import base64

from wakatime_client.auth.base import BaseAuth


class ApiTokenAuth(BaseAuth):
    """Authenticates with a secret API key using HTTP Basic auth."""

    def __init__(self, api_token: str) -> None:
        """Initialize API key authentication.

        Args:
            api_token: WakaTime secret API key.

        Raises:
            ValueError: If api_token is empty.
        """
        if not api_token:
            raise ValueError("WakaTime API key is required")
        self._api_token = api_token
        self._header = "Basic " + base64.b64encode(api_token.encode()).decode()

    @property
    def api_token(self) -> str:
        return self._api_token

    def get_header(self) -> str:
        return self._header

    def refresh(self, rejected_header: str | None = None) -> None:
        """API keys cannot be renewed; nothing to do."""

    def __repr__(self) -> str:
        return "ApiTokenAuth(api_token='****')"
