"""OAuth 2.0 authentication for the WakaTime API."""

import hashlib
import logging
import secrets
import threading
from collections.abc import Callable, Iterable
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wakatime_client.auth.base import BaseAuth
from wakatime_client.auth.scopes import Scope, scopes_to_string
from wakatime_client.exceptions import AuthError, NetworkError
from wakatime_client.utils.parser import parse_url_encoded

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://wakatime.com"
DEFAULT_REDIRECT_URI = "http://localhost:8000/callback"


class OAuthToken(BaseModel):
    """Token set issued by one token endpoint response."""

    model_config = ConfigDict(frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None


class TokenResponse(BaseModel):
    """Fields read from the token endpoint; anything else is ignored."""

    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    expires_in: int | None = None


def generate_state() -> str:
    """Generate an opaque anti-CSRF value for the authorization redirect.

    Returns:
        64 character hex string.
    """
    return hashlib.sha256(secrets.token_bytes(40)).hexdigest()


class AccessTokenAuth(BaseAuth):
    """Bearer token authentication obtained through the authorization-code flow.

    The credential owns the token state. Tokens only change through
    exchange_code() and refresh_access_token(), and each response replaces the
    whole OAuthToken at once.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        scope: Iterable[Scope | str] | str | None = None,
        access_token: str | None = None,
        refresh_token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
        on_token_update: Callable[[OAuthToken], None] | None = None,
    ) -> None:
        """Initialize OAuth authentication.

        Args:
            client_id: OAuth application ID.
            client_secret: OAuth application secret.
            redirect_uri: Redirect URI registered for the application.
            scope: Scopes to request, as members/names or an already joined string.
            access_token: Existing access token, if any.
            refresh_token: Existing refresh token, if any.
            base_url: Provider root URL.
            http_client: Client used for token endpoint calls. Created if omitted.
            timeout: Timeout for token endpoint calls when the client is created here.
            on_token_update: Called with the new token after every exchange or refresh.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.base_url = base_url.rstrip("/")
        self.scope: str | None = None
        self.set_scope(scope)

        self._token: OAuthToken | None = None
        if access_token or refresh_token:
            self._token = OAuthToken(access_token=access_token, refresh_token=refresh_token)

        self._on_token_update = on_token_update
        self._lock = threading.Lock()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    @property
    def authorize_url(self) -> str:
        return f"{self.base_url}/oauth/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/oauth/token"

    @property
    def revoke_url(self) -> str:
        return f"{self.base_url}/oauth/revoke"

    @property
    def token(self) -> OAuthToken | None:
        return self._token

    @property
    def access_token(self) -> str | None:
        return self._token.access_token if self._token else None

    @property
    def refresh_token(self) -> str | None:
        return self._token.refresh_token if self._token else None

    @property
    def expires_in(self) -> int | None:
        return self._token.expires_in if self._token else None

    def set_scope(self, scope: Iterable[Scope | str] | str | None) -> None:
        """Replace the scopes requested by get_authorization_url().

        Args:
            scope: Scopes as members/names, a comma joined string, or None.
        """
        if scope is None:
            self.scope = None
        elif isinstance(scope, str):
            self.scope = scope or None
        else:
            self.scope = scopes_to_string(scope) or None

    def get_header(self) -> str:
        """Return the Bearer header for the current access token.

        Raises:
            AuthError: If no access token has been obtained yet.
        """
        token = self._token
        if token is None or not token.access_token:
            raise AuthError(
                "No access token available. Complete the OAuth flow with exchange_code() first."
            )
        return f"Bearer {token.access_token}"

    def refresh(self, rejected_header: str | None = None) -> None:
        rejected_token = None
        if rejected_header and rejected_header.startswith("Bearer "):
            rejected_token = rejected_header[len("Bearer ") :]
        self.refresh_access_token(rejected_token)

    def get_authorization_url(self, state: str | None = None) -> str:
        """Build the URL the user visits to authorize the application.

        Args:
            state: Anti-CSRF value echoed back on the redirect.

        Returns:
            Authorization URL.
        """
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
        }
        if state is not None:
            params["state"] = state
        if self.scope:
            params["scope"] = self.scope
        return f"{self.authorize_url}?{urlencode(params, safe=',')}"

    def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the redirect.

        Returns:
            The new access token.

        Raises:
            AuthError: If the token request fails or the response is malformed.
        """
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }

        with self._lock:
            token = self._request_token(payload)
            self._store_token(token)

        logger.info("Successfully obtained OAuth token")
        return token.access_token

    def refresh_access_token(self, rejected_token: str | None = None) -> str:
        """Obtain a new access token using the refresh token.

        Args:
            rejected_token: Access token the server rejected. When the stored
                token already differs from it, another caller has refreshed
                in the meantime and no request is made.

        Returns:
            The new access token.

        Raises:
            AuthError: If no refresh token is available or the refresh fails.
        """
        with self._lock:
            current = self._token
            if (
                rejected_token is not None
                and current is not None
                and current.access_token
                and current.access_token != rejected_token
            ):
                logger.info("Access token was already refreshed, reusing it")
                return current.access_token

            if current is None or not current.refresh_token:
                raise AuthError("No refresh token available. Please re-authenticate.")

            payload = {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": current.refresh_token,
            }

            token = self._request_token(payload)
            if token.refresh_token is None:
                # Provider kept the old refresh token valid
                token = token.model_copy(update={"refresh_token": current.refresh_token})
            self._store_token(token)

        logger.info("Token successfully refreshed")
        return token.access_token

    def revoke_token(
        self,
        token: str | None = None,
        all_tokens: bool = False,
        user_id: str | None = None,
    ) -> bool:
        """Revoke one token, all of a user's tokens, or all app tokens.

        Args:
            token: Access or refresh token to revoke.
            all_tokens: Revoke every token, optionally limited to user_id.
            user_id: Restrict an all_tokens revoke to this user.

        Returns:
            True if the provider answered with a 2xx status. Already revoked
            tokens still count as success.

        Raises:
            NetworkError: If the request could not be sent.
        """
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if token is not None:
            payload["token"] = token
        if all_tokens:
            payload["all"] = "true"
        if user_id is not None:
            payload["user_id"] = user_id

        try:
            response = self._client.post(self.revoke_url, data=payload)
        except httpx.RequestError as e:
            raise NetworkError(f"Token revoke request failed: {e}") from e

        if not response.is_success:
            logger.warning(f"Token revoke returned HTTP {response.status_code}")
        return response.is_success

    def revoke_all_user_tokens(self, user_id: str) -> bool:
        return self.revoke_token(all_tokens=True, user_id=user_id)

    def revoke_all_app_tokens(self) -> bool:
        return self.revoke_token(all_tokens=True)

    def _request_token(self, payload: dict[str, str]) -> OAuthToken:
        """POST to the token endpoint and parse the issued tokens."""
        try:
            response = self._client.post(self.token_url, data=payload)
        except httpx.RequestError as e:
            raise AuthError(f"Token request failed: {e}") from e

        if not response.is_success:
            raise AuthError(
                f"Token request failed with HTTP {response.status_code}: {response.text}"
            )

        return self._parse_token_response(response)

    @staticmethod
    def _parse_token_response(response: httpx.Response) -> OAuthToken:
        data: Any
        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                data = response.json()
            except ValueError as e:
                raise AuthError(f"Malformed token response: {e}") from e
        else:
            data = parse_url_encoded(response.text)

        try:
            parsed = TokenResponse.model_validate(data)
        except ValidationError as e:
            raise AuthError(f"Malformed token response: {e}") from e

        return OAuthToken(
            access_token=parsed.access_token,
            refresh_token=parsed.refresh_token,
            expires_in=parsed.expires_in,
        )

    def _store_token(self, token: OAuthToken) -> None:
        self._token = token
        if self._on_token_update is not None:
            self._on_token_update(token)

    def close(self) -> None:
        """Close the HTTP client if this credential created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "AccessTokenAuth":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"AccessTokenAuth(client_id={self.client_id!r}, scope={self.scope!r})"
