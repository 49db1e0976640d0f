"""Tests for the request dispatcher."""

from collections.abc import Callable
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from wakatime_client.auth import AccessTokenAuth, ApiTokenAuth, BaseAuth
from wakatime_client.dispatcher import RequestDispatcher
from wakatime_client.exceptions import ApiError, AuthError, ErrorKind, NetworkError

RESOURCE_URL = "https://wakatime.com/api/v1/users/current"


@pytest.fixture
def mock_auth() -> MagicMock:
    """Credential whose header changes after a refresh."""
    auth = MagicMock(spec=BaseAuth)
    auth.get_header.side_effect = ["Bearer old", "Bearer new"]
    return auth


def _execute(auth: BaseAuth, client: httpx.Client) -> httpx.Response:
    dispatcher = RequestDispatcher(auth, client)
    return dispatcher.execute(client.build_request("GET", RESOURCE_URL))


class TestErrorKind:
    """Test status classification."""

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.BAD_REQUEST),
            (401, ErrorKind.UNAUTHORIZED),
            (403, ErrorKind.FORBIDDEN),
            (404, ErrorKind.NOT_FOUND),
            (429, ErrorKind.RATE_LIMITED),
            (500, ErrorKind.SERVER_ERROR),
            (418, ErrorKind.UNKNOWN),
            (503, ErrorKind.UNKNOWN),
        ],
    )
    def test_from_status(self, status: int, kind: ErrorKind) -> None:
        assert ErrorKind.from_status(status) is kind


class TestRequestDispatcher:
    """Test RequestDispatcher behaviour."""

    @pytest.mark.parametrize("status", [200, 201, 202])
    def test_success_returns_body(
        self,
        status: int,
        api_auth: ApiTokenAuth,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that success statuses return the body unmodified."""
        body = b'{"data": {"username": "dev", "ratio": 0.5}}'
        route = mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(status, content=body)
        )

        response = _execute(api_auth, http_client)

        assert response.status_code == status
        assert response.content == body
        assert route.call_count == 1

    def test_authorization_header_attached(
        self,
        api_auth: ApiTokenAuth,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        route = mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(200, json={})
        )

        _execute(api_auth, http_client)

        assert route.calls.last.request.headers["Authorization"] == api_auth.get_header()

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.BAD_REQUEST),
            (403, ErrorKind.FORBIDDEN),
            (404, ErrorKind.NOT_FOUND),
            (429, ErrorKind.RATE_LIMITED),
            (500, ErrorKind.SERVER_ERROR),
        ],
    )
    def test_error_statuses(
        self,
        status: int,
        kind: ErrorKind,
        mock_auth: MagicMock,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that error statuses raise once, without refresh or retry."""
        route = mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(status, text="details")
        )

        with pytest.raises(ApiError) as exc_info:
            _execute(mock_auth, http_client)

        assert exc_info.value.kind is kind
        assert exc_info.value.status_code == status
        assert exc_info.value.body == "details"
        assert route.call_count == 1
        mock_auth.refresh.assert_not_called()

    def test_unknown_status_includes_body(
        self,
        api_auth: ApiTokenAuth,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(418, text="short and stout")
        )

        with pytest.raises(ApiError) as exc_info:
            _execute(api_auth, http_client)

        assert exc_info.value.kind is ErrorKind.UNKNOWN
        assert "short and stout" in exc_info.value.message

    def test_not_found_with_api_key(
        self,
        api_auth: ApiTokenAuth,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that a 404 error message carries the response body."""
        mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(404, text='{"error":"not found"}')
        )

        with pytest.raises(ApiError) as exc_info:
            _execute(api_auth, http_client)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert "not found" in str(exc_info.value)

    def test_401_refreshes_and_retries_once(
        self,
        mock_auth: MagicMock,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that a 401 triggers one refresh and one retry with the new header."""
        route = mock_wakatime.get("/api/v1/users/current").mock(
            side_effect=[httpx.Response(401), httpx.Response(200, json={"ok": True})]
        )

        response = _execute(mock_auth, http_client)

        assert response.json() == {"ok": True}
        mock_auth.refresh.assert_called_once_with("Bearer old")
        assert route.call_count == 2
        assert route.calls[0].request.headers["Authorization"] == "Bearer old"
        assert route.calls[1].request.headers["Authorization"] == "Bearer new"

    def test_second_401_is_final(
        self,
        mock_auth: MagicMock,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that a second 401 raises Unauthorized without another refresh."""
        route = mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(401, text="token revoked")
        )

        with pytest.raises(ApiError) as exc_info:
            _execute(mock_auth, http_client)

        assert exc_info.value.kind is ErrorKind.UNAUTHORIZED
        mock_auth.refresh.assert_called_once()
        assert route.call_count == 2

    def test_retry_error_is_not_refreshed_again(
        self,
        mock_auth: MagicMock,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that the retried answer is classified as-is."""
        mock_wakatime.get("/api/v1/users/current").mock(
            side_effect=[httpx.Response(401), httpx.Response(403, text="scope missing")]
        )

        with pytest.raises(ApiError) as exc_info:
            _execute(mock_auth, http_client)

        assert exc_info.value.kind is ErrorKind.FORBIDDEN
        mock_auth.refresh.assert_called_once()

    def test_failed_refresh_stops(
        self,
        mock_auth: MagicMock,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that an AuthError from refresh propagates and nothing is retried."""
        mock_auth.refresh.side_effect = AuthError("refresh rejected")
        route = mock_wakatime.get("/api/v1/users/current").mock(
            return_value=httpx.Response(401)
        )

        with pytest.raises(AuthError, match="refresh rejected"):
            _execute(mock_auth, http_client)

        assert route.call_count == 1

    def test_transport_failure_is_network_error(
        self,
        mock_auth: MagicMock,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        """Test that transport failures are wrapped and never retried."""
        route = mock_wakatime.get("/api/v1/users/current").mock(
            side_effect=httpx.ReadTimeout("read timed out")
        )

        with pytest.raises(NetworkError) as exc_info:
            _execute(mock_auth, http_client)

        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)
        assert route.call_count == 1
        mock_auth.refresh.assert_not_called()

    def test_missing_oauth_token_fails_before_sending(
        self,
        empty_oauth_auth: AccessTokenAuth,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
    ) -> None:
        route = mock_wakatime.get("/api/v1/users/current")

        with pytest.raises(AuthError):
            _execute(empty_oauth_auth, http_client)

        assert route.call_count == 0


class TestOAuthRefreshCycle:
    """Test the dispatcher with a real OAuth credential."""

    def test_stale_token_is_refreshed(
        self,
        oauth_auth: AccessTokenAuth,
        http_client: httpx.Client,
        mock_wakatime: respx.MockRouter,
        token_body: Callable[..., str],
    ) -> None:
        """Test 401, token refresh, then success on the retried request."""
        api_route = mock_wakatime.get("/api/v1/users/current").mock(
            side_effect=[httpx.Response(401), httpx.Response(200, json={"ok": True})]
        )
        token_route = mock_wakatime.post("/oauth/token").mock(
            return_value=httpx.Response(200, text=token_body("fresh_access_token"))
        )
        stale_token = oauth_auth.access_token

        response = _execute(oauth_auth, http_client)

        assert response.json() == {"ok": True}
        assert token_route.call_count == 1
        assert oauth_auth.access_token != stale_token
        assert api_route.calls[0].request.headers["Authorization"] == "Bearer stale_access_token"
        assert api_route.calls[1].request.headers["Authorization"] == "Bearer fresh_access_token"
