"""Sends authorized requests and turns responses into results or errors."""

import logging

import httpx

from wakatime_client.auth.base import BaseAuth
from wakatime_client.exceptions import ApiError, ErrorKind, NetworkError
from wakatime_client.utils.redaction import redact_headers

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({200, 201, 202})


class RequestDispatcher:
    """Attaches credentials to requests and applies the 401 refresh policy.

    A call makes at most two round trips: when the first answer is 401 the
    credential is refreshed once and the request is sent again. The second
    answer is final whatever its status.
    """

    def __init__(self, auth: BaseAuth, client: httpx.Client) -> None:
        """Initialize dispatcher.

        Args:
            auth: Credential that supplies the Authorization header.
            client: HTTP client used to send requests.
        """
        self.auth = auth
        self.client = client

    def execute(self, request: httpx.Request) -> httpx.Response:
        """Send a request and return the response if it succeeded.

        Args:
            request: Request to send. Its Authorization header is overwritten.

        Returns:
            Response with status 200, 201 or 202, body untouched.

        Raises:
            NetworkError: If no response was received.
            AuthError: If the credential has no token or cannot be refreshed.
            ApiError: If the final status is not a success.
        """
        header = self.auth.get_header()
        request.headers["Authorization"] = header
        response = self._send(request)

        if response.status_code == 401:
            logger.info("Received 401, refreshing credentials and retrying once")
            self.auth.refresh(header)
            request.headers["Authorization"] = self.auth.get_header()
            response = self._send(request)

        return self._check_status(response)

    def _send(self, request: httpx.Request) -> httpx.Response:
        logger.debug(
            f"{request.method} {request.url} headers={redact_headers(request.headers)}"
        )
        try:
            response = self.client.send(request)
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {request.url} failed: {e}") from e

        logger.debug(f"{request.method} {request.url} -> {response.status_code}")
        return response

    @staticmethod
    def _check_status(response: httpx.Response) -> httpx.Response:
        if response.status_code in SUCCESS_STATUSES:
            return response

        kind = ErrorKind.from_status(response.status_code)
        logger.warning(
            f"WakaTime API returned {response.status_code} for {response.request.url}"
        )
        raise ApiError(kind, response.status_code, response.text)
