"""Local redirect listener for the interactive authorization-code flow."""

import logging
import time
import webbrowser
from collections.abc import Callable
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread
from typing import Any
from urllib.parse import parse_qs, urlparse

from wakatime_client.auth.oauth import AccessTokenAuth, generate_state
from wakatime_client.exceptions import AuthError

logger = logging.getLogger(__name__)


class CallbackServer(HTTPServer):
    """Single-request server that records what the OAuth redirect carried."""

    def __init__(self, address: tuple[str, int], callback_path: str) -> None:
        super().__init__(address, AuthorizationCallbackHandler)
        self.callback_path = callback_path
        self.authorization_code: str | None = None
        self.state: str | None = None
        self.error: str | None = None


class AuthorizationCallbackHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the OAuth redirect."""

    server: CallbackServer

    def do_GET(self) -> None:
        parsed_path = urlparse(self.path)
        if parsed_path.path != self.server.callback_path:
            self.send_response(404)
            self.end_headers()
            return

        query_params = parse_qs(parsed_path.query)
        self.server.state = query_params.get("state", [None])[0]

        if "error" in query_params:
            self.server.error = query_params["error"][0]
            self._respond(
                400,
                b"<html><body><h1>Authorization Error</h1>"
                b"<p>WakaTime did not authorize the application. You can close this window.</p>"
                b"</body></html>",
            )
            return

        if "code" in query_params:
            self.server.authorization_code = query_params["code"][0]
            self._respond(
                200,
                b"<html><body><h1>Authorization Successful</h1>"
                b"<p>You can close this window and return to the terminal.</p>"
                b"</body></html>",
            )
            return

        self.send_response(400)
        self.end_headers()

    def _respond(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-type", "text/html")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(format % args)


def _serve_until_redirect(server: CallbackServer, deadline: float) -> None:
    """Handle requests until the redirect arrives or the deadline passes."""
    while server.authorization_code is None and server.error is None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return
        server.timeout = remaining
        server.handle_request()


def run_authorization_flow(
    auth: AccessTokenAuth,
    open_browser: bool = True,
    timeout: float = 300,
    on_url: Callable[[str], None] | None = None,
) -> str:
    """Authorize in the browser, wait for the redirect and exchange the code.

    The redirect URI of ``auth`` must point at this machine, for example
    ``http://localhost:8000/callback``.

    Args:
        auth: OAuth credential to populate.
        open_browser: Open the authorization URL automatically.
        timeout: Seconds to wait for the redirect.
        on_url: Receives the authorization URL, e.g. to print it.

    Returns:
        The new access token.

    Raises:
        AuthError: If authorization is denied, times out, or the state does not match.
    """
    parsed_uri = urlparse(auth.redirect_uri)
    host = parsed_uri.hostname or "localhost"
    port = parsed_uri.port or 8000

    state = generate_state()
    server = CallbackServer((host, port), parsed_uri.path or "/")
    server_thread = Thread(
        target=_serve_until_redirect,
        args=(server, time.monotonic() + timeout),
        daemon=True,
    )
    server_thread.start()

    auth_url = auth.get_authorization_url(state)
    logger.info(f"Authorization URL: {auth_url}")
    if on_url is not None:
        on_url(auth_url)
    if open_browser:
        webbrowser.open(auth_url)

    logger.info("Waiting for authorization callback...")
    server_thread.join(timeout=timeout + 1)
    server.server_close()

    if server.error:
        raise AuthError(f"Authorization failed: {server.error}")

    if not server.authorization_code:
        raise AuthError("Authorization timeout or no authorization code received")

    if server.state != state:
        raise AuthError("Authorization state mismatch; the redirect was not issued for this request")

    return auth.exchange_code(server.authorization_code)
