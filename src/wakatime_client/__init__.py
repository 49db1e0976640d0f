"""Python client for the WakaTime API."""

__version__ = "0.1.0"

from wakatime_client.auth import AccessTokenAuth, ApiTokenAuth, BaseAuth, Scope, generate_state
from wakatime_client.client import WakaTimeClient
from wakatime_client.dispatcher import RequestDispatcher
from wakatime_client.exceptions import (
    ApiError,
    AuthError,
    ErrorKind,
    NetworkError,
    WakaTimeError,
)

__all__ = [
    "__version__",
    "AccessTokenAuth",
    "ApiError",
    "ApiTokenAuth",
    "AuthError",
    "BaseAuth",
    "ErrorKind",
    "NetworkError",
    "RequestDispatcher",
    "Scope",
    "WakaTimeClient",
    "WakaTimeError",
    "generate_state",
]
