"""Credentials for the WakaTime API."""

from wakatime_client.auth.api_token import ApiTokenAuth
from wakatime_client.auth.base import BaseAuth
from wakatime_client.auth.oauth import AccessTokenAuth, OAuthToken, generate_state
from wakatime_client.auth.scopes import Scope, parse_scopes, scopes_to_string

__all__ = [
    "AccessTokenAuth",
    "ApiTokenAuth",
    "BaseAuth",
    "OAuthToken",
    "Scope",
    "generate_state",
    "parse_scopes",
    "scopes_to_string",
]
