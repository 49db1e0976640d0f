"""Utility modules for the WakaTime client."""

from wakatime_client.utils.logging import get_logger, setup_logging
from wakatime_client.utils.parser import JSONObject, JSONValue, parse_json, parse_url_encoded
from wakatime_client.utils.redaction import redact_headers
from wakatime_client.utils.storage import StorageManager

__all__ = [
    "JSONObject",
    "JSONValue",
    "StorageManager",
    "get_logger",
    "parse_json",
    "parse_url_encoded",
    "redact_headers",
    "setup_logging",
]
