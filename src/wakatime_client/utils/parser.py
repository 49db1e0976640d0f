"""Decoders for token endpoint and resource API response bodies."""

import json
from typing import Union
from urllib.parse import unquote_plus

from wakatime_client.exceptions import WakaTimeError

JSONValue = Union[str, int, float, bool, None, list["JSONValue"], dict[str, "JSONValue"]]
JSONObject = dict[str, JSONValue]


def parse_url_encoded(body: str) -> dict[str, str]:
    """Parse an application/x-www-form-urlencoded body.

    Pairs are split on ``&`` and then on the first ``=``; both halves are
    percent-decoded. A pair without ``=`` maps to an empty string.

    Args:
        body: Raw response body.

    Returns:
        Dictionary of decoded keys to decoded values.
    """
    result: dict[str, str] = {}
    for pair in body.strip().split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        result[unquote_plus(key)] = unquote_plus(value)
    return result


def parse_json(body: str) -> JSONValue:
    """Decode a JSON response body into plain nested Python containers.

    Args:
        body: Raw response body.

    Returns:
        Decoded value. An empty body decodes to an empty dict.

    Raises:
        WakaTimeError: If the body is not valid JSON.
    """
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise WakaTimeError(f"Invalid JSON in response body: {e}") from e
