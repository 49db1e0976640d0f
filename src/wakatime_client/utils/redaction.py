"""Helpers for keeping credentials out of log output."""

from collections.abc import Mapping

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie"}


def redact_value(text: str) -> str:
    """Redact a secret, keeping the first 4 and last 4 characters.

    Args:
        text: Value that may contain a secret.

    Returns:
        Redacted value.
    """
    if len(text) <= 8:
        return "****"

    return f"{text[:4]}...{text[-4:]}"


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Redact sensitive headers like Authorization.

    Args:
        headers: Original headers mapping.

    Returns:
        Dictionary with sensitive values redacted.
    """
    redacted = {}

    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = redact_value(value)
        else:
            redacted[key] = value

    return redacted
