"""Helpers for inspecting transport responses."""

from __future__ import annotations

from urllib.parse import urlparse

from azure.core.exceptions import AzureError

NOT_FOUND = 404
ACCEPTED = 202


def is_error(response) -> bool:
    """True if the response carries an HTTP error status."""
    return response.status_code >= 400


def read_body(response) -> bytes:
    """Return the full response body, loading it if needed. A missing body reads as b""."""
    return response.read() or b""


def response_text(response) -> str:
    """Body decoded for error messages; "" if the stream can no longer be read."""
    try:
        return read_body(response).decode("utf-8", errors="replace")
    except AzureError:
        return ""


def parse_absolute_uri(value: object) -> str | None:
    """Return value if it is an absolute http(s) URI, else None."""
    if not isinstance(value, str):
        return None
    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        return None
    return value


def get_location(response) -> str | None:
    """Absolute URI from the Location header, or None if absent or relative."""
    return parse_absolute_uri(response.headers.get("Location"))


def parse_retry_after(response, default: float) -> float:
    """Seconds to wait from an integer Retry-After header.

    Args:
        response: The HTTP response object
        default: Delay used when the header is missing, negative or not an integer

    Returns:
        Number of seconds to wait before the next request
    """
    retry_after = response.headers.get("Retry-After")
    if not retry_after:
        return default
    try:
        seconds = int(retry_after.strip())
    except ValueError:
        return default
    if seconds < 0:
        return default
    return seconds
