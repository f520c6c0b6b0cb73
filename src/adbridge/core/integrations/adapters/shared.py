"""Shared utilities for platform adapters.

Response-reading helpers used by the executor and by every platform's
error parser.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

PARSE_FAILURE_PAYLOAD = {"error": "Failed to parse response"}


def parse_retry_after_ms(response: httpx.Response) -> Optional[float]:
    """Parse the ``Retry-After`` header from an HTTP response.

    Handles numeric (integer or float) second values only. RFC 7231
    date-based values are not supported and return ``None``.

    Args:
        response: An httpx Response object.

    Returns:
        Milliseconds to wait before retrying, or ``None`` if the header is
        missing, unparseable or not positive.
    """
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            seconds = float(retry_after)
        except ValueError:
            return None
        if seconds > 0:
            return seconds * 1000.0
    return None


def is_json_response(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    return "json" in content_type.lower()


def read_payload(response: httpx.Response) -> Any:
    """Decode a response body: JSON when the content type says so, else text.

    A body that claims to be JSON but does not parse yields
    ``{"error": "Failed to parse response"}`` rather than raising.
    """
    if is_json_response(response):
        try:
            return response.json()
        except ValueError:
            logger.debug("Unparseable JSON body (status %s)", response.status_code)
            return dict(PARSE_FAILURE_PAYLOAD)
    return response.text


def error_object(payload: Any, key: str = "error") -> dict:
    """Return ``payload[key]`` when it is a dict, else an empty dict."""
    if isinstance(payload, dict):
        value = payload.get(key)
        if isinstance(value, dict):
            return value
    return {}


def coerce_int(value: Any) -> Optional[int]:
    """Best-effort int conversion for vendor codes that arrive as strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def text_message(payload: Any, fallback: str) -> str:
    """Use a non-empty string payload as the message, else *fallback*."""
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return fallback
