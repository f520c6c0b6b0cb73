"""Credential redaction for log records and error messages.

Ad platforms carry credentials in three places: the query string (Meta's
``access_token`` and ``appsecret_proof``), standard ``Authorization``
headers, and custom headers (TikTok's ``Access-Token``). Nothing logged by
the executor may contain any of them.
"""

import re
from typing import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

REDACTED = "***"

_SENSITIVE_QUERY_PARAMS = frozenset({"access_token", "token", "appsecret_proof"})

# Headers that should never appear in logs/errors
_SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "access-token",
        "developer-token",
        "x-api-key",
        "cookie",
        "set-cookie",
        "proxy-authorization",
    }
)

# Regex to detect tokens embedded in free text
_SECRET_PATTERN = re.compile(
    r"(?i)"
    r"(?:"
    r"(?:access_token|token|bearer|authorization|secret|password|client_secret)"
    r"[\s:=]+"
    r")"
    r"['\"]?([^\s'\"&]{8,})['\"]?",
)


def _is_sensitive_param(name: str) -> bool:
    lowered = name.lower()
    return lowered in _SENSITIVE_QUERY_PARAMS or lowered.endswith("_token")


def redact_url(url: str) -> str:
    """Replace credential query parameter values with ``***``.

    The values of ``access_token``, ``token``, any ``*_token`` parameter
    and ``appsecret_proof`` are replaced; everything else is preserved.

    Args:
        url: Absolute or relative URL.

    Returns:
        The URL with credential values redacted.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    redacted = [
        (name, REDACTED if _is_sensitive_param(name) else value)
        for name, value in pairs
    ]
    query = urlencode(redacted, safe="*")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with sensitive values redacted.

    Args:
        headers: HTTP header mapping (case-insensitive keys).

    Returns:
        New dict with sensitive header values replaced by ``***``.
    """
    result: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in _SENSITIVE_HEADERS:
            result[key] = REDACTED
        else:
            result[key] = value
    return result


def redact_secrets(text: str) -> str:
    """Remove tokens and secrets from a text string.

    Scans for patterns like ``access_token=...``, ``Bearer ...`` and
    ``secret: ...`` and replaces the secret portion with ``***``.
    """
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        full = match.group(0)
        secret = match.group(1)
        return full.replace(secret, REDACTED)

    return _SECRET_PATTERN.sub(_replace, text)
