"""Error-to-response mapping.

Converts a terminal integration error into a plain dict a route handler can
render, so no caller has to re-derive an HTTP status from vendor details.

Usage:
    from adbridge.core.errors.base import error_to_response

    try:
        result = await client.get("/campaigns", operation="list_campaigns")
    except Exception as e:
        response = error_to_response(e)
        if response is not None:
            return response
        raise  # Unknown error, re-raise
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

import httpx

from adbridge.core.errors.integration import ClassifiedError, ErrorType, TokenRefreshError
from adbridge.core.errors.resilience import TimeBudgetExceededError
from adbridge.core.observability.redaction import redact_secrets


class ErrorCode(str, Enum):
    """Machine-readable codes for rendered error responses."""

    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNAVAILABLE = "UNAVAILABLE"
    INVALID_REQUEST = "INVALID_REQUEST"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"


CLASSIFIED_MAPPINGS: Dict[ErrorType, Tuple[ErrorCode, int]] = {
    ErrorType.AUTHENTICATION: (ErrorCode.UNAUTHORIZED, 401),
    ErrorType.RATE_LIMIT: (ErrorCode.RATE_LIMIT_EXCEEDED, 429),
    ErrorType.SERVER_ERROR: (ErrorCode.UNAVAILABLE, 503),
    ErrorType.INVALID_REQUEST: (ErrorCode.INVALID_REQUEST, 400),
}

# Looked up along the exception's MRO, so httpx subclasses resolve too.
ERROR_MAPPINGS: Dict[Type[Exception], Tuple[ErrorCode, int]] = {
    TimeBudgetExceededError: (ErrorCode.TIMEOUT, 504),
    TokenRefreshError: (ErrorCode.UNAUTHORIZED, 401),
    httpx.TransportError: (ErrorCode.NETWORK_ERROR, 502),
}


def _classified_response(exc: ClassifiedError) -> Dict[str, Any]:
    code, status = CLASSIFIED_MAPPINGS[exc.error_type]
    if exc.error_type is ErrorType.INVALID_REQUEST:
        if exc.http_status is not None and 400 <= exc.http_status < 500:
            status = exc.http_status
        else:
            # e.g. a TikTok failure delivered with HTTP 200
            code, status = ErrorCode.UPSTREAM_ERROR, 502
    return {
        "status": status,
        "code": code.value,
        "message": redact_secrets(exc.message),
        "details": exc.to_dict(),
    }


def _lookup(exc: Exception) -> Optional[Tuple[ErrorCode, int]]:
    for cls in type(exc).__mro__:
        mapping = ERROR_MAPPINGS.get(cls)
        if mapping is not None:
            return mapping
    return None


def error_to_response(exc: Exception) -> Optional[dict]:
    """Convert a known exception to an error response dict, or None if unknown.

    Args:
        exc: The exception to convert.

    Returns:
        ``{"status", "code", "message", "details"}`` or None when the
        exception type is not an integration error.
    """
    if isinstance(exc, ClassifiedError):
        return _classified_response(exc)

    mapping = _lookup(exc)
    if mapping is None:
        return None
    code, status = mapping

    details: Dict[str, Any] = {"error_class": type(exc).__name__}
    if isinstance(exc, TimeBudgetExceededError):
        details.update(
            operation=exc.operation,
            budget_seconds=exc.budget_seconds,
            elapsed_seconds=exc.elapsed_seconds,
        )
    elif isinstance(exc, TokenRefreshError):
        details.update(provider_id=exc.provider_id, is_retryable=exc.is_retryable)
        if exc.is_retryable:
            code, status = ErrorCode.UNAVAILABLE, 503

    return {
        "status": status,
        "code": code.value,
        "message": redact_secrets(str(exc)),
        "details": details,
    }
