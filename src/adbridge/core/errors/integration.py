"""Classified integration errors.

Every platform adapter turns a failed response into a ClassifiedError so
callers can branch on ``is_auth_error`` / ``is_rate_limit_error`` /
``is_retryable`` instead of matching on vendor message strings.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from adbridge.core.observability.redaction import redact_secrets

ProviderErrorCode = Union[int, str]


class ErrorType(str, Enum):
    """Normalized category of a classified error."""

    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    INVALID_REQUEST = "invalid_request"


def is_retryable_status(status: Optional[int]) -> bool:
    """Return True for HTTP statuses that are retryable on their own (429, 5xx)."""
    if status is None:
        return False
    return status == 429 or 500 <= status < 600


class ClassifiedError(Exception):
    """Normalized error produced from a failed platform response.

    Flags passed explicitly override the ones derived from ``http_status``,
    but classification priority is always enforced afterwards: an auth
    error is never a rate-limit error and never retryable; a rate-limit
    error is always retryable.

    Attributes:
        message: Provider message, surfaced verbatim
        platform: Platform id of the adapter that classified the response
        http_status: HTTP status of the failed response
        provider_error_code: Vendor error code (numeric or symbolic)
        request_id: Vendor request/trace id, when the response carries one
        is_retryable: Whether waiting and retrying can succeed
        is_auth_error: Whether the credential was rejected
        is_rate_limit_error: Whether the platform throttled the call
        retry_after_ms: Server-supplied delay hint in milliseconds
        payload: Parsed response body
    """

    def __init__(
        self,
        message: str,
        *,
        platform: str,
        http_status: Optional[int] = None,
        provider_error_code: Optional[ProviderErrorCode] = None,
        request_id: Optional[str] = None,
        is_retryable: Optional[bool] = None,
        is_auth_error: Optional[bool] = None,
        is_rate_limit_error: Optional[bool] = None,
        retry_after_ms: Optional[float] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.platform = platform
        self.http_status = http_status
        self.provider_error_code = provider_error_code
        self.request_id = request_id
        self.retry_after_ms = retry_after_ms
        self.payload = payload

        if is_auth_error is None:
            is_auth_error = http_status in (401, 403)
        if is_rate_limit_error is None:
            is_rate_limit_error = http_status == 429
        if is_retryable is None:
            is_retryable = is_retryable_status(http_status)

        if is_auth_error:
            is_rate_limit_error = False
            is_retryable = False
        elif is_rate_limit_error:
            is_retryable = True

        self.is_auth_error = is_auth_error
        self.is_rate_limit_error = is_rate_limit_error
        self.is_retryable = is_retryable

    @property
    def error_type(self) -> ErrorType:
        if self.is_auth_error:
            return ErrorType.AUTHENTICATION
        if self.is_rate_limit_error:
            return ErrorType.RATE_LIMIT
        if self.is_retryable:
            return ErrorType.SERVER_ERROR
        return ErrorType.INVALID_REQUEST

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for log records and error responses (payload excluded)."""
        result: Dict[str, Any] = {
            "name": type(self).__name__,
            "message": redact_secrets(self.message),
            "platform": self.platform,
            "error_type": self.error_type.value,
            "http_status": self.http_status,
            "is_retryable": self.is_retryable,
            "is_auth_error": self.is_auth_error,
            "is_rate_limit_error": self.is_rate_limit_error,
        }
        if self.provider_error_code is not None:
            result["provider_error_code"] = self.provider_error_code
        if self.request_id:
            result["request_id"] = self.request_id
        if self.retry_after_ms is not None:
            result["retry_after_ms"] = self.retry_after_ms
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(platform={self.platform!r}, "
            f"http_status={self.http_status!r}, "
            f"error_type={self.error_type.value!r}, message={self.message!r})"
        )


class TokenRefreshError(Exception):
    """Raised by a token refresher when a credential cannot be renewed.

    Attributes:
        provider_id: Platform whose credential failed to refresh
        is_retryable: Whether a later refresh may succeed (e.g. refresh endpoint 5xx)
        http_status: Status returned by the token endpoint, if any
    """

    def __init__(
        self,
        message: str,
        *,
        provider_id: str,
        is_retryable: bool = False,
        http_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider_id = provider_id
        self.is_retryable = is_retryable
        self.http_status = http_status
