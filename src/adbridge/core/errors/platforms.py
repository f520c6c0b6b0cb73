"""Platform-specific classified errors.

Each subclass knows its vendor's error-code vocabulary and derives the
normalized auth / rate-limit / retryable flags from it. Adapters only
extract fields from the response and construct the right subclass.
"""

from typing import Any, Dict, List, Optional

from adbridge.core.errors.integration import ClassifiedError, is_retryable_status

# Graph API codes
META_AUTH_CODES = frozenset({190, 102, 463, 464, 2500})
META_RATE_LIMIT_CODES = frozenset(
    {4, 17, 32, 613, 80000, 80001, 80002, 80003, 80004, 80005, 80006, 80008, 80009, 80014}
)
META_TRANSIENT_CODES = frozenset({1, 2, 2601})

GOOGLE_AUTH_STATUSES = frozenset({"UNAUTHENTICATED"})
GOOGLE_RATE_LIMIT_STATUSES = frozenset({"RESOURCE_EXHAUSTED"})
GOOGLE_RETRYABLE_STATUSES = frozenset({"UNAVAILABLE", "INTERNAL", "DEADLINE_EXCEEDED"})
GOOGLE_AUTH_ERROR_CODES = frozenset(
    {
        "AUTHENTICATION_ERROR",
        "AUTHORIZATION_ERROR",
        "OAUTH_TOKEN_INVALID",
        "OAUTH_TOKEN_EXPIRED",
        "OAUTH_TOKEN_REVOKED",
        "USER_PERMISSION_DENIED",
    }
)
GOOGLE_RATE_LIMIT_ERROR_CODES = frozenset(
    {
        "RATE_EXCEEDED",
        "RESOURCE_EXHAUSTED",
        "RESOURCE_TEMPORARILY_EXHAUSTED",
        "QUOTA_ERROR",
        "RATE_LIMIT_ERROR",
    }
)
GOOGLE_RETRYABLE_ERROR_CODES = frozenset({"INTERNAL_ERROR", "TRANSIENT_ERROR"})

LINKEDIN_AUTH_CODES = frozenset(
    {"EXPIRED_ACCESS_TOKEN", "INVALID_ACCESS_TOKEN", "REVOKED_ACCESS_TOKEN", "UNAUTHORIZED"}
)
LINKEDIN_RATE_LIMIT_CODES = frozenset({"TOO_MANY_REQUESTS"})

# 40100 is documented both as PERMISSION_DENIED and RATE_LIMIT_EXCEEDED;
# TikTok returns it for throttling in practice.
TIKTOK_AUTH_CODES = frozenset({40001, 40002, 40003, 40004})
TIKTOK_RATE_LIMIT_CODES = frozenset({40100, 40101, 40102})
TIKTOK_SERVER_CODES = frozenset({50000, 50300, 50400})


class MetaApiError(ClassifiedError):
    """Graph API error.

    Attributes:
        code: Graph API ``error.code``
        subcode: Graph API ``error.error_subcode``
        error_type_name: Graph API ``error.type`` (e.g. ``OAuthException``)
        fbtrace_id: Meta trace id, stored as ``request_id`` too
        is_transient: Graph API ``error.is_transient``
    """

    def __init__(
        self,
        message: str,
        *,
        http_status: int,
        code: Optional[int] = None,
        subcode: Optional[int] = None,
        error_type_name: Optional[str] = None,
        fbtrace_id: Optional[str] = None,
        is_transient: bool = False,
        retry_after_ms: Optional[float] = None,
        payload: Any = None,
    ):
        self.code = code
        self.subcode = subcode
        self.error_type_name = error_type_name
        self.fbtrace_id = fbtrace_id
        self.is_transient = is_transient
        super().__init__(
            message,
            platform="meta",
            http_status=http_status,
            provider_error_code=code,
            request_id=fbtrace_id,
            is_auth_error=http_status in (401, 403) or code in META_AUTH_CODES,
            is_rate_limit_error=http_status == 429 or code in META_RATE_LIMIT_CODES,
            is_retryable=(
                is_retryable_status(http_status)
                or code in META_TRANSIENT_CODES
                or is_transient
            ),
            retry_after_ms=retry_after_ms,
            payload=payload,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.subcode is not None:
            result["subcode"] = self.subcode
        if self.error_type_name:
            result["meta_error_type"] = self.error_type_name
        return result


class GoogleAdsApiError(ClassifiedError):
    """Google Ads API error.

    Attributes:
        grpc_status: ``error.status`` (e.g. ``RESOURCE_EXHAUSTED``)
        google_error_code: First enum value found in ``details[].errors[].errorCode``
        error_details: Raw ``error.details`` list
    """

    def __init__(
        self,
        message: str,
        *,
        http_status: int,
        grpc_status: Optional[str] = None,
        google_error_code: Optional[str] = None,
        request_id: Optional[str] = None,
        error_details: Optional[List[Dict[str, Any]]] = None,
        retry_after_ms: Optional[float] = None,
        payload: Any = None,
    ):
        self.grpc_status = grpc_status
        self.google_error_code = google_error_code
        self.error_details = error_details or []
        super().__init__(
            message,
            platform="google",
            http_status=http_status,
            provider_error_code=google_error_code or grpc_status,
            request_id=request_id,
            is_auth_error=(
                http_status in (401, 403)
                or grpc_status in GOOGLE_AUTH_STATUSES
                or google_error_code in GOOGLE_AUTH_ERROR_CODES
            ),
            is_rate_limit_error=(
                http_status == 429
                or grpc_status in GOOGLE_RATE_LIMIT_STATUSES
                or google_error_code in GOOGLE_RATE_LIMIT_ERROR_CODES
            ),
            is_retryable=(
                is_retryable_status(http_status)
                or grpc_status in GOOGLE_RETRYABLE_STATUSES
                or google_error_code in GOOGLE_RETRYABLE_ERROR_CODES
            ),
            retry_after_ms=retry_after_ms,
            payload=payload,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.grpc_status:
            result["grpc_status"] = self.grpc_status
        return result


class LinkedInApiError(ClassifiedError):
    """LinkedIn Marketing API error.

    Attributes:
        code: Symbolic ``code`` field (e.g. ``EXPIRED_ACCESS_TOKEN``)
        service_error_code: Numeric ``serviceErrorCode``
    """

    def __init__(
        self,
        message: str,
        *,
        http_status: int,
        code: Optional[str] = None,
        service_error_code: Optional[int] = None,
        request_id: Optional[str] = None,
        retry_after_ms: Optional[float] = None,
        payload: Any = None,
    ):
        self.code = code
        self.service_error_code = service_error_code
        super().__init__(
            message,
            platform="linkedin",
            http_status=http_status,
            provider_error_code=code if code is not None else service_error_code,
            request_id=request_id,
            is_auth_error=http_status in (401, 403) or code in LINKEDIN_AUTH_CODES,
            is_rate_limit_error=http_status == 429 or code in LINKEDIN_RATE_LIMIT_CODES,
            is_retryable=is_retryable_status(http_status),
            retry_after_ms=retry_after_ms,
            payload=payload,
        )


class TikTokApiError(ClassifiedError):
    """TikTok Business API error.

    TikTok reports most failures with HTTP 200 and a non-zero ``code``.

    Attributes:
        code: Numeric payload ``code``
    """

    def __init__(
        self,
        message: str,
        *,
        http_status: int,
        code: Optional[int] = None,
        request_id: Optional[str] = None,
        retry_after_ms: Optional[float] = None,
        payload: Any = None,
    ):
        self.code = code
        super().__init__(
            message,
            platform="tiktok",
            http_status=http_status,
            provider_error_code=code,
            request_id=request_id,
            is_auth_error=http_status in (401, 403) or code in TIKTOK_AUTH_CODES,
            is_rate_limit_error=http_status == 429 or code in TIKTOK_RATE_LIMIT_CODES,
            is_retryable=is_retryable_status(http_status) or code in TIKTOK_SERVER_CODES,
            retry_after_ms=retry_after_ms,
            payload=payload,
        )
