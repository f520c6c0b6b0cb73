"""Google Ads API adapter."""

import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.errors.platforms import GoogleAdsApiError
from adbridge.core.integrations.adapters.base import AdapterConfig, bearer_auth_header
from adbridge.core.integrations.adapters.shared import (
    coerce_int,
    error_object,
    parse_retry_after_ms,
    text_message,
)

PLATFORM_ID = "google"
GOOGLE_ADS_API_VERSION = "v18"
GOOGLE_ADS_BASE = "https://googleads.googleapis.com"

_RETRY_DELAY_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)s\s*$")


def parse_retry_delay_ms(value: Any) -> Optional[float]:
    """Convert a protobuf duration string such as ``"30s"`` to milliseconds."""
    if not isinstance(value, str):
        return None
    match = _RETRY_DELAY_RE.match(value)
    if not match:
        return None
    seconds = float(match.group(1))
    return seconds * 1000.0 if seconds > 0 else None


def _scan_details(
    details: List[Any],
) -> Tuple[Optional[str], Optional[str], Optional[float], List[Dict[str, Any]]]:
    """Pull the first error code, request id and retry delay out of ``error.details``."""
    error_code: Optional[str] = None
    request_id: Optional[str] = None
    retry_delay_ms: Optional[float] = None
    errors: List[Dict[str, Any]] = []

    for detail in details:
        if not isinstance(detail, dict):
            continue
        if detail.get("requestId"):
            request_id = detail["requestId"]
        if retry_delay_ms is None:
            retry_delay_ms = parse_retry_delay_ms(detail.get("retryDelay"))
        for err in detail.get("errors") or []:
            if not isinstance(err, dict):
                continue
            errors.append(err)
            code_map = err.get("errorCode")
            if error_code is None and isinstance(code_map, dict):
                # {"quotaError": "RESOURCE_EXHAUSTED"}: the enum value is what we match on
                for value in code_map.values():
                    if isinstance(value, str):
                        error_code = value
                        break
    return error_code, request_id, retry_delay_ms, errors


def parse_google_error(response: httpx.Response, payload: Any) -> GoogleAdsApiError:
    # searchStream wraps responses in a list
    if isinstance(payload, list) and payload:
        payload = payload[0]
    error = error_object(payload)
    details = error.get("details")
    error_code, request_id, retry_delay_ms, errors = _scan_details(
        details if isinstance(details, list) else []
    )
    retry_after_ms = parse_retry_after_ms(response)
    if retry_after_ms is None:
        retry_after_ms = retry_delay_ms
    return GoogleAdsApiError(
        error.get("message")
        or text_message(payload, f"Google Ads API error ({response.status_code})"),
        http_status=coerce_int(error.get("code")) or response.status_code,
        grpc_status=error.get("status"),
        google_error_code=error_code,
        request_id=request_id or response.headers.get("request-id"),
        error_details=errors,
        retry_after_ms=retry_after_ms,
        payload=payload,
    )


def build_google_adapter(
    *,
    developer_token: str,
    access_token: Optional[str] = None,
    login_customer_id: Optional[str] = None,
    api_version: str = GOOGLE_ADS_API_VERSION,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> AdapterConfig:
    """Build the Google Ads adapter.

    Args:
        developer_token: Google Ads developer token (``developer-token`` header)
        access_token: OAuth access token for the Bearer header
        login_customer_id: Manager account id for ``login-customer-id``
        api_version: API version path segment
        retry_config: Retry policy
    """
    headers: Dict[str, str] = {"developer-token": developer_token}
    if login_customer_id:
        headers["login-customer-id"] = login_customer_id.replace("-", "")
    if access_token:
        headers = bearer_auth_header(headers, access_token)
    return AdapterConfig(
        platform_id=PLATFORM_ID,
        base_url=f"{GOOGLE_ADS_BASE}/{api_version}",
        parse_error=parse_google_error,
        default_headers=headers,
        retry_config=retry_config,
    )
