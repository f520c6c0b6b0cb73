"""TikTok Business API adapter.

TikTok answers most failures with HTTP 200 and a non-zero ``code`` in the
body, so success is decided from the payload, not the status line.
"""

from typing import Any, Dict, Optional

import httpx

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.errors.platforms import TikTokApiError
from adbridge.core.integrations.adapters.base import AdapterConfig, header_auth_updater
from adbridge.core.integrations.adapters.shared import (
    coerce_int,
    parse_retry_after_ms,
    text_message,
)

PLATFORM_ID = "tiktok"
TIKTOK_API_VERSION = "v1.3"
TIKTOK_API_BASE = "https://business-api.tiktok.com/open_api"
ACCESS_TOKEN_HEADER = "Access-Token"

tiktok_auth_header = header_auth_updater(ACCESS_TOKEN_HEADER)


def tiktok_is_success(response: httpx.Response, payload: Any) -> bool:
    """2xx with a ``code`` that is absent or 0."""
    if not response.is_success:
        return False
    if isinstance(payload, dict):
        code = payload.get("code")
        return code is None or coerce_int(code) == 0
    return True


def parse_tiktok_error(response: httpx.Response, payload: Any) -> TikTokApiError:
    body: Dict[str, Any] = payload if isinstance(payload, dict) else {}
    return TikTokApiError(
        body.get("message")
        or text_message(payload, f"TikTok API error ({response.status_code})"),
        http_status=response.status_code,
        code=coerce_int(body.get("code")),
        request_id=body.get("request_id"),
        retry_after_ms=parse_retry_after_ms(response),
        payload=payload,
    )


def build_tiktok_adapter(
    *,
    access_token: Optional[str] = None,
    api_version: str = TIKTOK_API_VERSION,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> AdapterConfig:
    """Build the TikTok adapter.

    Args:
        access_token: Sent in the ``Access-Token`` header
        api_version: API version path segment
        retry_config: Retry policy
    """
    headers: Dict[str, str] = {}
    if access_token:
        headers = tiktok_auth_header(headers, access_token)
    return AdapterConfig(
        platform_id=PLATFORM_ID,
        base_url=f"{TIKTOK_API_BASE}/{api_version}",
        parse_error=parse_tiktok_error,
        default_headers=headers,
        retry_config=retry_config,
        is_success=tiktok_is_success,
        update_auth_header=tiktok_auth_header,
    )
