"""LinkedIn Marketing API adapter."""

from typing import Any, Dict, Optional

import httpx

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.errors.platforms import LinkedInApiError
from adbridge.core.integrations.adapters.base import AdapterConfig, bearer_auth_header
from adbridge.core.integrations.adapters.shared import (
    coerce_int,
    parse_retry_after_ms,
    text_message,
)

PLATFORM_ID = "linkedin"
LINKEDIN_API_BASE = "https://api.linkedin.com/rest"
RESTLI_PROTOCOL_VERSION = "2.0.0"


def parse_linkedin_error(response: httpx.Response, payload: Any) -> LinkedInApiError:
    body: Dict[str, Any] = payload if isinstance(payload, dict) else {}
    code = body.get("code")
    return LinkedInApiError(
        body.get("message")
        or text_message(payload, f"LinkedIn API error ({response.status_code})"),
        http_status=response.status_code,
        code=code if isinstance(code, str) else None,
        service_error_code=coerce_int(body.get("serviceErrorCode")),
        request_id=response.headers.get("x-li-uuid"),
        retry_after_ms=parse_retry_after_ms(response),
        payload=payload,
    )


def build_linkedin_adapter(
    *,
    access_token: Optional[str] = None,
    linkedin_version: Optional[str] = None,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> AdapterConfig:
    """Build the LinkedIn adapter.

    Args:
        access_token: OAuth access token for the Bearer header
        linkedin_version: ``LinkedIn-Version`` header value (``YYYYMM``)
        retry_config: Retry policy
    """
    headers: Dict[str, str] = {"X-Restli-Protocol-Version": RESTLI_PROTOCOL_VERSION}
    if linkedin_version:
        headers["LinkedIn-Version"] = linkedin_version
    if access_token:
        headers = bearer_auth_header(headers, access_token)
    return AdapterConfig(
        platform_id=PLATFORM_ID,
        base_url=LINKEDIN_API_BASE,
        parse_error=parse_linkedin_error,
        default_headers=headers,
        retry_config=retry_config,
    )
