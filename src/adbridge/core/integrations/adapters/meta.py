"""Meta (Facebook) Graph API adapter.

Meta authenticates with a Bearer header and an ``access_token`` query
parameter, optionally signed with ``appsecret_proof`` (HMAC-SHA256 of the
token keyed by the app secret). Throttling details come either from
``Retry-After`` or from the ``X-Business-Use-Case-Usage`` header.
"""

import hashlib
import hmac
import json
import logging
from typing import Any, Dict, MutableMapping, Optional

import httpx

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.errors.platforms import MetaApiError
from adbridge.core.integrations.adapters.base import (
    AdapterConfig,
    bearer_auth_header,
    query_param_names,
    rewrite_query_values,
)
from adbridge.core.integrations.adapters.shared import (
    coerce_int,
    error_object,
    parse_retry_after_ms,
    text_message,
)

logger = logging.getLogger(__name__)

PLATFORM_ID = "meta"
META_API_VERSION = "v21.0"
META_GRAPH_BASE = "https://graph.facebook.com"
BUSINESS_USAGE_HEADER = "X-Business-Use-Case-Usage"


def compute_appsecret_proof(access_token: str, app_secret: str) -> str:
    """Return the hex HMAC-SHA256 of *access_token* keyed by *app_secret*."""
    return hmac.new(
        app_secret.encode("utf-8"), access_token.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def append_meta_auth_params(
    params: MutableMapping[str, Any],
    access_token: str,
    app_secret: Optional[str] = None,
) -> MutableMapping[str, Any]:
    """Add ``access_token`` (and ``appsecret_proof`` when a secret is given) to *params*."""
    params["access_token"] = access_token
    if app_secret:
        params["appsecret_proof"] = compute_appsecret_proof(access_token, app_secret)
    return params


def parse_business_usage_ms(response: httpx.Response) -> Optional[float]:
    """Read ``estimated_time_to_regain_access`` (minutes) from the usage header.

    The header maps business ids to lists of usage entries; the longest
    wait across all entries wins.
    """
    raw = response.headers.get(BUSINESS_USAGE_HEADER)
    if not raw:
        return None
    try:
        usage = json.loads(raw)
    except ValueError:
        logger.debug("Unparseable %s header", BUSINESS_USAGE_HEADER)
        return None
    if not isinstance(usage, dict):
        return None

    minutes = 0.0
    for entries in usage.values():
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            value = entry.get("estimated_time_to_regain_access")
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                minutes = max(minutes, float(value))
    if minutes <= 0:
        return None
    return minutes * 60_000.0


def parse_meta_error(response: httpx.Response, payload: Any) -> MetaApiError:
    error = error_object(payload)
    message = error.get("message") or text_message(
        payload, f"Meta API error ({response.status_code})"
    )
    retry_after_ms = parse_retry_after_ms(response)
    if retry_after_ms is None:
        retry_after_ms = parse_business_usage_ms(response)
    return MetaApiError(
        message,
        http_status=response.status_code,
        code=coerce_int(error.get("code")),
        subcode=coerce_int(error.get("error_subcode")),
        error_type_name=error.get("type"),
        fbtrace_id=error.get("fbtrace_id"),
        is_transient=error.get("is_transient") is True,
        retry_after_ms=retry_after_ms,
        payload=payload,
    )


def _meta_url_updater(app_secret: Optional[str]):
    def update(url: str, token: str) -> str:
        names = query_param_names(url)
        if "access_token" not in names:
            return url
        values = {"access_token": token}
        if app_secret and "appsecret_proof" in names:
            values["appsecret_proof"] = compute_appsecret_proof(token, app_secret)
        return rewrite_query_values(url, values)

    return update


def build_meta_adapter(
    *,
    access_token: Optional[str] = None,
    app_secret: Optional[str] = None,
    api_version: str = META_API_VERSION,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> AdapterConfig:
    """Build the Meta adapter.

    Args:
        access_token: Sent as a Bearer header on every call when given
        app_secret: Used to re-sign ``appsecret_proof`` after a refresh
        api_version: Graph API version path segment
        retry_config: Retry policy
    """
    headers: Dict[str, str] = {}
    if access_token:
        headers = bearer_auth_header(headers, access_token)
    return AdapterConfig(
        platform_id=PLATFORM_ID,
        base_url=f"{META_GRAPH_BASE}/{api_version}",
        parse_error=parse_meta_error,
        default_headers=headers,
        retry_config=retry_config,
        update_auth_header=bearer_auth_header,
        update_auth_in_url=_meta_url_updater(app_secret),
    )
