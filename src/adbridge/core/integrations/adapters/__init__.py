"""Platform adapters for the request executor.

Usage:
    from adbridge.core.integrations.adapters import get_adapter

    adapter = get_adapter("google", developer_token="...", access_token="...")
"""

from typing import Any, Callable, Dict

from adbridge.core.integrations.adapters.base import (
    AdapterConfig,
    AuthHeaderUpdater,
    AuthUrlUpdater,
    ErrorParser,
    SuccessPredicate,
    bearer_auth_header,
    default_is_success,
    header_auth_updater,
    replace_token_params,
)
from adbridge.core.integrations.adapters.google import build_google_adapter
from adbridge.core.integrations.adapters.linkedin import build_linkedin_adapter
from adbridge.core.integrations.adapters.meta import (
    append_meta_auth_params,
    build_meta_adapter,
    compute_appsecret_proof,
)
from adbridge.core.integrations.adapters.tiktok import build_tiktok_adapter

ADAPTER_BUILDERS: Dict[str, Callable[..., AdapterConfig]] = {
    "meta": build_meta_adapter,
    "google": build_google_adapter,
    "linkedin": build_linkedin_adapter,
    "tiktok": build_tiktok_adapter,
}


def get_adapter(platform_id: str, **kwargs: Any) -> AdapterConfig:
    """Build the adapter registered under *platform_id*.

    Raises:
        ValueError: If the platform id is unknown.
    """
    builder = ADAPTER_BUILDERS.get(platform_id)
    if builder is None:
        raise ValueError(
            f"Unknown platform: {platform_id!r} "
            f"(expected one of {', '.join(sorted(ADAPTER_BUILDERS))})"
        )
    return builder(**kwargs)


__all__ = [
    "ADAPTER_BUILDERS",
    "AdapterConfig",
    "AuthHeaderUpdater",
    "AuthUrlUpdater",
    "ErrorParser",
    "SuccessPredicate",
    "append_meta_auth_params",
    "bearer_auth_header",
    "build_google_adapter",
    "build_linkedin_adapter",
    "build_meta_adapter",
    "build_tiktok_adapter",
    "compute_appsecret_proof",
    "default_is_success",
    "get_adapter",
    "header_auth_updater",
    "replace_token_params",
]
