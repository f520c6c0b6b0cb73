"""Ad-platform integrations: adapters, the resilient executor and clients."""

from adbridge.core.integrations.adapters import AdapterConfig, get_adapter
from adbridge.core.integrations.client import IntegrationApiClient, create_client
from adbridge.core.integrations.resilience import (
    AuthRefreshResult,
    RequestDescriptor,
    RequestLogRecord,
    RequestResult,
    calculate_backoff_delay,
    execute_request,
)
from adbridge.core.integrations.token_refresh import (
    AuthRefreshCoordinator,
    compute_expiry,
    is_token_expiring_soon,
)

__all__ = [
    "AdapterConfig",
    "AuthRefreshCoordinator",
    "AuthRefreshResult",
    "IntegrationApiClient",
    "RequestDescriptor",
    "RequestLogRecord",
    "RequestResult",
    "calculate_backoff_delay",
    "compute_expiry",
    "create_client",
    "execute_request",
    "get_adapter",
    "is_token_expiring_soon",
]
