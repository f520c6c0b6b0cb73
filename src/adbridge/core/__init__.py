"""Core integration operations for adbridge."""

from adbridge.core.errors import ClassifiedError, error_to_response
from adbridge.core.integrations import (
    IntegrationApiClient,
    RequestDescriptor,
    create_client,
    execute_request,
)

__all__ = [
    "ClassifiedError",
    "IntegrationApiClient",
    "RequestDescriptor",
    "create_client",
    "error_to_response",
    "execute_request",
]
