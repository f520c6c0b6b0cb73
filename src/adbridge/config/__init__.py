"""Configuration for adbridge integrations."""

from adbridge.config.loader import (
    DEFAULT_REQUEST_TIMEOUT,
    IntegrationSettings,
    load_settings,
)
from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig

__all__ = [
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_RETRY_CONFIG",
    "IntegrationSettings",
    "RetryConfig",
    "load_settings",
]
