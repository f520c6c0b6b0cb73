"""Resilient request execution for ad-platform integrations.

Centralized resilience utilities for platform clients including:
- Backoff calculation with jitter and server delay hints
- The attempt loop with auth refresh and rate-limit handling
- Per-attempt log records and the observer port that receives them
"""

from adbridge.core.integrations.resilience.backoff import (
    calculate_backoff_delay,
    is_retryable_status,
    sleep_ms,
)
from adbridge.core.integrations.resilience.execution import execute_request
from adbridge.core.integrations.resilience.models import (
    AuthErrorHook,
    AuthRefreshResult,
    RateLimitHook,
    RequestBody,
    RequestDescriptor,
    RequestLogRecord,
    RequestResult,
    SleepFunc,
)
from adbridge.core.integrations.resilience.observer import (
    INTEGRATIONS_LOGGER_NAME,
    LoggingRequestObserver,
    RequestObserver,
)

__all__ = [
    # Models & protocols
    "AuthErrorHook",
    "AuthRefreshResult",
    "RateLimitHook",
    "RequestBody",
    "RequestDescriptor",
    "RequestLogRecord",
    "RequestResult",
    "SleepFunc",
    # Backoff
    "calculate_backoff_delay",
    "is_retryable_status",
    "sleep_ms",
    # Execution
    "execute_request",
    # Observer
    "INTEGRATIONS_LOGGER_NAME",
    "LoggingRequestObserver",
    "RequestObserver",
]
