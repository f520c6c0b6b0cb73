"""Unified error hierarchy for adbridge.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from adbridge.core.errors import ClassifiedError, MetaApiError
    from adbridge.core.errors import error_to_response
"""

from adbridge.core.errors.base import ERROR_MAPPINGS, ErrorCode, error_to_response
from adbridge.core.errors.integration import (
    ClassifiedError,
    ErrorType,
    TokenRefreshError,
    is_retryable_status,
)
from adbridge.core.errors.platforms import (
    GoogleAdsApiError,
    LinkedInApiError,
    MetaApiError,
    TikTokApiError,
)
from adbridge.core.errors.resilience import TimeBudgetExceededError

__all__ = [
    # Base / Registry
    "ERROR_MAPPINGS",
    "ErrorCode",
    "error_to_response",
    # Classified errors
    "ClassifiedError",
    "ErrorType",
    "TokenRefreshError",
    "is_retryable_status",
    # Platform errors
    "GoogleAdsApiError",
    "LinkedInApiError",
    "MetaApiError",
    "TikTokApiError",
    # Resilience errors
    "TimeBudgetExceededError",
]
