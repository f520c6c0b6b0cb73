"""Audit logging for integration resilience events.

Provides structured audit logging with automatic correlation ID
population from request context.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from adbridge.core.context import get_correlation_id

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of audit events emitted by the request executor."""

    RETRY_ATTEMPT = "retry_attempt"
    RATE_LIMIT = "rate_limit"
    AUTH_REFRESH = "auth_refresh"
    AUTH_FAILURE = "auth_failure"
    BUDGET_EXCEEDED = "budget_exceeded"
    OTHER = "other"


@dataclass
class AuditEvent:
    """Structured audit event."""

    event_type: AuditEventType
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Auto-populate correlation_id from context if not set."""
        if self.correlation_id is None:
            self.correlation_id = get_correlation_id() or None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": self.details,
        }
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        return result


class AuditLogger:
    """
    Structured audit logging for integration events.

    Audit logs are written to a separate logger for easy filtering.
    """

    def __init__(self):
        self._logger = logging.getLogger(f"{__name__}.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._logger.info(f"AUDIT: {event.event_type.value}", extra={"audit": event.to_dict()})

    def rate_limit(self, platform: str, retry_after_ms: float, **details: Any) -> None:
        """Log a provider throttling event."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.RATE_LIMIT,
                details={"platform": platform, "retry_after_ms": retry_after_ms, **details},
            )
        )

    def auth_refresh(self, platform: str, success: bool, **details: Any) -> None:
        """Log a mid-operation credential refresh."""
        self.log(
            AuditEvent(
                event_type=AuditEventType.AUTH_REFRESH,
                details={"platform": platform, "success": success, **details},
            )
        )


# Global audit logger
_audit = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger."""
    return _audit


def audit_log(event_type: str, **details: Any) -> None:
    """
    Convenience function for audit logging.

    Args:
        event_type: Type of event (retry_attempt, rate_limit, auth_refresh,
                    auth_failure, budget_exceeded)
        **details: Additional details to include in the audit log
    """
    try:
        event_enum = AuditEventType(event_type)
    except ValueError:
        event_enum = AuditEventType.OTHER
        details["original_event_type"] = event_type

    _audit.log(AuditEvent(event_type=event_enum, details=details))
