"""Observability helpers: audit events and credential redaction."""

from adbridge.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    AuditLogger,
    audit_log,
    get_audit_logger,
)
from adbridge.core.observability.redaction import (
    REDACTED,
    redact_headers,
    redact_secrets,
    redact_url,
)

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "audit_log",
    "get_audit_logger",
    "REDACTED",
    "redact_headers",
    "redact_secrets",
    "redact_url",
]
