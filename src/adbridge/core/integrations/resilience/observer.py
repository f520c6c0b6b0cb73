"""Per-attempt log sink.

The executor reports every attempt to a ``RequestObserver``. The default
observer writes to the ``adbridge.integrations`` logger; tests inject one
that keeps the records in memory.
"""

import logging
from typing import Optional, Protocol

from adbridge.core.integrations.resilience.models import RequestLogRecord

INTEGRATIONS_LOGGER_NAME = "adbridge.integrations"


class RequestObserver(Protocol):
    """Receives one record per attempt."""

    def record(self, entry: RequestLogRecord) -> None: ...


class LoggingRequestObserver:
    """Writes attempt records to stdlib logging.

    Completed attempts log at INFO and failed ones at WARNING. The record
    dict is attached as ``extra={"request": ...}`` for structured handlers.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(INTEGRATIONS_LOGGER_NAME)

    def record(self, entry: RequestLogRecord) -> None:
        data = entry.to_dict()
        if entry.succeeded:
            self._logger.info(
                "[%s] %s %s -> %s (%s ms)",
                entry.platform,
                entry.operation,
                data["attempt"],
                entry.status_code,
                entry.duration_ms,
                extra={"request": data},
            )
        else:
            self._logger.warning(
                "[%s] %s %s failed: %s",
                entry.platform,
                entry.operation,
                data["attempt"],
                (entry.error or {}).get("message"),
                extra={"request": data},
            )
