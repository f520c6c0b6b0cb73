"""Request executor data models and protocols.

Defines the types passed across the executor boundary:
- RequestDescriptor describing one logical call
- AuthRefreshResult returned by auth-refresh hooks
- RequestResult returned on success
- RequestLogRecord emitted once per attempt
- SleepFunc protocol for injectable async sleep
"""

from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Union,
)

import httpx

RequestBody = Union[str, bytes, Dict[str, Any]]


@dataclass(frozen=True)
class AuthRefreshResult:
    """Outcome of an ``on_auth_error`` hook.

    The executor only retries when ``retry`` is True and ``new_token`` is set.
    """

    retry: bool
    new_token: Optional[str] = None


AuthErrorHook = Callable[[], Union[AuthRefreshResult, Awaitable[AuthRefreshResult]]]
RateLimitHook = Callable[[float], None]


@dataclass
class RequestDescriptor:
    """One logical call to a platform API.

    Created fresh per call and never reused; the executor copies headers
    before applying a refreshed credential.

    Attributes:
        url: Absolute URL, or a path joined to the adapter's base URL
        operation: Name of the logical operation, used in logs
        method: HTTP method
        headers: Per-call headers layered over the adapter defaults
        body: Request body; dicts are sent as JSON
        params: Extra query parameters
        max_retries: Overrides the adapter's ``RetryConfig.max_retries``
        on_auth_error: Hook asked for a new credential after an auth error
        on_rate_limit_hit: Notified with the planned delay (ms) on throttling
        time_budget: Deadline in seconds for the whole call, None = no limit
    """

    url: str
    operation: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[RequestBody] = None
    params: Optional[Mapping[str, Any]] = None
    max_retries: Optional[int] = None
    on_auth_error: Optional[AuthErrorHook] = None
    on_rate_limit_hit: Optional[RateLimitHook] = None
    time_budget: Optional[float] = None


@dataclass
class RequestResult:
    """Successful outcome of a logical call."""

    response: httpx.Response
    payload: Any
    attempts: int


@dataclass
class RequestLogRecord:
    """Structured record of a single attempt."""

    platform: str
    operation: str
    url: str
    attempt: int
    max_retries: int
    status_code: Optional[int] = None
    duration_ms: Optional[int] = None
    error: Optional[Dict[str, Any]] = None
    correlation_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "platform": self.platform,
            "operation": self.operation,
            "url": self.url,
            "attempt": f"{self.attempt}/{self.max_retries}",
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.duration_ms is not None:
            result["duration_ms"] = self.duration_ms
        if self.error is not None:
            result["error"] = self.error
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        return result


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...
