"""Caller-side credential refresh.

The executor asks for a new credential through ``on_auth_error``; this
module supplies the hook. ``AuthRefreshCoordinator`` makes refreshes
single-flight so a burst of concurrent calls that all hit an expired token
triggers one token-endpoint round trip, not one per call.

Example:
    coordinator = AuthRefreshCoordinator(refresh_google_token, name="google:acct-1")
    await client.get(
        "/customers/123/googleAds:search",
        operation="list_campaigns",
        on_auth_error=coordinator.hook(),
    )
"""

import asyncio
import inspect
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, Union

from adbridge.core.errors.integration import TokenRefreshError
from adbridge.core.integrations.resilience.models import AuthRefreshResult
from adbridge.core.observability.redaction import redact_secrets

logger = logging.getLogger(__name__)

TokenRefresher = Callable[[], Awaitable[str]]
TokenListener = Callable[[str], Union[None, Awaitable[None]]]

DEFAULT_EXPIRY_BUFFER = timedelta(minutes=5)
# Stored expiries are pulled in so a token is never used in its last seconds
EXPIRY_SAFETY_MARGIN = timedelta(seconds=30)

# Numeric timestamps below this are seconds, at or above are milliseconds
_MILLIS_THRESHOLD = 1_000_000_000_000


class AuthRefreshCoordinator:
    """Single-flight wrapper around a token refresher.

    Concurrent ``refresh()`` callers share one in-flight task. The task is
    forgotten as soon as it finishes, so the next expiry triggers a new
    refresh. Cancelling one waiter does not cancel the shared refresh.
    """

    def __init__(
        self,
        refresh_token: TokenRefresher,
        *,
        name: str,
        on_token_refresh: Optional[TokenListener] = None,
    ):
        self.name = name
        self._refresh_token = refresh_token
        self._on_token_refresh = on_token_refresh
        self._inflight: Optional["asyncio.Task[str]"] = None
        self.refresh_count = 0

    @property
    def in_progress(self) -> bool:
        return self._inflight is not None

    async def refresh(self) -> str:
        """Return a fresh token, joining an in-flight refresh if there is one.

        Raises:
            TokenRefreshError: The refresher could not renew the credential.
        """
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._inflight)

    async def _run(self) -> str:
        try:
            token = await self._refresh_token()
            self.refresh_count += 1
            logger.info("Refreshed credential for %s", self.name)
            if self._on_token_refresh is not None:
                result = self._on_token_refresh(token)
                if inspect.isawaitable(result):
                    await result
            return token
        finally:
            self._inflight = None

    def hook(self) -> Callable[[], Awaitable[AuthRefreshResult]]:
        """Return an ``on_auth_error`` callback backed by this coordinator.

        The callback declines (``retry=False``) when the refresher raises
        TokenRefreshError; any other exception propagates to the caller.
        """

        async def on_auth_error() -> AuthRefreshResult:
            try:
                token = await self.refresh()
            except TokenRefreshError as e:
                logger.warning(
                    "Credential refresh failed for %s: %s",
                    self.name,
                    redact_secrets(e.message),
                )
                return AuthRefreshResult(retry=False)
            return AuthRefreshResult(retry=True, new_token=token)

        return on_auth_error


def compute_expiry(
    expires_in_seconds: Optional[float],
    *,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Turn an OAuth ``expires_in`` into an absolute expiry with a safety margin."""
    if not expires_in_seconds or expires_in_seconds <= 0:
        return None
    now = now or datetime.now(timezone.utc)
    return now + timedelta(seconds=expires_in_seconds) - EXPIRY_SAFETY_MARGIN


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000.0 if value >= _MILLIS_THRESHOLD else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def is_token_expiring_soon(
    expires_at: Any,
    buffer: timedelta = DEFAULT_EXPIRY_BUFFER,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """Return True when *expires_at* is unknown or falls within *buffer* of now.

    Accepts datetimes, epoch seconds or milliseconds, and ISO-8601 strings.
    """
    expiry = _to_datetime(expires_at) if expires_at else None
    if expiry is None:
        return True
    now = now or datetime.now(timezone.utc)
    return now + buffer >= expiry
