"""Resilient request execution.

Runs one logical platform call across attempts: classifies failures
through the adapter, backs off on transient and throttled responses,
refreshes the credential once on auth errors, and enforces an optional
time budget.
"""

import asyncio
import inspect
import random
import time
from typing import Any, Dict, Optional

import httpx

from adbridge.config.loader import DEFAULT_REQUEST_TIMEOUT
from adbridge.config.retry import RetryConfig
from adbridge.core.context import get_correlation_id
from adbridge.core.errors.integration import ClassifiedError
from adbridge.core.errors.resilience import TimeBudgetExceededError
from adbridge.core.integrations.adapters.base import AdapterConfig
from adbridge.core.integrations.adapters.shared import parse_retry_after_ms, read_payload
from adbridge.core.integrations.resilience.backoff import (
    calculate_backoff_delay,
    is_retryable_status,
    sleep_ms,
)
from adbridge.core.integrations.resilience.models import (
    AuthRefreshResult,
    RequestDescriptor,
    RequestLogRecord,
    RequestResult,
    SleepFunc,
)
from adbridge.core.integrations.resilience.observer import (
    LoggingRequestObserver,
    RequestObserver,
)
from adbridge.core.observability import audit_log, get_audit_logger
from adbridge.core.observability.redaction import redact_secrets, redact_url

_default_observer = LoggingRequestObserver()


async def execute_request(
    adapter: AdapterConfig,
    descriptor: RequestDescriptor,
    *,
    retry_config: Optional[RetryConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    observer: Optional[RequestObserver] = None,
    sleep_func: Optional[SleepFunc] = None,
    rng: Optional[random.Random] = None,
) -> RequestResult:
    """Execute a platform API call with retries and error classification.

    Attempt loop (``max_retries`` attempts in total):
    1. Send the request with the current headers and URL
    2. Network failure: back off and retry; re-raise the httpx error on
       the last attempt
    3. ``adapter.is_success`` holds: return immediately
    4. Otherwise classify the response with ``adapter.parse_error``
    5. Auth error: ask ``on_auth_error`` for a new credential once per
       call; on success restart the attempt counter, else raise
    6. Rate limit: wait for the server hint (capped) or twice the computed
       backoff, notify ``on_rate_limit_hit``, retry while attempts remain
    7. Retryable error or 429/5xx status: back off and retry while
       attempts remain
    8. Anything else is raised as is

    Args:
        adapter: Platform adapter.
        descriptor: The logical call.
        retry_config: Overrides ``adapter.retry_config``.
        http_client: Client to send through; a temporary one is opened
            (and closed) when omitted.
        observer: Receives one RequestLogRecord per attempt.
        sleep_func: Injectable sleep function (seconds) for tests.
        rng: Injectable Random instance for deterministic jitter.

    Returns:
        RequestResult with the successful response and decoded payload.

    Raises:
        ClassifiedError: Terminal classified failure.
        httpx.TransportError: Network failure on the final attempt.
        TimeBudgetExceededError: ``descriptor.time_budget`` ran out.
        ValueError: ``max_retries`` resolves to less than 1.
    """
    if http_client is not None:
        return await _execute(
            adapter, descriptor, http_client, retry_config, observer, sleep_func, rng
        )
    async with httpx.AsyncClient(timeout=DEFAULT_REQUEST_TIMEOUT) as client:
        return await _execute(
            adapter, descriptor, client, retry_config, observer, sleep_func, rng
        )


async def _resolve_auth_hook(descriptor: RequestDescriptor) -> AuthRefreshResult:
    result = descriptor.on_auth_error()
    if inspect.isawaitable(result):
        result = await result
    return result


async def _execute(
    adapter: AdapterConfig,
    descriptor: RequestDescriptor,
    client: httpx.AsyncClient,
    retry_config: Optional[RetryConfig],
    observer: Optional[RequestObserver],
    sleep_func: Optional[SleepFunc],
    rng: Optional[random.Random],
) -> RequestResult:
    config = retry_config or adapter.retry_config
    max_retries = (
        descriptor.max_retries if descriptor.max_retries is not None else config.max_retries
    )
    if max_retries < 1:
        raise ValueError(f"max_retries must be >= 1, got {max_retries}")

    _observer = observer or _default_observer
    _sleep = sleep_func or asyncio.sleep
    _rng = rng or random.Random()
    platform = adapter.platform_id
    operation = descriptor.operation
    time_budget = descriptor.time_budget
    start_time = time.monotonic()
    correlation_id = get_correlation_id()

    url = adapter.resolve_url(descriptor.url)
    if descriptor.params:
        # Query credentials must be visible to update_auth_in_url
        url = str(httpx.URL(url).copy_merge_params(descriptor.params))
    headers: Dict[str, str] = {**adapter.default_headers, **descriptor.headers}
    request_kwargs: Dict[str, Any] = {}
    if isinstance(descriptor.body, dict):
        request_kwargs["json"] = descriptor.body
    elif descriptor.body is not None:
        request_kwargs["content"] = descriptor.body

    def elapsed() -> float:
        return time.monotonic() - start_time

    def remaining_budget() -> Optional[float]:
        if time_budget is None:
            return None
        return max(0.0, time_budget - elapsed())

    def _audit(event_type: str, **details: object) -> None:
        """Log audit event with correlation_id if available."""
        if correlation_id:
            details["correlation_id"] = correlation_id
        details["platform"] = platform
        details["operation"] = operation
        audit_log(event_type, **details)

    def _budget_error(message: str, attempts: int, phase: str) -> TimeBudgetExceededError:
        _audit(
            "budget_exceeded",
            elapsed_ms=int(elapsed() * 1000),
            budget_ms=int((time_budget or 0) * 1000),
            attempts=attempts,
            phase=phase,
        )
        return TimeBudgetExceededError(
            message,
            budget_seconds=time_budget,
            elapsed_seconds=elapsed(),
            operation=operation,
            attempts=attempts,
        )

    def _record(
        attempt: int,
        *,
        status_code: Optional[int] = None,
        started: float,
        error: Optional[Dict[str, Any]] = None,
    ) -> None:
        _observer.record(
            RequestLogRecord(
                platform=platform,
                operation=operation,
                url=redact_url(url),
                attempt=attempt + 1,
                max_retries=max_retries,
                status_code=status_code,
                duration_ms=int((time.monotonic() - started) * 1000),
                error=error,
                correlation_id=correlation_id or None,
            )
        )

    async def _backoff(delay_ms: float, attempts: int) -> None:
        budget = remaining_budget()
        if budget is not None and delay_ms / 1000.0 > budget:
            raise _budget_error(
                f"Retry delay {delay_ms / 1000.0:.1f}s exceeds remaining budget "
                f"{budget:.1f}s for {operation}",
                attempts,
                "retry_delay",
            )
        await sleep_ms(delay_ms, _sleep)

    async def _send() -> httpx.Response:
        request = client.request(descriptor.method, url, headers=headers, **request_kwargs)
        budget = remaining_budget()
        if budget is None:
            return await request
        return await asyncio.wait_for(request, timeout=budget)

    refreshed = False
    attempts_made = 0
    attempt = 0

    while attempt < max_retries:
        budget = remaining_budget()
        if budget is not None and budget <= 0:
            raise _budget_error(
                f"Time budget exhausted before attempt for {operation}",
                attempts_made,
                "pre_execution",
            )

        attempts_made += 1
        started = time.monotonic()
        try:
            response = await _send()
        except asyncio.TimeoutError:
            if time_budget is None:
                raise
            raise _budget_error(
                f"Attempt timed out against time budget for {operation}",
                attempts_made,
                "timeout",
            ) from None
        except httpx.TransportError as e:
            _record(
                attempt,
                started=started,
                error={"name": type(e).__name__, "message": redact_secrets(str(e))},
            )
            if attempt >= max_retries - 1:
                raise
            delay = calculate_backoff_delay(attempt, config, rng=_rng)
            _audit(
                "retry_attempt",
                attempt=attempt + 1,
                max_attempts=max_retries,
                error_type="network",
                delay_ms=int(delay),
            )
            await _backoff(delay, attempts_made)
            attempt += 1
            continue

        payload = read_payload(response)
        if adapter.is_success(response, payload):
            _record(attempt, status_code=response.status_code, started=started)
            return RequestResult(response=response, payload=payload, attempts=attempts_made)

        error: ClassifiedError = adapter.parse_error(response, payload)
        if error.retry_after_ms is None:
            error.retry_after_ms = parse_retry_after_ms(response)
        _record(
            attempt,
            status_code=response.status_code,
            started=started,
            error=error.to_dict(),
        )

        if error.is_auth_error:
            if descriptor.on_auth_error is None or refreshed:
                _audit(
                    "auth_failure",
                    http_status=error.http_status,
                    refreshed=refreshed,
                )
                raise error
            outcome = await _resolve_auth_hook(descriptor)
            if not outcome.retry or not outcome.new_token:
                get_audit_logger().auth_refresh(platform, False, operation=operation)
                raise error
            headers = adapter.update_auth_header(headers, outcome.new_token)
            url = adapter.update_auth_in_url(url, outcome.new_token)
            refreshed = True
            get_audit_logger().auth_refresh(platform, True, operation=operation)
            # Fresh credential gets a full set of attempts
            attempt = 0
            continue

        if error.is_rate_limit_error:
            if error.retry_after_ms:
                delay = min(
                    calculate_backoff_delay(attempt, config, error.retry_after_ms),
                    float(config.max_delay_ms),
                )
            else:
                delay = calculate_backoff_delay(attempt, config, rng=_rng) * 2
            get_audit_logger().rate_limit(
                platform,
                delay,
                operation=operation,
                attempt=attempt + 1,
                server_hint_ms=error.retry_after_ms,
            )
            if descriptor.on_rate_limit_hit is not None:
                descriptor.on_rate_limit_hit(delay)
            if attempt < max_retries - 1:
                await _backoff(delay, attempts_made)
                attempt += 1
                continue
            raise error

        if (error.is_retryable or is_retryable_status(response.status_code)) and (
            attempt < max_retries - 1
        ):
            delay = calculate_backoff_delay(attempt, config, rng=_rng)
            _audit(
                "retry_attempt",
                attempt=attempt + 1,
                max_attempts=max_retries,
                error_type=error.error_type.value,
                http_status=error.http_status,
                delay_ms=int(delay),
            )
            await _backoff(delay, attempts_made)
            attempt += 1
            continue

        raise error

    raise RuntimeError("execute_request: unexpected state")
