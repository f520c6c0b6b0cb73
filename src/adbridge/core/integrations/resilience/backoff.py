"""Exponential backoff with jitter.

Delays are computed in milliseconds; ``sleep_ms`` converts to the seconds
an asyncio-style sleep function takes.
"""

import random
from typing import Optional

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.errors.integration import is_retryable_status
from adbridge.core.integrations.resilience.models import SleepFunc

__all__ = ["calculate_backoff_delay", "is_retryable_status", "sleep_ms"]


def calculate_backoff_delay(
    attempt: int,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    rate_limit_hint_ms: Optional[float] = None,
    *,
    rng: Optional[random.Random] = None,
) -> float:
    """Compute the delay before retrying after *attempt* failed.

    A positive server hint wins and is only capped at ``max_delay_ms``.
    Otherwise the delay is ``base * 2**attempt`` plus up to
    ``jitter_factor`` of that again, capped at ``max_delay_ms``.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        config: Retry policy.
        rate_limit_hint_ms: Server-supplied delay (e.g. from ``Retry-After``).
        rng: Injectable Random instance for deterministic testing.

    Returns:
        Delay in milliseconds.

    Example:
        >>> calculate_backoff_delay(2, rng=random.Random(0))  # 4000..5200
    """
    if rate_limit_hint_ms is not None and rate_limit_hint_ms > 0:
        return min(float(rate_limit_hint_ms), float(config.max_delay_ms))

    _rng = rng or random
    exponential = config.base_delay_ms * (2.0**attempt)
    jitter = exponential * config.jitter_factor * _rng.random()
    return min(exponential + jitter, float(config.max_delay_ms))


async def sleep_ms(delay_ms: float, sleep_func: SleepFunc) -> None:
    """Sleep for *delay_ms* milliseconds using *sleep_func* (which takes seconds)."""
    await sleep_func(delay_ms / 1000.0)
