"""Tests for backoff delay calculation."""

import random

import pytest

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.integrations.resilience.backoff import (
    calculate_backoff_delay,
    is_retryable_status,
    sleep_ms,
)


class TestCalculateBackoffDelay:
    """Tests for calculate_backoff_delay."""

    @pytest.mark.parametrize("attempt", [0, 1, 2, 3, 4])
    def test_within_jitter_bounds(self, attempt):
        """Delay lies in [base*2^n, base*2^n*1.3], clamped to 30000."""
        rng = random.Random(attempt)
        for _ in range(50):
            delay = calculate_backoff_delay(attempt, DEFAULT_RETRY_CONFIG, rng=rng)
            low = min(1000 * 2**attempt, 30000)
            high = min(1000 * 2**attempt * 1.3, 30000)
            assert low <= delay <= high

    def test_attempt_zero_is_first_retry(self):
        """Attempt 0 uses the base delay, not zero."""
        config = RetryConfig(jitter_factor=0.0)
        assert calculate_backoff_delay(0, config) == 1000.0

    def test_large_attempt_clamped(self):
        """Exponential growth never exceeds max_delay_ms."""
        assert calculate_backoff_delay(20, DEFAULT_RETRY_CONFIG) == 30000.0

    def test_positive_hint_wins(self):
        """A positive server hint replaces the computed delay."""
        assert calculate_backoff_delay(3, DEFAULT_RETRY_CONFIG, 1500) == 1500.0

    def test_hint_clamped_to_max(self):
        """Server hints above max_delay_ms are capped."""
        assert calculate_backoff_delay(0, DEFAULT_RETRY_CONFIG, 45000) == 30000.0

    @pytest.mark.parametrize("hint", [0, -5, None])
    def test_non_positive_hint_ignored(self, hint):
        """Zero, negative and missing hints fall back to exponential backoff."""
        config = RetryConfig(jitter_factor=0.0)
        assert calculate_backoff_delay(1, config, hint) == 2000.0

    def test_seeded_rng_is_deterministic(self):
        """Same seed gives the same delay."""
        first = calculate_backoff_delay(2, rng=random.Random(7))
        second = calculate_backoff_delay(2, rng=random.Random(7))
        assert first == second

    def test_non_decreasing_without_jitter(self):
        """Delays grow with the attempt index."""
        config = RetryConfig(jitter_factor=0.0)
        delays = [calculate_backoff_delay(n, config) for n in range(8)]
        assert delays == sorted(delays)


class TestIsRetryableStatus:
    """Tests for is_retryable_status."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504, 599])
    def test_retryable(self, status):
        assert is_retryable_status(status) is True

    @pytest.mark.parametrize("status", [200, 400, 401, 403, 404, 600, None])
    def test_not_retryable(self, status):
        assert is_retryable_status(status) is False


class TestSleepMs:
    """Tests for sleep_ms unit conversion."""

    @pytest.mark.asyncio
    async def test_converts_to_seconds(self):
        """Milliseconds are passed to the sleep function as seconds."""
        calls = []

        async def fake_sleep(seconds: float) -> None:
            calls.append(seconds)

        await sleep_ms(2500, fake_sleep)
        assert calls == [2.5]
