"""Retry policy configuration for platform adapters.

A RetryConfig is supplied once per adapter and shared by every request to
that platform. Durations are in milliseconds.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from adbridge.config.parsing import _env, _try_parse_float, _try_parse_int

logger = logging.getLogger(__name__)

_MAX_RETRIES_ENV_VAR = "ADBRIDGE_MAX_RETRIES"
_BASE_DELAY_ENV_VAR = "ADBRIDGE_BASE_DELAY_MS"
_MAX_DELAY_ENV_VAR = "ADBRIDGE_MAX_DELAY_MS"
_JITTER_ENV_VAR = "ADBRIDGE_JITTER_FACTOR"


@dataclass(frozen=True)
class RetryConfig:
    """Retry and backoff tuning for one platform.

    Attributes:
        max_retries: Total attempts per logical call (including the first)
        base_delay_ms: Delay before the first retry, doubled per attempt
        max_delay_ms: Upper bound for any computed or server-hinted delay
        jitter_factor: Fraction of the exponential delay added as random jitter
    """

    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
    jitter_factor: float = 0.3

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.base_delay_ms <= 0:
            raise ValueError(f"base_delay_ms must be > 0, got {self.base_delay_ms}")
        if self.base_delay_ms > self.max_delay_ms:
            raise ValueError(
                f"base_delay_ms ({self.base_delay_ms}) must not exceed "
                f"max_delay_ms ({self.max_delay_ms})"
            )
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError(
                f"jitter_factor must be between 0 and 1, got {self.jitter_factor}"
            )

    @classmethod
    def from_toml_dict(
        cls,
        data: Dict[str, Any],
        base: Optional["RetryConfig"] = None,
    ) -> "RetryConfig":
        """Create config from a TOML dict (typically a ``[...retry]`` section).

        Keys missing from *data* (or holding invalid values) keep the value
        from *base*, which defaults to the library defaults. A combination
        that fails validation is logged and *base* is returned unchanged.

        Args:
            data: Dict from TOML parsing
            base: Config supplying values for absent keys

        Returns:
            RetryConfig instance
        """
        base = base or DEFAULT_RETRY_CONFIG
        max_retries = _try_parse_int(data.get("max_retries"), "retry.max_retries")
        base_delay = _try_parse_int(data.get("base_delay_ms"), "retry.base_delay_ms")
        max_delay = _try_parse_int(data.get("max_delay_ms"), "retry.max_delay_ms")
        jitter = _try_parse_float(data.get("jitter_factor"), "retry.jitter_factor")
        try:
            return replace(
                base,
                max_retries=base.max_retries if max_retries is None else max_retries,
                base_delay_ms=base.base_delay_ms if base_delay is None else base_delay,
                max_delay_ms=base.max_delay_ms if max_delay is None else max_delay,
                jitter_factor=base.jitter_factor if jitter is None else jitter,
            )
        except ValueError as exc:
            logger.warning("Invalid retry config ignored: %s", exc)
            return base

    @classmethod
    def from_env(cls, base: Optional["RetryConfig"] = None) -> "RetryConfig":
        """Apply ``ADBRIDGE_*`` environment overrides on top of *base*."""
        return cls.from_toml_dict(
            {
                "max_retries": _env(_MAX_RETRIES_ENV_VAR),
                "base_delay_ms": _env(_BASE_DELAY_ENV_VAR),
                "max_delay_ms": _env(_MAX_DELAY_ENV_VAR),
                "jitter_factor": _env(_JITTER_ENV_VAR),
            },
            base=base,
        )


DEFAULT_RETRY_CONFIG = RetryConfig()
