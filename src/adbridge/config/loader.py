"""Integration settings loading.

Resolution order (highest priority first):
1. ``ADBRIDGE_*`` environment variables
2. TOML config file (``ADBRIDGE_CONFIG`` or an explicit path)
3. Library defaults

Example ``adbridge.toml``::

    [integrations]
    request_timeout = 30.0
    time_budget = 120.0

    [integrations.retry]
    max_retries = 3
    base_delay_ms = 1000

    [integrations.platforms.tiktok.retry]
    max_retries = 5
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from adbridge.config.parsing import _env, _try_parse_float
from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig

logger = logging.getLogger(__name__)

_CONFIG_PATH_ENV_VAR = "ADBRIDGE_CONFIG"
_REQUEST_TIMEOUT_ENV_VAR = "ADBRIDGE_REQUEST_TIMEOUT"
_TIME_BUDGET_ENV_VAR = "ADBRIDGE_TIME_BUDGET"

DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass
class IntegrationSettings:
    """Resolved settings for all platform integrations.

    Attributes:
        retry: Retry policy applied to platforms without an override
        platform_retry: Per-platform retry overrides keyed by platform id
        request_timeout: Per-attempt HTTP timeout in seconds
        time_budget: Deadline in seconds for one logical call (None = no limit)
    """

    retry: RetryConfig = DEFAULT_RETRY_CONFIG
    platform_retry: Dict[str, RetryConfig] = field(default_factory=dict)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    time_budget: Optional[float] = None

    def retry_for(self, platform_id: str) -> RetryConfig:
        """Return the retry policy for *platform_id*."""
        return self.platform_retry.get(platform_id, self.retry)

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "IntegrationSettings":
        """Create settings from the ``[integrations]`` TOML section.

        Args:
            data: Dict from TOML parsing

        Returns:
            IntegrationSettings instance
        """
        retry = RetryConfig.from_toml_dict(data.get("retry", {}))

        platform_retry: Dict[str, RetryConfig] = {}
        platforms = data.get("platforms", {})
        if isinstance(platforms, dict):
            for platform_id, section in platforms.items():
                if not isinstance(section, dict):
                    logger.warning("Ignoring malformed platform section: %s", platform_id)
                    continue
                if "retry" in section:
                    platform_retry[platform_id] = RetryConfig.from_toml_dict(
                        section["retry"], base=retry
                    )

        timeout = _try_parse_float(data.get("request_timeout"), "integrations.request_timeout")
        budget = _try_parse_float(data.get("time_budget"), "integrations.time_budget")
        return cls(
            retry=retry,
            platform_retry=platform_retry,
            request_timeout=DEFAULT_REQUEST_TIMEOUT if timeout is None else timeout,
            time_budget=budget,
        )

    @classmethod
    def from_toml(cls, path: Union[str, Path]) -> "IntegrationSettings":
        """Load settings from a TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.from_toml_dict(data.get("integrations", {}))

    def apply_env_overrides(self) -> "IntegrationSettings":
        """Return a copy with ``ADBRIDGE_*`` environment overrides applied.

        Retry overrides apply to the shared policy and to every platform
        override, so an operator can cap retries globally.
        """
        timeout = _try_parse_float(_env(_REQUEST_TIMEOUT_ENV_VAR), _REQUEST_TIMEOUT_ENV_VAR)
        budget = _try_parse_float(_env(_TIME_BUDGET_ENV_VAR), _TIME_BUDGET_ENV_VAR)
        return replace(
            self,
            retry=RetryConfig.from_env(base=self.retry),
            platform_retry={
                platform_id: RetryConfig.from_env(base=config)
                for platform_id, config in self.platform_retry.items()
            },
            request_timeout=self.request_timeout if timeout is None else timeout,
            time_budget=self.time_budget if budget is None else budget,
        )


def load_settings(path: Optional[Union[str, Path]] = None) -> IntegrationSettings:
    """Load integration settings from file and environment.

    Args:
        path: TOML file to read. Falls back to ``ADBRIDGE_CONFIG``; when
            neither is set (or the file is missing) defaults are used.

    Returns:
        IntegrationSettings with environment overrides applied
    """
    config_path = path or _env(_CONFIG_PATH_ENV_VAR)
    settings = IntegrationSettings()

    if config_path:
        resolved = Path(config_path)
        if resolved.is_file():
            settings = IntegrationSettings.from_toml(resolved)
            logger.debug("Loaded integration settings from %s", resolved)
        else:
            logger.warning("Integration config file not found: %s", resolved)

    return settings.apply_env_overrides()
