"""Parsing and normalization helpers for configuration values.

Provides tolerant parsers for environment and TOML values used by the
other config sub-modules. Invalid values are logged and ignored so a bad
override never prevents the integrations from starting.
"""

import logging
import os
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _try_parse_int(value: Any, name: str) -> Optional[int]:
    """Parse an integer, returning None (with a warning) when invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        logger.warning("Invalid integer for %s: %r", name, value)
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning("Invalid integer for %s: %r", name, value)
        return None


def _try_parse_float(value: Any, name: str) -> Optional[float]:
    """Parse a float, returning None (with a warning) when invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        logger.warning("Invalid number for %s: %r", name, value)
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        logger.warning("Invalid number for %s: %r", name, value)
        return None


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value
