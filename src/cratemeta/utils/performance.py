"""
Slow-query threshold resolution.
"""

from __future__ import annotations

import logging
import os

SLOW_QUERY_ENV = "CRATEMETA_SLOW_QUERY_MS"

_logger = logging.getLogger("cratemeta.utils.performance")


def resolve_slow_query_ms(default: int = 100, override: int | None = None) -> int:
    """
    Pick the slow-query threshold: explicit override, then environment, then default.
    """
    if override is not None:
        if override < 0:
            raise ValueError("slow_query_ms must be non-negative")
        return override
    raw = os.getenv(SLOW_QUERY_ENV)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        _logger.warning("Ignoring invalid %s value %r", SLOW_QUERY_ENV, raw)
        return default
    if value < 0:
        _logger.warning("Ignoring negative %s value %r", SLOW_QUERY_ENV, raw)
        return default
    return value
