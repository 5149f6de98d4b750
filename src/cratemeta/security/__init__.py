"""Security helpers for cratemeta."""

from .dsns import DSNConfig, parse_dsn
from .redaction import REDACTED_VALUE, redact_options, redact_params

__all__ = ["DSNConfig", "REDACTED_VALUE", "parse_dsn", "redact_options", "redact_params"]
