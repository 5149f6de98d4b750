"""Redaction helpers for values that end up in log records."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

REDACTED_VALUE = "***"

_SENSITIVE_TOKENS = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "private_key",
    "sslkey",
    "ssl_key",
    "bearer",
    "authorization",
)


def is_sensitive(text: str) -> bool:
    lowered = text.lower()
    return any(token in lowered for token in _SENSITIVE_TOKENS)


def redact_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """
    Mask connection options whose key looks like a credential.
    """
    return {key: REDACTED_VALUE if is_sensitive(str(key)) else value for key, value in options.items()}


def redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return REDACTED_VALUE if is_sensitive(value) else value
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    if isinstance(value, dict):
        return redact_options({key: redact_value(item) for key, item in value.items()})
    return value


def redact_params(params: Iterable[Any] | None) -> list[Any] | None:
    if params is None:
        return None
    return [redact_value(value) for value in params]
