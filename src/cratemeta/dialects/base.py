"""
Dialect strategy interfaces describing how catalog SQL is rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend behaviours the catalog layer relies on.
    """

    standard_conforming_strings: bool = True


class Dialect(Protocol):
    """
    Strategy interface consumed by the catalog query builder and adapters.
    """

    @property
    def name(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def escape_string(self, value: str) -> str: ...

    def quote_literal(self, value: str) -> str: ...
