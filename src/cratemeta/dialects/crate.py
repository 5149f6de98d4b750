"""
CrateDB dialect implementation.
"""

from __future__ import annotations

from typing import Final

from .base import DialectCapabilities


class CrateDialect:
    """
    CrateDB dialect spoken over the PostgreSQL wire protocol.

    String literals follow the server's ``standard_conforming_strings``
    setting: when it is on only single quotes are doubled, otherwise
    backslashes are doubled as well and the literal gets the ``E`` prefix.
    """

    name: Final[str] = "crate"

    def __init__(self, *, standard_conforming_strings: bool = True) -> None:
        self.capabilities: DialectCapabilities = DialectCapabilities(
            standard_conforming_strings=standard_conforming_strings,
        )

    @property
    def standard_conforming_strings(self) -> bool:
        return self.capabilities.standard_conforming_strings

    def escape_string(self, value: str) -> str:
        if "\x00" in value:
            raise ValueError("Zero bytes may not occur in string literals.")
        if not self.standard_conforming_strings:
            value = value.replace("\\", "\\\\")
        return value.replace("'", "''")

    def quote_literal(self, value: str) -> str:
        prefix = "" if self.standard_conforming_strings else "E"
        return f"{prefix}'{self.escape_string(value)}'"
