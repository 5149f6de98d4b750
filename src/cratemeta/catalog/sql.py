"""
SQL fragment primitives separating library-authored text from caller data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from ..dialects.base import Dialect


@dataclass(frozen=True)
class Trusted:
    """
    SQL text written by this library: keywords, catalog column names, operators.
    """

    text: str


@dataclass(frozen=True)
class Literal:
    """
    A caller-supplied value. Rendered only through the dialect's string quoting.
    """

    value: str


SqlPart = Union[Trusted, Literal]


@dataclass(frozen=True)
class SqlFragment:
    parts: Tuple[SqlPart, ...] = ()

    @classmethod
    def trusted(cls, text: str) -> "SqlFragment":
        return cls((Trusted(text),))

    @classmethod
    def literal(cls, value: str) -> "SqlFragment":
        return cls((Literal(value),))

    def __add__(self, other: "SqlFragment | SqlPart") -> "SqlFragment":
        if isinstance(other, (Trusted, Literal)):
            return SqlFragment(self.parts + (other,))
        if isinstance(other, SqlFragment):
            return SqlFragment(self.parts + other.parts)
        return NotImplemented

    def __bool__(self) -> bool:
        return bool(self.parts)

    def joined(self, fragments: Iterable["SqlFragment"]) -> "SqlFragment":
        """
        Join ``fragments`` using this fragment as the separator, skipping empty ones.
        """
        parts: List[SqlPart] = []
        for fragment in fragments:
            if not fragment:
                continue
            if parts:
                parts.extend(self.parts)
            parts.extend(fragment.parts)
        return SqlFragment(tuple(parts))

    @property
    def literals(self) -> Tuple[str, ...]:
        return tuple(part.value for part in self.parts if isinstance(part, Literal))

    def render(self, dialect: Dialect) -> str:
        rendered: List[str] = []
        for part in self.parts:
            if isinstance(part, Literal):
                rendered.append(dialect.quote_literal(part.value))
            else:
                rendered.append(part.text)
        return "".join(rendered)


class SqlBuilder:
    """
    Accumulates clauses and joins them with single spaces, like the statement
    compilers elsewhere in the package.
    """

    def __init__(self) -> None:
        self._clauses: List[SqlFragment] = []

    def add(self, clause: "SqlFragment | str") -> "SqlBuilder":
        if isinstance(clause, str):
            clause = SqlFragment.trusted(clause)
        if clause:
            self._clauses.append(clause)
        return self

    def where(self, condition: SqlFragment) -> "SqlBuilder":
        if condition:
            self.add("WHERE").add(condition)
        return self

    def order_by(self, *columns: str) -> "SqlBuilder":
        if columns:
            self.add("ORDER BY " + ", ".join(columns))
        return self

    def build(self) -> SqlFragment:
        return SqlFragment.trusted(" ").joined(self._clauses)

    def render(self, dialect: Dialect) -> str:
        return self.build().render(dialect)
