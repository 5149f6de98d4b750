"""
Search-pattern predicates for catalog queries.
"""

from __future__ import annotations

from typing import Optional

from .sql import SqlFragment

AND = SqlFragment.trusted(" AND ")


def build_predicate(column: str, pattern: Optional[str]) -> SqlFragment:
    """
    Translate a metadata search pattern into a predicate over ``column``.

    ``None`` matches every row, ``""`` only rows where the column is NULL (the
    "no such object" case), anything else becomes a ``LIKE`` against the
    escaped literal. ``%`` and ``_`` inside the pattern keep their wildcard
    meaning.
    """
    if pattern is None:
        return SqlFragment.trusted(f"{column} LIKE '%'")
    if pattern == "":
        return SqlFragment.trusted(f"{column} IS NULL")
    return SqlFragment.trusted(f"{column} LIKE ") + SqlFragment.literal(pattern)


def build_equality(column: str, value: str) -> SqlFragment:
    return SqlFragment.trusted(f"{column} = ") + SqlFragment.literal(value)


def conjoin(*fragments: Optional[SqlFragment]) -> SqlFragment:
    return AND.joined(fragment for fragment in fragments if fragment)
