"""
Fixed-shape rows returned by catalog lookups.

Field order is stable across engine versions; fields the queried version
cannot supply hold a sentinel (usually ``None``).
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional

from .acl import TablePrivilegeRow
from .types import StandardType, TypeInfoRow


class ObjectKind(str, Enum):
    TABLES = "TABLES"
    COLUMNS = "COLUMNS"
    PRIMARY_KEYS = "PRIMARY_KEYS"
    SCHEMAS = "SCHEMAS"


class TableRow(NamedTuple):
    table_cat: Optional[str]
    table_schem: Optional[str]
    table_name: str
    table_type: Optional[str]
    remarks: Optional[str]
    type_cat: Optional[str]
    type_schem: Optional[str]
    type_name: Optional[str]
    self_referencing_col_name: Optional[str]
    ref_generation: Optional[str]


class ColumnRow(NamedTuple):
    table_cat: Optional[str]
    table_schem: Optional[str]
    table_name: str
    column_name: str
    data_type: StandardType
    type_name: Optional[str]
    column_size: Optional[int]
    decimal_digits: Optional[int]
    num_prec_radix: Optional[int]
    nullable: int
    remarks: Optional[str]
    column_def: Optional[str]
    ordinal_position: int
    is_nullable: str
    is_generatedcolumn: str


class PrimaryKeyRow(NamedTuple):
    table_cat: Optional[str]
    table_schem: Optional[str]
    table_name: str
    column_name: str
    key_seq: int
    pk_name: Optional[str]


class SchemaRow(NamedTuple):
    table_schem: str
    table_catalog: Optional[str]


ROW_TYPES = {
    ObjectKind.TABLES: TableRow,
    ObjectKind.COLUMNS: ColumnRow,
    ObjectKind.PRIMARY_KEYS: PrimaryKeyRow,
    ObjectKind.SCHEMAS: SchemaRow,
}

__all__ = [
    "ColumnRow",
    "ObjectKind",
    "PrimaryKeyRow",
    "ROW_TYPES",
    "SchemaRow",
    "TablePrivilegeRow",
    "TableRow",
    "TypeInfoRow",
]
