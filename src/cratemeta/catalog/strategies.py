"""
Version-threshold dispatch table for catalog queries.

Every behaviour that depends on the engine version is a row below. Each
:class:`VersionDispatch` maps half-open version brackets to a named strategy,
so supporting a new engine release means adding one ``(threshold, strategy)``
pair instead of another inline version check.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from ..engine.version import EngineVersion, VersionDispatch, VersionLike

BASELINE = EngineVersion(0, 0, 0)


class QueryForm(str, Enum):
    TABLES_LEGACY = "tables_legacy"
    TABLES_EXTENDED = "tables_extended"
    COLUMNS_LEGACY = "columns_legacy"
    COLUMNS_EXTENDED = "columns_extended"
    PRIMARY_KEYS_CONSTRAINT_ARRAY = "primary_keys_constraint_array"
    PRIMARY_KEYS_KEY_COLUMN_USAGE = "primary_keys_key_column_usage"
    SCHEMAS = "schemas"


class GeneratedForm(str, Enum):
    BOOLEAN = "boolean"
    TEXT = "text"


SCHEMA_COLUMN: VersionDispatch[str] = VersionDispatch(
    "schema column",
    [(BASELINE, "schema_name"), ("0.57.0", "table_schema")],
)

TABLES_FORM: VersionDispatch[QueryForm] = VersionDispatch(
    "tables form",
    [(BASELINE, QueryForm.TABLES_LEGACY), ("2.0.0", QueryForm.TABLES_EXTENDED)],
)

COLUMNS_FORM: VersionDispatch[QueryForm] = VersionDispatch(
    "columns form",
    [(BASELINE, QueryForm.COLUMNS_LEGACY), ("2.0.0", QueryForm.COLUMNS_EXTENDED)],
)

PRIMARY_KEYS_FORM: VersionDispatch[QueryForm] = VersionDispatch(
    "primary keys form",
    [
        (BASELINE, QueryForm.PRIMARY_KEYS_CONSTRAINT_ARRAY),
        ("2.3.0", QueryForm.PRIMARY_KEYS_KEY_COLUMN_USAGE),
    ],
)

# Up to 3.0.0 key_column_usage.table_schema reported 'public'; the schema
# lived in table_catalog.
PK_SCHEMA_FIELD: VersionDispatch[str] = VersionDispatch(
    "primary keys schema field",
    [(BASELINE, "table_catalog"), ("3.0.1", "table_schema")],
)

PK_CATALOG_FIELD: VersionDispatch[str] = VersionDispatch(
    "primary keys catalog field",
    [(BASELINE, "NULL"), ("5.1.0", "kcu.table_catalog")],
)

GENERATED_FORM: VersionDispatch[GeneratedForm] = VersionDispatch(
    "is_generated form",
    [(BASELINE, GeneratedForm.BOOLEAN), ("4.0.0", GeneratedForm.TEXT)],
)

# Keyed on the wire-protocol server version, not the engine version.
# 8.4 added the separate TRUNCATE privilege.
DEFAULT_ACL_PRIVILEGES: VersionDispatch[str] = VersionDispatch(
    "default ACL privileges",
    [(BASELINE, "arwdxt"), ("8.4.0", "arwdDxt")],
)


def schema_column_for(version: VersionLike) -> str:
    """
    Name of the catalog column holding the schema for ``version``.
    """
    return SCHEMA_COLUMN.select(version)


SYSTEM_SCHEMAS: FrozenSet[str] = frozenset({"sys", "information_schema", "pg_catalog"})

_SYSTEM_SCHEMA_LIST = ", ".join(f"'{schema}'" for schema in sorted(SYSTEM_SCHEMAS))

# Table-kind filters keyed by (requested kind, catalog exposes table_type).
# ``{schema}`` is replaced with the bracket's schema column.
TABLE_KIND_PREDICATES: Dict[Tuple[str, bool], str] = {
    ("TABLE", False): "{schema} NOT IN (" + _SYSTEM_SCHEMA_LIST + ")",
    ("SYSTEM TABLE", False): "{schema} IN (" + _SYSTEM_SCHEMA_LIST + ")",
    ("TABLE", True): "(table_type = 'BASE TABLE' AND {schema} NOT IN (" + _SYSTEM_SCHEMA_LIST + "))",
    ("SYSTEM TABLE", True): "(table_type = 'BASE TABLE' AND {schema} IN (" + _SYSTEM_SCHEMA_LIST + "))",
    ("VIEW", True): "(table_type = 'VIEW' AND {schema} NOT IN (" + _SYSTEM_SCHEMA_LIST + "))",
    ("SYSTEM VIEW", True): "(table_type = 'VIEW' AND {schema} IN (" + _SYSTEM_SCHEMA_LIST + "))",
    ("FOREIGN TABLE", True): "table_type = 'FOREIGN'",
}

TABLE_TYPES: Tuple[str, ...] = ("FOREIGN TABLE", "SYSTEM TABLE", "SYSTEM VIEW", "TABLE", "VIEW")

MATCH_NOTHING = "1 = 0"


def table_kind_predicate(kind: str, typed_catalog: bool, schema_column: str) -> Optional[str]:
    template = TABLE_KIND_PREDICATES.get((kind.strip().upper(), typed_catalog))
    if template is None:
        return None
    return template.format(schema=schema_column)


REFERENCE_GENERATIONS: Dict[str, str] = {
    "SYSTEM GENERATED": "SYSTEM",
    "USER GENERATED": "USER",
}


def reference_generation(value: Optional[str]) -> Optional[str]:
    """
    Map the catalog's ``reference_generation`` onto SYSTEM/USER; anything else is ``None``.
    """
    if value is None:
        return None
    return REFERENCE_GENERATIONS.get(value)


def legacy_table_kind(schema: Optional[str]) -> str:
    return "SYSTEM TABLE" if schema in SYSTEM_SCHEMAS else "TABLE"


def extended_table_kind(table_type: Optional[str], schema: Optional[str]) -> Optional[str]:
    """
    Translate ``information_schema.tables.table_type`` into a reported table kind.

    Unrecognized values are passed through unchanged.
    """
    system = schema in SYSTEM_SCHEMAS
    if table_type == "BASE TABLE":
        return "SYSTEM TABLE" if system else "TABLE"
    if table_type == "VIEW":
        return "SYSTEM VIEW" if system else "VIEW"
    if table_type == "FOREIGN":
        return "FOREIGN TABLE"
    return table_type


GENERATED_ALWAYS = "ALWAYS"
