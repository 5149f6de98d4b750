"""
Version-aware SQL generation for catalog lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from ..engine.version import EngineVersion
from ..utils import get_logger
from .models import ROW_TYPES, ObjectKind
from .patterns import build_equality, build_predicate, conjoin
from .sql import SqlBuilder, SqlFragment
from .strategies import (
    COLUMNS_FORM,
    MATCH_NOTHING,
    PK_CATALOG_FIELD,
    PK_SCHEMA_FIELD,
    PRIMARY_KEYS_FORM,
    TABLES_FORM,
    QueryForm,
    schema_column_for,
    table_kind_predicate,
)

if TYPE_CHECKING:
    from ..engine.context import CatalogContext


EXTENDED_TABLE_COLUMNS = ("table_catalog", "table_type", "self_referencing_column_name", "reference_generation")
EXTENDED_COLUMN_COLUMNS = (
    "table_catalog",
    "numeric_precision",
    "numeric_precision_radix",
    "column_default",
    "character_octet_length",
    "is_nullable",
    "is_generated",
)
# Object sub-columns (``obj['key']`` and ``obj.key``) are not reported.
SUB_COLUMN_FILTER = "column_name NOT LIKE '%[%]' AND column_name NOT LIKE '%.%'"


@dataclass(frozen=True)
class CatalogQuery:
    kind: ObjectKind
    form: QueryForm
    sql: str
    columns: Tuple[str, ...]
    version: EngineVersion
    schema_column: str


class CatalogQueryBuilder:
    """
    Compose the SQL answering one catalog lookup for the connected engine version.

    The version picks the query form and the schema column from the dispatch
    table in :mod:`cratemeta.catalog.strategies`; caller patterns only ever
    reach the SQL text as escaped literals.
    """

    def __init__(self, context: "CatalogContext") -> None:
        self.context = context
        self.logger = get_logger("catalog.queries")

    def build(
        self,
        kind: ObjectKind | str,
        *,
        schema_pattern: Optional[str] = None,
        table_pattern: Optional[str] = None,
        column_pattern: Optional[str] = None,
        types: Optional[Iterable[str]] = None,
    ) -> CatalogQuery:
        kind = ObjectKind(kind)
        version = self.context.engine_version()
        schema_column = schema_column_for(version)

        if kind is ObjectKind.TABLES:
            form, fragment = self._tables(version, schema_column, schema_pattern, table_pattern, types)
        elif kind is ObjectKind.COLUMNS:
            form, fragment = self._columns(version, schema_column, schema_pattern, table_pattern, column_pattern)
        elif kind is ObjectKind.PRIMARY_KEYS:
            form, fragment = self._primary_keys(version, schema_column, schema_pattern, table_pattern)
        else:
            form, fragment = QueryForm.SCHEMAS, self._schemas(schema_pattern)

        sql = fragment.render(self.context.dialect)
        self.logger.debug("Built %s query (%s) for engine %s", kind.value, form.value, version)
        return CatalogQuery(
            kind=kind,
            form=form,
            sql=sql,
            columns=ROW_TYPES[kind]._fields,
            version=version,
            schema_column=schema_column,
        )

    # ------------------------------------------------------------------ #
    # Query forms
    # ------------------------------------------------------------------ #
    def _tables(
        self,
        version: EngineVersion,
        schema_column: str,
        schema_pattern: Optional[str],
        table_pattern: Optional[str],
        types: Optional[Iterable[str]],
    ) -> Tuple[QueryForm, SqlFragment]:
        form = TABLES_FORM.select(version)
        select_list = [schema_column, "table_name"]
        if form is QueryForm.TABLES_EXTENDED:
            select_list.extend(EXTENDED_TABLE_COLUMNS)
        condition = conjoin(
            build_predicate(schema_column, schema_pattern),
            self._optional_predicate("table_name", table_pattern),
            self._table_kind_filter(types, form is QueryForm.TABLES_EXTENDED, schema_column),
        )
        builder = (
            SqlBuilder()
            .add("SELECT " + ", ".join(select_list))
            .add("FROM information_schema.tables")
            .where(condition)
            .order_by(schema_column, "table_name")
        )
        return form, builder.build()

    def _columns(
        self,
        version: EngineVersion,
        schema_column: str,
        schema_pattern: Optional[str],
        table_pattern: Optional[str],
        column_pattern: Optional[str],
    ) -> Tuple[QueryForm, SqlFragment]:
        form = COLUMNS_FORM.select(version)
        select_list = [schema_column, "table_name", "column_name", "data_type", "ordinal_position"]
        if form is QueryForm.COLUMNS_EXTENDED:
            select_list.extend(EXTENDED_COLUMN_COLUMNS)
        condition = conjoin(
            build_predicate(schema_column, schema_pattern),
            self._optional_predicate("table_name", table_pattern),
            self._optional_predicate("column_name", column_pattern),
            SqlFragment.trusted(SUB_COLUMN_FILTER),
        )
        builder = (
            SqlBuilder()
            .add("SELECT " + ", ".join(select_list))
            .add("FROM information_schema.columns")
            .where(condition)
            .order_by(schema_column, "table_name", "ordinal_position")
        )
        return form, builder.build()

    def _primary_keys(
        self,
        version: EngineVersion,
        schema_column: str,
        schema: Optional[str],
        table: Optional[str],
    ) -> Tuple[QueryForm, SqlFragment]:
        if table is None:
            raise ValueError("Primary key lookups need an exact table name.")
        form = PRIMARY_KEYS_FORM.select(version)
        if form is QueryForm.PRIMARY_KEYS_CONSTRAINT_ARRAY:
            condition = conjoin(
                SqlFragment.trusted("'_id' != ANY(constraint_name)"),
                build_equality("table_name", table),
                build_equality(schema_column, schema) if schema is not None else None,
            )
            builder = (
                SqlBuilder()
                .add(
                    "SELECT NULL AS TABLE_CAT, "
                    f"{schema_column} AS TABLE_SCHEM, "
                    "table_name AS TABLE_NAME, "
                    "constraint_name AS COLUMN_NAMES, "
                    "0 AS KEY_SEQ, "
                    "NULL AS PK_NAME"
                )
                .add("FROM information_schema.table_constraints")
                .where(condition)
                .order_by("TABLE_SCHEM", "TABLE_NAME")
            )
            return form, builder.build()

        schema_field = "kcu." + PK_SCHEMA_FIELD.select(version)
        catalog_field = PK_CATALOG_FIELD.select(version)
        condition = conjoin(
            build_equality("kcu.table_name", table),
            build_equality(schema_field, schema) if schema is not None else None,
        )
        builder = (
            SqlBuilder()
            .add(
                f'SELECT {catalog_field} AS "TABLE_CAT", '
                f'{schema_field} AS "TABLE_SCHEM", '
                'kcu.table_name AS "TABLE_NAME", '
                'kcu.column_name AS "COLUMN_NAME", '
                'kcu.ordinal_position AS "KEY_SEQ", '
                'kcu.constraint_name AS "PK_NAME"'
            )
            .add("FROM information_schema.key_column_usage kcu")
            .where(condition)
            .order_by('"TABLE_SCHEM"', '"TABLE_NAME"', '"KEY_SEQ"')
        )
        return form, builder.build()

    def _schemas(self, schema_pattern: Optional[str]) -> SqlFragment:
        builder = (
            SqlBuilder()
            .add("SELECT schema_name FROM information_schema.schemata")
            .where(self._optional_predicate("schema_name", schema_pattern))
            .order_by("schema_name")
        )
        return builder.build()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _optional_predicate(column: str, pattern: Optional[str]) -> Optional[SqlFragment]:
        if pattern is None:
            return None
        return build_predicate(column, pattern)

    def _table_kind_filter(
        self,
        types: Optional[Iterable[str]],
        typed_catalog: bool,
        schema_column: str,
    ) -> Optional[SqlFragment]:
        if types is None:
            return None
        if isinstance(types, str):
            types = [types]
        clauses: List[str] = []
        for kind in types:
            clause = table_kind_predicate(kind, typed_catalog, schema_column)
            if clause is None:
                self.logger.debug("Ignoring unsupported table kind %r", kind)
            elif clause not in clauses:
                clauses.append(clause)
        if not clauses:
            return SqlFragment.trusted(MATCH_NOTHING)
        if len(clauses) == 1:
            return SqlFragment.trusted(clauses[0])
        return SqlFragment.trusted("(" + " OR ".join(clauses) + ")")
