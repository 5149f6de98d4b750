"""
Projection of raw catalog rows onto the fixed output row shapes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..utils import get_logger
from .models import ColumnRow, PrimaryKeyRow, SchemaRow, TableRow
from .queries import CatalogQuery
from .strategies import (
    GENERATED_ALWAYS,
    GENERATED_FORM,
    GeneratedForm,
    QueryForm,
    extended_table_kind,
    legacy_table_kind,
    reference_generation,
)
from .types import map_native_type

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter

RawRow = Mapping[str, Any]

COLUMN_NULLABLE = 1
COLUMN_NO_NULLS = 0
LEGACY_RADIX = 10
LEGACY_SELF_REFERENCING_COLUMN = "_id"
LEGACY_REFERENCE_GENERATION = "SYSTEM"


def rows_from_cursor(cursor: Any) -> List[Dict[str, Any]]:
    """
    Drain ``cursor`` into dictionaries keyed by lower-cased column name.
    """
    raw_rows = cursor.fetchall()
    if not raw_rows:
        return []
    names: Optional[List[str]] = None
    if getattr(cursor, "description", None):
        names = [str(column[0]).lower() for column in cursor.description]
    rows: List[Dict[str, Any]] = []
    for row in raw_rows:
        if hasattr(row, "keys"):
            rows.append({str(key).lower(): row[key] for key in row.keys()})
        elif names is not None:
            rows.append({name: row[idx] for idx, name in enumerate(names)})
        else:
            raise ValueError("Unable to map catalog row to column names.")
    return rows


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("t", "true", "yes", "y", "1", "on")
    return bool(value)


def _yes_no(value: Any) -> str:
    return "YES" if _truthy(value) else "NO"


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        inner = value.strip()
        if inner.startswith("{") and inner.endswith("}"):
            inner = inner[1:-1]
        return [part.strip().strip('"') for part in inner.split(",") if part.strip()]
    return [str(item) for item in value]


class ResultProjector:
    """
    Execute a :class:`CatalogQuery` and map its rows onto the output contract.

    Projection dispatches on the query form; positions the form cannot fill
    get the documented sentinel and type codes always come from
    :func:`map_native_type`.
    """

    def __init__(self, adapter: "DatabaseAdapter") -> None:
        self.adapter = adapter
        self.logger = get_logger("catalog.projection")
        self._projectors: Dict[QueryForm, Callable[[CatalogQuery, Sequence[RawRow]], List[Any]]] = {
            QueryForm.TABLES_LEGACY: self._legacy_tables,
            QueryForm.TABLES_EXTENDED: self._extended_tables,
            QueryForm.COLUMNS_LEGACY: self._legacy_columns,
            QueryForm.COLUMNS_EXTENDED: self._extended_columns,
            QueryForm.PRIMARY_KEYS_CONSTRAINT_ARRAY: self._constraint_array_keys,
            QueryForm.PRIMARY_KEYS_KEY_COLUMN_USAGE: self._key_column_usage_keys,
            QueryForm.SCHEMAS: self._schemas,
        }

    def run(self, query: CatalogQuery) -> List[Any]:
        cursor = self.adapter.execute(query.sql)
        rows = rows_from_cursor(cursor)
        projected = self.project(query, rows)
        self.logger.debug("Projected %d %s rows (%s)", len(projected), query.kind.value, query.form.value)
        return projected

    def project(self, query: CatalogQuery, rows: Iterable[RawRow]) -> List[Any]:
        return self._projectors[query.form](query, list(rows))

    # ------------------------------------------------------------------ #
    # TABLES
    # ------------------------------------------------------------------ #
    def _legacy_tables(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[TableRow]:
        result = []
        for row in rows:
            schema = row[query.schema_column]
            result.append(
                TableRow(
                    table_cat=None,
                    table_schem=schema,
                    table_name=row["table_name"],
                    table_type=legacy_table_kind(schema),
                    remarks="",
                    type_cat=None,
                    type_schem=None,
                    type_name=None,
                    self_referencing_col_name=LEGACY_SELF_REFERENCING_COLUMN,
                    ref_generation=LEGACY_REFERENCE_GENERATION,
                )
            )
        return result

    def _extended_tables(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[TableRow]:
        result = []
        for row in rows:
            schema = row[query.schema_column]
            result.append(
                TableRow(
                    table_cat=row.get("table_catalog"),
                    table_schem=schema,
                    table_name=row["table_name"],
                    table_type=extended_table_kind(row.get("table_type"), schema),
                    remarks="",
                    type_cat=None,
                    type_schem=None,
                    type_name=None,
                    self_referencing_col_name=row.get("self_referencing_column_name"),
                    ref_generation=reference_generation(row.get("reference_generation")),
                )
            )
        return result

    # ------------------------------------------------------------------ #
    # COLUMNS
    # ------------------------------------------------------------------ #
    def _legacy_columns(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[ColumnRow]:
        result = []
        for row in rows:
            native = row.get("data_type")
            result.append(
                ColumnRow(
                    table_cat=None,
                    table_schem=row[query.schema_column],
                    table_name=row["table_name"],
                    column_name=row["column_name"],
                    data_type=map_native_type(native),
                    type_name=native,
                    column_size=None,
                    decimal_digits=None,
                    num_prec_radix=LEGACY_RADIX,
                    nullable=COLUMN_NULLABLE,
                    remarks=None,
                    column_def=None,
                    ordinal_position=int(row["ordinal_position"]),
                    is_nullable="YES",
                    is_generatedcolumn="NO",
                )
            )
        return result

    def _extended_columns(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[ColumnRow]:
        generated_form = GENERATED_FORM.select(query.version)
        result = []
        for row in rows:
            native = row.get("data_type")
            nullable = _truthy(row.get("is_nullable"))
            result.append(
                ColumnRow(
                    table_cat=row.get("table_catalog"),
                    table_schem=row[query.schema_column],
                    table_name=row["table_name"],
                    column_name=row["column_name"],
                    data_type=map_native_type(native),
                    type_name=native,
                    column_size=_as_int(row.get("character_octet_length")),
                    decimal_digits=_as_int(row.get("numeric_precision")),
                    num_prec_radix=_as_int(row.get("numeric_precision_radix")),
                    nullable=COLUMN_NULLABLE if nullable else COLUMN_NO_NULLS,
                    remarks=None,
                    column_def=row.get("column_default"),
                    ordinal_position=int(row["ordinal_position"]),
                    is_nullable="YES" if nullable else "NO",
                    is_generatedcolumn=self._generated(generated_form, row.get("is_generated")),
                )
            )
        return result

    @staticmethod
    def _generated(form: GeneratedForm, value: Any) -> str:
        if form is GeneratedForm.BOOLEAN:
            return _yes_no(value)
        if value is None:
            return "NO"
        return "YES" if str(value).strip().upper() == GENERATED_ALWAYS else "NO"

    # ------------------------------------------------------------------ #
    # PRIMARY_KEYS
    # ------------------------------------------------------------------ #
    def _constraint_array_keys(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[PrimaryKeyRow]:
        result = []
        for row in rows:
            # Key sequence is the 0-based position inside the constraint array.
            for position, column in enumerate(_as_list(row.get("column_names"))):
                result.append(
                    PrimaryKeyRow(
                        table_cat=row.get("table_cat"),
                        table_schem=row.get("table_schem"),
                        table_name=row["table_name"],
                        column_name=column,
                        key_seq=position,
                        pk_name=row.get("pk_name"),
                    )
                )
        return result

    def _key_column_usage_keys(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[PrimaryKeyRow]:
        return [
            PrimaryKeyRow(
                table_cat=row.get("table_cat"),
                table_schem=row.get("table_schem"),
                table_name=row["table_name"],
                column_name=row["column_name"],
                key_seq=int(row["key_seq"]),
                pk_name=row.get("pk_name"),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------ #
    # SCHEMAS
    # ------------------------------------------------------------------ #
    def _schemas(self, query: CatalogQuery, rows: Sequence[RawRow]) -> List[SchemaRow]:
        return [SchemaRow(table_schem=row["schema_name"], table_catalog=None) for row in rows]
