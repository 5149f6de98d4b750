"""
Public catalog metadata facade.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional

from ..engine.context import CatalogContext
from ..engine.version import EngineVersion
from ..utils import get_logger, time_call
from .acl import PrivilegeGrantMap, TablePrivilegeRow, decode_acl, grant_rows
from .models import ColumnRow, ObjectKind, PrimaryKeyRow, SchemaRow, TableRow
from .projection import ResultProjector
from .queries import CatalogQueryBuilder
from .strategies import DEFAULT_ACL_PRIVILEGES, TABLE_TYPES
from .types import TYPE_INFO, TypeInfoRow

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter


class CatalogMetadata:
    """
    Answers structural questions about a connected engine.

    Each lookup resolves the engine version once per connection, builds the
    version-specific catalog query, runs it through the adapter and returns
    fixed-shape rows.
    """

    def __init__(self, adapter: "DatabaseAdapter", *, context: CatalogContext | None = None) -> None:
        self.adapter = adapter
        self.context = context or CatalogContext(adapter)
        self.queries = CatalogQueryBuilder(self.context)
        self.projector = ResultProjector(adapter)
        self.logger = get_logger("catalog.metadata")

    # ------------------------------------------------------------------ #
    # Catalog lookups
    # ------------------------------------------------------------------ #
    def get_tables(
        self,
        schema_pattern: Optional[str] = None,
        table_pattern: Optional[str] = None,
        types: Optional[Iterable[str]] = None,
    ) -> List[TableRow]:
        return self._lookup(
            ObjectKind.TABLES,
            schema_pattern=schema_pattern,
            table_pattern=table_pattern,
            types=types,
        )

    def get_columns(
        self,
        schema_pattern: Optional[str] = None,
        table_pattern: Optional[str] = None,
        column_pattern: Optional[str] = None,
    ) -> List[ColumnRow]:
        return self._lookup(
            ObjectKind.COLUMNS,
            schema_pattern=schema_pattern,
            table_pattern=table_pattern,
            column_pattern=column_pattern,
        )

    def get_primary_keys(self, table: str, schema: Optional[str] = None) -> List[PrimaryKeyRow]:
        """
        Primary key columns of ``table``; ``schema=None`` searches every schema.

        Both arguments are exact names, not patterns.
        """
        return self._lookup(ObjectKind.PRIMARY_KEYS, schema_pattern=schema, table_pattern=table)

    def get_schemas(self, schema_pattern: Optional[str] = None) -> List[SchemaRow]:
        return self._lookup(ObjectKind.SCHEMAS, schema_pattern=schema_pattern)

    def get_catalogs(self) -> List[str]:
        return []

    def get_table_types(self) -> List[str]:
        return list(TABLE_TYPES)

    def get_type_info(self) -> List[TypeInfoRow]:
        return list(TYPE_INFO)

    # ------------------------------------------------------------------ #
    # Privileges
    # ------------------------------------------------------------------ #
    def parse_acl(self, acl_array: Optional[str], owner: str) -> PrivilegeGrantMap:
        default_privileges = ""
        if acl_array is None:
            default_privileges = DEFAULT_ACL_PRIVILEGES.select(self.context.server_version())
        return decode_acl(acl_array, owner, default_privileges=default_privileges)

    def get_table_privileges(
        self,
        table: str,
        acl_array: Optional[str],
        owner: str,
        schema: Optional[str] = None,
    ) -> List[TablePrivilegeRow]:
        return grant_rows(self.parse_acl(acl_array, owner), schema, table)

    # ------------------------------------------------------------------ #
    # Session constants
    # ------------------------------------------------------------------ #
    def engine_version(self) -> EngineVersion:
        return self.context.engine_version()

    def max_name_length(self) -> int:
        return self.context.max_name_length()

    def max_index_keys(self) -> int:
        return self.context.max_index_keys()

    # ------------------------------------------------------------------ #
    def _lookup(self, kind: ObjectKind, **filters) -> list:
        query = self.queries.build(kind, **filters)
        with time_call(
            f"catalog.{kind.value.lower()}",
            self.logger,
            sql=query.sql,
            threshold_ms=self.adapter.slow_query_ms,
        ):
            rows = self.projector.run(query)
        return rows
