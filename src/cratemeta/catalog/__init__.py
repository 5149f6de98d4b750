"""
Catalog metadata resolution: query generation, projection, type and ACL decoding.
"""

from .acl import (
    AclEntry,
    Grant,
    Privilege,
    PrivilegeGrantMap,
    TablePrivilegeRow,
    decode_acl,
    decode_acl_entry,
    grant_rows,
    split_acl_array,
)
from .metadata import CatalogMetadata
from .models import ColumnRow, ObjectKind, PrimaryKeyRow, SchemaRow, TableRow
from .patterns import build_equality, build_predicate, conjoin
from .projection import ResultProjector
from .queries import CatalogQuery, CatalogQueryBuilder
from .sql import Literal, SqlBuilder, SqlFragment, Trusted
from .strategies import QueryForm, schema_column_for
from .types import TYPE_INFO, StandardType, TypeInfoRow, map_native_type

__all__ = [
    "AclEntry",
    "CatalogMetadata",
    "CatalogQuery",
    "CatalogQueryBuilder",
    "ColumnRow",
    "Grant",
    "Literal",
    "ObjectKind",
    "PrimaryKeyRow",
    "Privilege",
    "PrivilegeGrantMap",
    "QueryForm",
    "ResultProjector",
    "SchemaRow",
    "SqlBuilder",
    "SqlFragment",
    "StandardType",
    "TYPE_INFO",
    "TablePrivilegeRow",
    "TableRow",
    "Trusted",
    "TypeInfoRow",
    "build_equality",
    "build_predicate",
    "conjoin",
    "decode_acl",
    "decode_acl_entry",
    "grant_rows",
    "map_native_type",
    "schema_column_for",
    "split_acl_array",
]
