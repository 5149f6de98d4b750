"""
cratemeta public package initialization.

Catalog metadata resolution for CrateDB: tables, columns, primary keys,
schemas and privileges, independent of the connected engine version.
"""

from .adapters import ConnectionConfig, CrateAdapter, DatabaseAdapter  # noqa: F401
from .catalog import (  # noqa: F401
    CatalogMetadata,
    CatalogQueryBuilder,
    ColumnRow,
    ObjectKind,
    PrimaryKeyRow,
    Privilege,
    PrivilegeGrantMap,
    ResultProjector,
    SchemaRow,
    StandardType,
    TableRow,
    decode_acl,
    map_native_type,
)
from .engine import CatalogContext, EngineVersion, VersionOracle  # noqa: F401
from .errors import CatalogError, CatalogUnavailable, MalformedAclEntry  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "CatalogMetadata",
    "CatalogContext",
    "CatalogQueryBuilder",
    "ResultProjector",
    "VersionOracle",
    "EngineVersion",
    "ObjectKind",
    "TableRow",
    "ColumnRow",
    "PrimaryKeyRow",
    "SchemaRow",
    "StandardType",
    "Privilege",
    "PrivilegeGrantMap",
    "decode_acl",
    "map_native_type",
    "ConnectionConfig",
    "CrateAdapter",
    "DatabaseAdapter",
    "CatalogError",
    "CatalogUnavailable",
    "MalformedAclEntry",
]
