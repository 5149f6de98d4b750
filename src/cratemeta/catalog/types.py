"""
Native engine type names mapped onto standard SQL type codes.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, NamedTuple, Optional, Tuple


class StandardType(IntEnum):
    """
    Numeric type codes as used by ``java.sql.Types`` and most SQL tooling.
    """

    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    TIMESTAMP = 93
    STRUCT = 2002
    ARRAY = 2003
    OTHER = 1111


ARRAY_SUFFIX = "_array"

NATIVE_TYPES: Dict[str, StandardType] = {
    "byte": StandardType.TINYINT,
    '"char"': StandardType.TINYINT,
    "short": StandardType.SMALLINT,
    "smallint": StandardType.SMALLINT,
    "integer": StandardType.INTEGER,
    "int": StandardType.INTEGER,
    "long": StandardType.BIGINT,
    "bigint": StandardType.BIGINT,
    "float": StandardType.REAL,
    "real": StandardType.REAL,
    "double": StandardType.DOUBLE,
    "double precision": StandardType.DOUBLE,
    "string": StandardType.VARCHAR,
    "text": StandardType.VARCHAR,
    "varchar": StandardType.VARCHAR,
    "character varying": StandardType.VARCHAR,
    "ip": StandardType.VARCHAR,
    "boolean": StandardType.BOOLEAN,
    "timestamp": StandardType.TIMESTAMP,
    "timestamp with time zone": StandardType.TIMESTAMP,
    "timestamp without time zone": StandardType.TIMESTAMP,
    "object": StandardType.STRUCT,
}


def map_native_type(name: Optional[str]) -> StandardType:
    """
    Map a native type name to its standard code; never raises.

    Lookup ignores case and surrounding whitespace. Any ``<base>_array`` name
    is an ARRAY whatever its base. Unknown names fall back to OTHER.
    """
    if not isinstance(name, str):
        return StandardType.OTHER
    key = name.strip().lower()
    code = NATIVE_TYPES.get(key)
    if code is not None:
        return code
    if key.endswith(ARRAY_SUFFIX) and len(key) > len(ARRAY_SUFFIX):
        return StandardType.ARRAY
    return StandardType.OTHER


# Searchability and nullability codes of the type-info contract.
TYPE_NULLABLE = 1
PRED_NONE = 0
PRED_BASIC = 2
SEARCHABLE = 3


class TypeInfoRow(NamedTuple):
    type_name: str
    data_type: StandardType
    precision: Optional[int]
    literal_prefix: Optional[str]
    literal_suffix: Optional[str]
    create_params: Optional[str]
    nullable: int
    case_sensitive: bool
    searchable: int
    unsigned_attribute: bool
    fixed_prec_scale: bool
    auto_increment: bool
    local_type_name: str
    minimum_scale: int
    maximum_scale: int
    sql_data_type: Optional[int]
    sql_datetime_sub: Optional[int]
    num_prec_radix: int


def _type_info(
    name: str,
    precision: Optional[int] = None,
    *,
    case_sensitive: bool = False,
    searchable: int = PRED_BASIC,
    maximum_scale: int = 0,
) -> TypeInfoRow:
    return TypeInfoRow(
        type_name=name,
        data_type=map_native_type(name),
        precision=precision,
        literal_prefix=None,
        literal_suffix=None,
        create_params=None,
        nullable=TYPE_NULLABLE,
        case_sensitive=case_sensitive,
        searchable=searchable,
        unsigned_attribute=True,
        fixed_prec_scale=False,
        auto_increment=False,
        local_type_name=name,
        minimum_scale=0,
        maximum_scale=maximum_scale,
        sql_data_type=None,
        sql_datetime_sub=None,
        num_prec_radix=10,
    )


ARRAY_ELEMENT_TYPES = ("string", "ip", "long", "integer", "short", "boolean", "byte", "float", "double", "object")

TYPE_INFO: Tuple[TypeInfoRow, ...] = (
    _type_info("byte", 3),
    _type_info("long", 19),
    _type_info("integer", 10),
    _type_info("short", 5),
    _type_info("float", 7, maximum_scale=6),
    _type_info("double", 15, maximum_scale=14),
    _type_info("string", case_sensitive=True, searchable=SEARCHABLE),
    _type_info("ip", 15, searchable=SEARCHABLE),
    _type_info("boolean"),
    _type_info("timestamp", case_sensitive=True),
    _type_info("object", searchable=PRED_NONE),
) + tuple(_type_info(base + ARRAY_SUFFIX, searchable=PRED_NONE) for base in ARRAY_ELEMENT_TYPES)
