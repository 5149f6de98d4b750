from cratemeta.catalog.models import ColumnRow, ObjectKind, PrimaryKeyRow, TableRow
from cratemeta.catalog.projection import ResultProjector, rows_from_cursor
from cratemeta.catalog.queries import CatalogQuery
from cratemeta.catalog.strategies import QueryForm
from cratemeta.catalog.types import StandardType
from cratemeta.engine.version import EngineVersion


def _query(kind, form, version="5.4.0", schema_column="table_schema"):
    return CatalogQuery(
        kind=kind,
        form=form,
        sql="",
        columns=(),
        version=EngineVersion.parse(version),
        schema_column=schema_column,
    )


class DescribedCursor:
    description = [("TABLE_SCHEM",), ("Table_Name",)]

    def fetchall(self):
        return [("doc", "t1"), ("sys", "nodes")]


def test_rows_from_cursor_lowercases_names():
    assert rows_from_cursor(DescribedCursor()) == [
        {"table_schem": "doc", "table_name": "t1"},
        {"table_schem": "sys", "table_name": "nodes"},
    ]


def test_legacy_tables_are_back_filled():
    projector = ResultProjector(adapter=None)
    rows = projector.project(
        _query(ObjectKind.TABLES, QueryForm.TABLES_LEGACY, "0.55.0", "schema_name"),
        [{"schema_name": "sys", "table_name": "nodes"}, {"schema_name": "doc", "table_name": "t1"}],
    )
    assert rows == [
        TableRow(None, "sys", "nodes", "SYSTEM TABLE", "", None, None, None, "_id", "SYSTEM"),
        TableRow(None, "doc", "t1", "TABLE", "", None, None, None, "_id", "SYSTEM"),
    ]


def test_extended_tables_map_kinds_and_generation():
    projector = ResultProjector(adapter=None)
    raw = [
        {
            "table_schema": "doc",
            "table_name": "v1",
            "table_catalog": "crate",
            "table_type": "VIEW",
            "self_referencing_column_name": None,
            "reference_generation": "USER GENERATED",
        },
        {
            "table_schema": "doc",
            "table_name": "t1",
            "table_catalog": "crate",
            "table_type": "BASE TABLE",
            "self_referencing_column_name": "_id",
            "reference_generation": "SOMETHING NEW",
        },
    ]
    rows = projector.project(_query(ObjectKind.TABLES, QueryForm.TABLES_EXTENDED), raw)
    assert rows[0].table_type == "VIEW"
    assert rows[0].ref_generation == "USER"
    assert rows[1].table_type == "TABLE"
    assert rows[1].ref_generation is None
    assert rows[1].table_cat == "crate"


def test_legacy_columns_use_sentinels():
    projector = ResultProjector(adapter=None)
    rows = projector.project(
        _query(ObjectKind.COLUMNS, QueryForm.COLUMNS_LEGACY, "1.0.0"),
        [{"table_schema": "doc", "table_name": "t", "column_name": "c", "data_type": "ip", "ordinal_position": 1}],
    )
    assert rows == [
        ColumnRow(
            None, "doc", "t", "c", StandardType.VARCHAR, "ip", None, None, 10, 1, None, None, 1, "YES", "NO"
        )
    ]


def test_extended_columns_boolean_generated_form():
    projector = ResultProjector(adapter=None)
    raw = {
        "table_schema": "doc",
        "table_name": "t",
        "column_name": "c",
        "data_type": "frobnicate",
        "ordinal_position": "3",
        "table_catalog": "doc",
        "numeric_precision": None,
        "numeric_precision_radix": None,
        "column_default": None,
        "character_octet_length": None,
        "is_nullable": False,
        "is_generated": True,
    }
    (row,) = projector.project(_query(ObjectKind.COLUMNS, QueryForm.COLUMNS_EXTENDED, "3.3.0"), [raw])
    assert row.data_type is StandardType.OTHER
    assert row.ordinal_position == 3
    assert row.nullable == 0
    assert row.is_nullable == "NO"
    assert row.is_generatedcolumn == "YES"


def test_extended_columns_text_generated_form():
    projector = ResultProjector(adapter=None)
    base = {
        "table_schema": "doc",
        "table_name": "t",
        "data_type": "long",
        "table_catalog": "crate",
        "numeric_precision": 64,
        "numeric_precision_radix": 2,
        "column_default": None,
        "character_octet_length": None,
        "is_nullable": True,
    }
    raw = [
        dict(base, column_name="a", ordinal_position=1, is_generated="NEVER"),
        dict(base, column_name="b", ordinal_position=2, is_generated="ALWAYS"),
        dict(base, column_name="c", ordinal_position=3, is_generated="BY DEFAULT"),
        dict(base, column_name="d", ordinal_position=4, is_generated=" always "),
    ]
    rows = projector.project(_query(ObjectKind.COLUMNS, QueryForm.COLUMNS_EXTENDED, "4.0.0"), raw)
    assert [row.is_generatedcolumn for row in rows] == ["NO", "YES", "NO", "YES"]
    assert rows[0].decimal_digits == 64
    assert rows[0].num_prec_radix == 2


def test_constraint_array_keys_are_zero_based():
    projector = ResultProjector(adapter=None)
    raw = [
        {
            "table_cat": None,
            "table_schem": "doc",
            "table_name": "t",
            "column_names": ["region", "id"],
            "key_seq": 0,
            "pk_name": None,
        }
    ]
    rows = projector.project(_query(ObjectKind.PRIMARY_KEYS, QueryForm.PRIMARY_KEYS_CONSTRAINT_ARRAY, "2.1.0"), raw)
    assert rows == [
        PrimaryKeyRow(None, "doc", "t", "region", 0, None),
        PrimaryKeyRow(None, "doc", "t", "id", 1, None),
    ]


def test_constraint_array_text_literal_is_split():
    projector = ResultProjector(adapter=None)
    raw = [{"table_schem": "doc", "table_name": "t", "column_names": "{a,b}"}]
    rows = projector.project(_query(ObjectKind.PRIMARY_KEYS, QueryForm.PRIMARY_KEYS_CONSTRAINT_ARRAY, "2.1.0"), raw)
    assert [(row.column_name, row.key_seq) for row in rows] == [("a", 0), ("b", 1)]


def test_run_executes_sql_through_adapter(canned_adapter):
    adapter = canned_adapter(rows=[("doc",), ("sys",)], columns=["schema_name"])
    projector = ResultProjector(adapter)
    query = CatalogQuery(
        kind=ObjectKind.SCHEMAS,
        form=QueryForm.SCHEMAS,
        sql="SELECT schema_name FROM information_schema.schemata ORDER BY schema_name",
        columns=(),
        version=EngineVersion(5, 4, 0),
        schema_column="table_schema",
    )
    rows = projector.run(query)
    assert [row.table_schem for row in rows] == ["doc", "sys"]
    assert all(row.table_catalog is None for row in rows)
    assert adapter.statements == [query.sql]
