import pytest

from cratemeta.catalog.models import ObjectKind
from cratemeta.catalog.queries import CatalogQueryBuilder
from cratemeta.catalog.strategies import QueryForm
from cratemeta.engine import CatalogContext
from cratemeta.engine.version import EngineVersion
from cratemeta.errors import CatalogUnavailable


def _builder(canned_adapter, version):
    return CatalogQueryBuilder(CatalogContext(canned_adapter(engine_version=version)))


def test_schema_column_follows_version(canned_adapter):
    old = _builder(canned_adapter, "0.56.4").build(ObjectKind.TABLES)
    new = _builder(canned_adapter, "0.57.0").build(ObjectKind.TABLES)
    assert old.schema_column == "schema_name"
    assert "SELECT schema_name, table_name FROM" in old.sql
    assert new.schema_column == "table_schema"
    assert new.version == EngineVersion(0, 57, 0)


def test_legacy_tables_query(canned_adapter):
    query = _builder(canned_adapter, "1.2.0").build(ObjectKind.TABLES, schema_pattern="test", table_pattern="widg%")
    assert query.form is QueryForm.TABLES_LEGACY
    assert query.sql == (
        "SELECT table_schema, table_name FROM information_schema.tables "
        "WHERE table_schema LIKE 'test' AND table_name LIKE 'widg%' "
        "ORDER BY table_schema, table_name"
    )


def test_extended_tables_query_selects_catalog_columns(canned_adapter):
    query = _builder(canned_adapter, "2.0.0").build(ObjectKind.TABLES)
    assert query.form is QueryForm.TABLES_EXTENDED
    assert query.sql.startswith(
        "SELECT table_schema, table_name, table_catalog, table_type, "
        "self_referencing_column_name, reference_generation FROM information_schema.tables"
    )
    assert "WHERE table_schema LIKE '%' ORDER BY" in query.sql
    assert query.columns[0] == "table_cat"


def test_empty_schema_pattern_means_no_schema(canned_adapter):
    query = _builder(canned_adapter, "5.0.0").build(ObjectKind.TABLES, schema_pattern="")
    assert "WHERE table_schema IS NULL ORDER BY" in query.sql


def test_table_kinds_filter(canned_adapter):
    query = _builder(canned_adapter, "5.0.0").build(ObjectKind.TABLES, types=["TABLE", "view", "BOGUS"])
    assert "table_type = 'BASE TABLE' AND table_schema NOT IN ('information_schema', 'pg_catalog', 'sys')" in query.sql
    assert "OR (table_type = 'VIEW'" in query.sql
    assert "BOGUS" not in query.sql


def test_only_unknown_kinds_match_nothing(canned_adapter):
    query = _builder(canned_adapter, "5.0.0").build(ObjectKind.TABLES, types=["SEQUENCE"])
    assert "AND 1 = 0" in query.sql


def test_legacy_catalog_ignores_view_kinds(canned_adapter):
    query = _builder(canned_adapter, "1.0.0").build(ObjectKind.TABLES, types=["VIEW"])
    assert "1 = 0" in query.sql
    query = _builder(canned_adapter, "1.0.0").build(ObjectKind.TABLES, types=["SYSTEM TABLE"])
    assert "table_schema IN ('information_schema', 'pg_catalog', 'sys')" in query.sql
    assert "table_type" not in query.sql


def test_columns_query_excludes_sub_columns(canned_adapter):
    query = _builder(canned_adapter, "4.2.0").build(
        ObjectKind.COLUMNS, schema_pattern="test", table_pattern="widgets", column_pattern="%"
    )
    assert query.form is QueryForm.COLUMNS_EXTENDED
    assert "is_generated FROM information_schema.columns" in query.sql
    assert (
        "WHERE table_schema LIKE 'test' AND table_name LIKE 'widgets' AND column_name LIKE '%' "
        "AND column_name NOT LIKE '%[%]' AND column_name NOT LIKE '%.%' "
        "ORDER BY table_schema, table_name, ordinal_position"
    ) in query.sql


def test_legacy_columns_query(canned_adapter):
    query = _builder(canned_adapter, "1.9.9").build(ObjectKind.COLUMNS)
    assert query.form is QueryForm.COLUMNS_LEGACY
    assert query.sql.startswith(
        "SELECT table_schema, table_name, column_name, data_type, ordinal_position FROM information_schema.columns"
    )


def test_primary_keys_constraint_array_form(canned_adapter):
    query = _builder(canned_adapter, "2.2.9").build(
        ObjectKind.PRIMARY_KEYS, schema_pattern="doc", table_pattern="o'brien"
    )
    assert query.form is QueryForm.PRIMARY_KEYS_CONSTRAINT_ARRAY
    assert "FROM information_schema.table_constraints" in query.sql
    assert "WHERE '_id' != ANY(constraint_name) AND table_name = 'o''brien' AND table_schema = 'doc'" in query.sql
    assert query.sql.endswith("ORDER BY TABLE_SCHEM, TABLE_NAME")


@pytest.mark.parametrize(
    "version, schema_field, catalog_field",
    [
        ("2.3.0", "kcu.table_catalog", "NULL"),
        ("3.0.0", "kcu.table_catalog", "NULL"),
        ("3.0.1", "kcu.table_schema", "NULL"),
        ("5.0.9", "kcu.table_schema", "NULL"),
        ("5.1.0", "kcu.table_schema", "kcu.table_catalog"),
    ],
)
def test_primary_keys_join_form_fields(canned_adapter, version, schema_field, catalog_field):
    query = _builder(canned_adapter, version).build(ObjectKind.PRIMARY_KEYS, schema_pattern="doc", table_pattern="t")
    assert query.form is QueryForm.PRIMARY_KEYS_KEY_COLUMN_USAGE
    assert query.sql.startswith(f'SELECT {catalog_field} AS "TABLE_CAT", {schema_field} AS "TABLE_SCHEM"')
    assert f"WHERE kcu.table_name = 't' AND {schema_field} = 'doc'" in query.sql
    assert query.sql.endswith('ORDER BY "TABLE_SCHEM", "TABLE_NAME", "KEY_SEQ"')


def test_primary_keys_without_schema_search_all(canned_adapter):
    query = _builder(canned_adapter, "5.4.0").build(ObjectKind.PRIMARY_KEYS, table_pattern="t")
    assert "kcu.table_schema =" not in query.sql


def test_primary_keys_need_table(canned_adapter):
    with pytest.raises(ValueError):
        _builder(canned_adapter, "5.4.0").build(ObjectKind.PRIMARY_KEYS)


def test_schemas_query(canned_adapter):
    builder = _builder(canned_adapter, "5.4.0")
    assert builder.build(ObjectKind.SCHEMAS).sql == (
        "SELECT schema_name FROM information_schema.schemata ORDER BY schema_name"
    )
    assert builder.build("SCHEMAS", schema_pattern="d%").sql == (
        "SELECT schema_name FROM information_schema.schemata WHERE schema_name LIKE 'd%' ORDER BY schema_name"
    )


def test_version_failure_propagates(canned_adapter):
    adapter = canned_adapter(engine_version=None)
    with pytest.raises(CatalogUnavailable):
        CatalogQueryBuilder(CatalogContext(adapter)).build(ObjectKind.TABLES)
