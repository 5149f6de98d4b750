import sqlite3
import threading

import pytest

from cratemeta.dialects import CrateDialect
from cratemeta.engine.version import VERSION_PROBE_SQL, EngineVersion


SCHEMATA = ["test", "doc", "sys", "information_schema", "blob", "pg_catalog"]

# (schema, table, table_type, reference_generation)
TABLES = [
    ("test", "widgets", "BASE TABLE", "SYSTEM GENERATED"),
    ("doc", "gadgets", "BASE TABLE", "SYSTEM GENERATED"),
    ("doc", "gadget_summary", "VIEW", None),
    ("sys", "nodes", "BASE TABLE", "SYSTEM GENERATED"),
    ("information_schema", "tables", "BASE TABLE", "SYSTEM GENERATED"),
    ("information_schema", "views", "VIEW", None),
    ("doc", "remote_events", "FOREIGN", "MANUAL"),
]

# (schema, table, column, data_type, ordinal, precision, radix, default, octet_length, nullable, generated)
COLUMNS = [
    ("test", "widgets", "name", "string", 2, None, None, None, None, True, "NEVER"),
    ("test", "widgets", "id", "integer", 1, 32, 2, None, None, False, "NEVER"),
    ("doc", "gadgets", "tags", "string_array", 5, None, None, None, None, True, "NEVER"),
    ("doc", "gadgets", "meta['size']", "integer", 4, 32, 2, None, None, True, "NEVER"),
    ("doc", "gadgets", "meta.size", "integer", 4, 32, 2, None, None, True, "NEVER"),
    ("doc", "gadgets", "meta", "object", 3, None, None, None, None, True, "NEVER"),
    ("doc", "gadgets", "region", "text", 2, None, None, "'eu'", None, False, "NEVER"),
    ("doc", "gadgets", "id", "bigint", 1, 64, 2, None, None, False, "NEVER"),
    ("doc", "gadgets", "label", "string", 6, None, None, "upper(region)", None, True, "ALWAYS"),
    ("doc", "gadget_summary", "total", "long", 1, 64, 2, None, None, True, "NEVER"),
]

# (schema, table, column, ordinal, constraint)
KEY_COLUMNS = [
    ("doc", "gadgets", "id", 2, "gadgets_pk"),
    ("test", "widgets", "id", 1, "widgets_pk"),
    ("doc", "gadgets", "region", 1, "gadgets_pk"),
]


class StaticCursor:
    def __init__(self, rows, columns):
        self._rows = list(rows)
        self.description = [(name, None, None, None, None, None, None) for name in columns]

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows


class SQLiteCatalogBackend:
    """
    Adapter stand-in answering catalog queries from sqlite3.

    ``information_schema``, ``sys`` and ``pg_catalog`` are attached databases,
    so the generated SQL runs unchanged. The version probe uses CrateDB-only
    syntax and is answered directly.
    """

    def __init__(
        self,
        engine_version="5.4.0",
        *,
        server_version=(14, 0),
        standard_conforming_strings=True,
        slow_query_ms=100,
    ):
        self.engine_version = engine_version
        self.dialect = CrateDialect(standard_conforming_strings=standard_conforming_strings)
        self.slow_query_ms = slow_query_ms
        self.connection_generation = 1
        self.statements = []
        self.server_version_calls = 0
        self._server_version = EngineVersion.coerce(server_version)
        self.connection = sqlite3.connect(":memory:", check_same_thread=False)
        self._lock = threading.Lock()
        for schema in ("information_schema", "sys", "pg_catalog"):
            self.connection.execute(f"ATTACH DATABASE ':memory:' AS {schema}")
        self._seed(EngineVersion.parse(engine_version))

    # DatabaseAdapter protocol ---------------------------------------------
    def connect(self, config=None):
        self.connection_generation += 1
        return self.connection

    def close(self):
        self.connection.close()

    def execute(self, sql, params=None):
        with self._lock:
            self.statements.append(sql)
            if sql == VERSION_PROBE_SQL:
                rows = [] if self.engine_version is None else [(self.engine_version,)]
                return StaticCursor(rows, ["version"])
            # Rows are fetched under the lock; no live sqlite cursor leaves this method.
            cursor = self.connection.execute(sql, params or ())
            columns = [column[0] for column in cursor.description or ()]
            return StaticCursor(cursor.fetchall(), columns)

    def server_version(self):
        self.server_version_calls += 1
        return self._server_version

    # Helpers ----------------------------------------------------------------
    @property
    def catalog_statements(self):
        return [sql for sql in self.statements if sql != VERSION_PROBE_SQL]

    @property
    def probe_count(self):
        return self.statements.count(VERSION_PROBE_SQL)

    def _seed(self, version):
        schema_column = "schema_name" if version.before("0.57.0") else "table_schema"
        boolean_generated = version.before("4.0.0")
        legacy_kcu = not version.after("3.0.0")
        db = self.connection
        db.executescript(
            f"""
            CREATE TABLE information_schema.schemata (schema_name TEXT);
            CREATE TABLE information_schema.tables (
                {schema_column} TEXT, table_name TEXT, table_catalog TEXT, table_type TEXT,
                self_referencing_column_name TEXT, reference_generation TEXT
            );
            CREATE TABLE information_schema.columns (
                {schema_column} TEXT, table_name TEXT, column_name TEXT, data_type TEXT,
                ordinal_position INTEGER, table_catalog TEXT, numeric_precision INTEGER,
                numeric_precision_radix INTEGER, column_default TEXT, character_octet_length INTEGER,
                is_nullable INTEGER, is_generated
            );
            CREATE TABLE information_schema.key_column_usage (
                table_catalog TEXT, table_schema TEXT, table_name TEXT, column_name TEXT,
                ordinal_position INTEGER, constraint_name TEXT
            );
            CREATE TABLE pg_catalog.pg_namespace (oid INTEGER, nspname TEXT);
            CREATE TABLE pg_catalog.pg_type (oid INTEGER, typname TEXT, typnamespace INTEGER, typlen INTEGER);
            CREATE TABLE pg_catalog.pg_settings (name TEXT, setting TEXT);
            CREATE TABLE sys.nodes (name TEXT);
            """
        )
        db.executemany("INSERT INTO information_schema.schemata VALUES (?)", [(name,) for name in SCHEMATA])
        db.executemany(
            "INSERT INTO information_schema.tables VALUES (?, ?, 'crate', ?, '_id', ?)",
            TABLES,
        )
        for schema, table, column, data_type, ordinal, precision, radix, default, octets, nullable, generated in COLUMNS:
            generated_value = (generated == "ALWAYS") if boolean_generated else generated
            db.execute(
                "INSERT INTO information_schema.columns VALUES (?, ?, ?, ?, ?, 'crate', ?, ?, ?, ?, ?, ?)",
                (schema, table, column, data_type, ordinal, precision, radix, default, octets, nullable, generated_value),
            )
        for schema, table, column, ordinal, constraint in KEY_COLUMNS:
            catalog, kcu_schema = (schema, "public") if legacy_kcu else ("crate", schema)
            db.execute(
                "INSERT INTO information_schema.key_column_usage VALUES (?, ?, ?, ?, ?, ?)",
                (catalog, kcu_schema, table, column, ordinal, constraint),
            )
        db.execute("INSERT INTO pg_catalog.pg_namespace VALUES (11, 'pg_catalog')")
        db.execute("INSERT INTO pg_catalog.pg_namespace VALUES (2200, 'public')")
        db.execute("INSERT INTO pg_catalog.pg_type VALUES (19, 'name', 11, 64)")
        db.execute("INSERT INTO pg_catalog.pg_type VALUES (25, 'text', 11, -1)")
        db.execute("INSERT INTO pg_catalog.pg_settings VALUES ('max_index_keys', '32')")
        db.commit()


class CannedAdapter:
    """
    Adapter returning prepared rows for the next statement, for query forms
    sqlite cannot run (``ANY(array)``).
    """

    def __init__(self, engine_version="2.1.0", rows=(), columns=(), *, server_version=(14, 0)):
        self.engine_version = engine_version
        self.dialect = CrateDialect()
        self.slow_query_ms = 100
        self.connection_generation = 1
        self.statements = []
        self.rows = list(rows)
        self.columns = list(columns)
        self._server_version = EngineVersion.coerce(server_version)

    def connect(self, config=None):
        self.connection_generation += 1

    def close(self):
        pass

    def execute(self, sql, params=None):
        self.statements.append(sql)
        if sql == VERSION_PROBE_SQL:
            return StaticCursor([(self.engine_version,)], ["version"])
        return StaticCursor(self.rows, self.columns)

    def server_version(self):
        return self._server_version


@pytest.fixture
def make_backend():
    backends = []

    def factory(engine_version="5.4.0", **kwargs):
        backend = SQLiteCatalogBackend(engine_version, **kwargs)
        backends.append(backend)
        return backend

    yield factory
    for backend in backends:
        backend.close()


@pytest.fixture
def backend(make_backend):
    return make_backend()


@pytest.fixture
def canned_adapter():
    return CannedAdapter
