"""
CrateDB database adapter speaking the PostgreSQL wire protocol through psycopg.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ..dialects.crate import CrateDialect
from ..engine.version import EngineVersion
from ..security.redaction import redact_options, redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterExecutionError,
    ConnectionConfig,
    DatabaseAdapter,
)


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


def server_version_from_int(value: int) -> EngineVersion:
    """
    Decode libpq's integer server version (``140003`` or ``90605``).
    """
    if value >= 100000:
        return EngineVersion(value // 10000, value % 10000)
    return EngineVersion(value // 10000, (value // 100) % 100, value % 100)


@dataclass
class CrateConnectionState:
    connection: Any
    config: ConnectionConfig
    driver: Any


class CrateAdapter(DatabaseAdapter):
    """
    Adapter wrapping the psycopg driver for CrateDB catalog access.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = CrateDialect()
        self.connection_generation = 0
        self._state: CrateConnectionState | None = None
        self.logger = get_logger("adapters.crate")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use CrateAdapter.")

        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.driver_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to CrateDB %s (options=%s)",
            config.descriptive_label(),
            redact_options(options),
        )
        try:
            connection = driver.connect(config.conninfo(), autocommit=config.autocommit, **options)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to CrateDB.") from exc

        self._state = CrateConnectionState(connection, config, driver)
        self.connection_generation += 1
        self.dialect = CrateDialect(standard_conforming_strings=self._standard_conforming_strings(connection))
        return connection

    def close(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None

    def _ensure_connection(self):
        if not self._state:
            raise AdapterConnectionError("CrateAdapter is not connected.")
        connection = self._state.connection
        if getattr(connection, "closed", False):
            self.logger.warning("CrateDB connection closed; reconnecting.")
            connection = self.connect(self._state.config)
        return connection

    def execute(self, sql: str, params: Sequence[Any] | None = None):
        connection = self._ensure_connection()
        driver_error = getattr(self._state.driver, "Error", Exception)
        if params is not None:
            self._validate_params(sql, params)
        cursor = connection.cursor()
        with time_call(
            "crate.execute",
            self.logger,
            sql=sql,
            params=redact_params(params),
            threshold_ms=self.slow_query_ms,
        ):
            try:
                # Catalog SQL embeds LIKE patterns; without params psycopg leaves '%' alone.
                if params is None:
                    cursor.execute(sql)
                else:
                    cursor.execute(sql, params)
            except driver_error as exc:
                raise AdapterExecutionError(f"Statement failed: {exc}") from exc
        return cursor

    def server_version(self) -> EngineVersion:
        connection = self._ensure_connection()
        return server_version_from_int(int(connection.info.server_version))

    @staticmethod
    def _standard_conforming_strings(connection: Any) -> bool:
        info = getattr(connection, "info", None)
        if info is None:
            return True
        value = info.parameter_status("standard_conforming_strings")
        return value is None or value == "on"

    @staticmethod
    def _count_placeholders(sql: str) -> int:
        count = 0
        idx = 0
        while idx < len(sql) - 1:
            if sql[idx] == "%" and sql[idx + 1] == "s":
                count += 1
                idx += 2
                continue
            if sql[idx] == "%" and sql[idx + 1] == "%":
                idx += 2
                continue
            idx += 1
        return count

    def _validate_params(self, sql: str, params: Sequence[Any]) -> None:
        placeholder_count = self._count_placeholders(sql)
        if placeholder_count != len(params):
            raise AdapterExecutionError(
                f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
            )
