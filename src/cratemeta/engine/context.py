"""
Session-scoped context shared by every catalog component.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, TypeVar

from ..errors import CatalogUnavailable
from ..utils import get_logger, time_call
from .version import EngineVersion, VersionLike, VersionOracle

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter
    from ..dialects.base import Dialect


MAX_NAME_LENGTH_SQL = (
    "SELECT t.typlen FROM pg_catalog.pg_type t, pg_catalog.pg_namespace n "
    "WHERE t.typnamespace=n.oid AND t.typname='name' AND n.nspname='pg_catalog'"
)
MAX_INDEX_KEYS_SQL = "SELECT setting FROM pg_catalog.pg_settings WHERE name='max_index_keys'"

T = TypeVar("T")


class CatalogContext:
    """
    Holds the adapter plus the lazily computed, per-connection constants.

    Every memoized value (engine version, server version, identifier limits)
    is computed at most once per connection generation. Reads need no lock:
    a race on first access recomputes the same value from the catalog.
    """

    def __init__(self, adapter: "DatabaseAdapter") -> None:
        self.adapter = adapter
        self.oracle = VersionOracle(adapter)
        self.logger = get_logger("engine.context")
        self._memo: Dict[str, Any] = {}
        self._generation = adapter.connection_generation

    @property
    def dialect(self) -> "Dialect":
        return self.adapter.dialect

    # ------------------------------------------------------------------ #
    # Versions
    # ------------------------------------------------------------------ #
    def engine_version(self) -> EngineVersion:
        self._check_generation()
        return self.oracle.current_version()

    def server_version(self) -> EngineVersion:
        return self._memoized("server_version", self.adapter.server_version)

    def is_at_least_version(self, version: VersionLike) -> bool:
        """
        Compare against the wire-protocol server version (not the engine version).
        """
        return self.server_version().at_least(version)

    # ------------------------------------------------------------------ #
    # Derived constants
    # ------------------------------------------------------------------ #
    def max_name_length(self) -> int:
        typlen = self._memoized(
            "max_name_length",
            lambda: self._read_int(MAX_NAME_LENGTH_SQL, "Unable to find name datatype in the system catalogs."),
        )
        return typlen - 1

    def max_index_keys(self) -> int:
        return self._memoized(
            "max_index_keys",
            lambda: self._read_int(
                MAX_INDEX_KEYS_SQL,
                "Unable to determine a value for MaxIndexKeys due to missing system catalog data.",
            ),
        )

    def invalidate(self) -> None:
        self._memo.clear()
        self.oracle.invalidate()

    # ------------------------------------------------------------------ #
    def _memoized(self, key: str, compute: Callable[[], T]) -> T:
        self._check_generation()
        if key in self._memo:
            return self._memo[key]
        value = compute()
        self._memo[key] = value
        return value

    def _check_generation(self) -> None:
        generation = self.adapter.connection_generation
        if generation != self._generation:
            self.logger.info(
                "Connection generation changed (%s -> %s); dropping cached catalog constants.",
                self._generation,
                generation,
            )
            self.invalidate()
            self._generation = generation

    def _read_int(self, sql: str, missing_message: str) -> int:
        with time_call("engine.system_row", self.logger, sql=sql, threshold_ms=self.adapter.slow_query_ms):
            row = self.adapter.execute(sql).fetchone()
        if not row or row[0] is None:
            raise CatalogUnavailable(missing_message)
        try:
            return int(row[0])
        except (TypeError, ValueError) as exc:
            raise CatalogUnavailable(f"{missing_message} (got {row[0]!r})") from exc
