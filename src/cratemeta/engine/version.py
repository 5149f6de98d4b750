"""
Engine version parsing and the session-scoped version oracle.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Sequence, Tuple, TypeVar, Union

from ..errors import CatalogUnavailable
from ..utils import get_logger, time_call

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter


VERSION_PROBE_SQL = "select version['number'] as version from sys.nodes limit 1"

_VERSION_RE = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class EngineVersion:
    """
    Ordered ``(major, minor, patch)`` triple.
    """

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> "EngineVersion":
        """
        Parse the leading dotted integers of ``text``; ``5.1`` reads as ``5.1.0``
        and suffixes such as ``-SNAPSHOT`` are ignored.
        """
        match = _VERSION_RE.match(text or "")
        if not match:
            raise ValueError(f"Unparsable version string: {text!r}")
        major, minor, patch = (int(part) if part else 0 for part in match.groups())
        return cls(major, minor, patch)

    @classmethod
    def coerce(cls, value: "VersionLike") -> "EngineVersion":
        if isinstance(value, EngineVersion):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, tuple):
            return cls(*value)
        raise TypeError(f"Cannot interpret {value!r} as an engine version")

    def before(self, other: "VersionLike") -> bool:
        return self < EngineVersion.coerce(other)

    def after(self, other: "VersionLike") -> bool:
        return self > EngineVersion.coerce(other)

    def at_least(self, other: "VersionLike") -> bool:
        return self >= EngineVersion.coerce(other)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


VersionLike = Union[EngineVersion, str, Tuple[int, ...]]


class VersionDispatch(Generic[T]):
    """
    Ordered table of ``(threshold, strategy)`` rows.

    ``select(version)`` returns the strategy of the last row whose threshold is
    at or below ``version``, so each row covers a half-open version bracket.
    Supporting a new engine version means adding one row.
    """

    def __init__(self, name: str, rows: Sequence[Tuple[VersionLike, T]]) -> None:
        if not rows:
            raise ValueError(f"Version dispatch {name!r} needs at least one row")
        ordered = sorted(((EngineVersion.coerce(v), strategy) for v, strategy in rows), key=lambda row: row[0])
        thresholds = [threshold for threshold, _ in ordered]
        if len(set(thresholds)) != len(thresholds):
            raise ValueError(f"Version dispatch {name!r} has duplicate thresholds")
        self.name = name
        self.rows: Tuple[Tuple[EngineVersion, T], ...] = tuple(ordered)

    def select(self, version: VersionLike) -> T:
        version = EngineVersion.coerce(version)
        chosen: T | None = None
        for threshold, strategy in self.rows:
            if version.at_least(threshold):
                chosen = strategy
            else:
                break
        if chosen is None:
            raise CatalogUnavailable(
                f"Engine version {version} predates every bracket of {self.name!r}"
            )
        return chosen

    @property
    def thresholds(self) -> Tuple[EngineVersion, ...]:
        return tuple(threshold for threshold, _ in self.rows)


class VersionOracle:
    """
    Probes ``sys.nodes`` for the engine version and memoizes the answer.

    The cache is filled idempotently: two callers racing on the first call
    may both probe, but both store the same value.
    """

    def __init__(self, adapter: "DatabaseAdapter") -> None:
        self.adapter = adapter
        self.logger = get_logger("engine.version")
        self._version: EngineVersion | None = None

    def current_version(self) -> EngineVersion:
        version = self._version
        if version is None:
            version = self._probe()
            self._version = version
        return version

    def invalidate(self) -> None:
        self._version = None

    def _probe(self) -> EngineVersion:
        with time_call(
            "engine.version_probe",
            self.logger,
            sql=VERSION_PROBE_SQL,
            threshold_ms=self.adapter.slow_query_ms,
        ):
            cursor = self.adapter.execute(VERSION_PROBE_SQL)
            row = cursor.fetchone()
        if not row:
            raise CatalogUnavailable("Unable to fetch the engine version: sys.nodes returned no row.")
        raw = _first_value(row)
        if raw is None:
            raise CatalogUnavailable("Unable to fetch the engine version: version number is NULL.")
        try:
            version = EngineVersion.parse(str(raw))
        except ValueError as exc:
            raise CatalogUnavailable(f"Unable to parse engine version {raw!r}.") from exc
        self.logger.info("Detected engine version %s", version)
        return version


def _first_value(row: Any) -> Any:
    if isinstance(row, dict):
        return next(iter(row.values()), None)
    return row[0]
