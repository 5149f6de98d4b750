"""DSN parsing, conversion, and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, quote, unquote, urlencode, urlparse

from .redaction import redact_options

DEFAULT_PORT = 5432
DEFAULT_USER = "crate"
DEFAULT_SCHEMA = "doc"

SUPPORTED_SCHEMES = ("crate", "postgres", "postgresql")


@dataclass
class DSNConfig:
    scheme: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    schema: Optional[str]
    query: dict[str, str] = field(default_factory=dict)

    @property
    def effective_user(self) -> str:
        return self.username or DEFAULT_USER

    @property
    def effective_port(self) -> int:
        return self.port or DEFAULT_PORT

    @property
    def effective_schema(self) -> str:
        return self.schema or DEFAULT_SCHEMA

    def redacted(self) -> str:
        """
        Return the DSN with the password masked but the structure preserved.
        """
        return self._render(self.scheme, password=self.password, query=redact_options(self.query), masked=True)

    def to_conninfo(self) -> str:
        """
        Render a ``postgresql://`` URL for the psycopg driver.

        CrateDB speaks the PostgreSQL wire protocol; the database name it
        receives is used as the default schema. Query options are left out;
        adapters pass them to the driver as keyword arguments.
        """
        return self._render(
            "postgresql",
            password=self.password,
            query={},
            username=self.effective_user,
            port=self.effective_port,
            schema=self.effective_schema,
        )

    def _render(
        self,
        scheme: str,
        *,
        password: Optional[str],
        query: dict[str, str],
        username: Optional[str] = None,
        port: Optional[int] = None,
        schema: Optional[str] = None,
        masked: bool = False,
    ) -> str:
        user = username if username is not None else self.username
        port = port if port is not None else self.port
        schema = schema if schema is not None else self.schema

        netloc = ""
        if user:
            netloc += quote(user, safe="")
            if password:
                netloc += ":" + ("***" if masked else quote(password, safe=""))
            netloc += "@"
        if self.host:
            netloc += self.host
        if port:
            netloc += f":{port}"

        result = f"{scheme}://{netloc}"
        if schema:
            result += f"/{schema}"
        if query:
            result += f"?{urlencode(query, safe='*')}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    scheme = parsed.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ValueError(f"Unsupported DSN scheme {parsed.scheme!r}; expected one of {SUPPORTED_SCHEMES}")
    query = {key: values[0] for key, values in parse_qs(parsed.query).items()}
    return DSNConfig(
        scheme=scheme,
        username=unquote(parsed.username) if parsed.username else None,
        password=unquote(parsed.password) if parsed.password else None,
        host=parsed.hostname,
        port=parsed.port,
        schema=parsed.path.lstrip("/") or None,
        query=query,
    )
