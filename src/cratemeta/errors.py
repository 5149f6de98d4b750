"""
Error hierarchy for catalog metadata resolution.
"""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base error for catalog metadata failures."""


class CatalogUnavailable(CatalogError):
    """
    Raised when the engine version or a required system row cannot be read.

    Fatal to the current metadata request; callers decide whether to retry.
    """


class MalformedAclEntry(CatalogError, ValueError):
    """
    An ACL token without the ``grantee=privileges`` separator.

    The decoder never lets this escape: the token is dropped and the error
    value is kept on the resulting grant map for inspection.
    """

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"ACL entry {token!r} is missing the '=' separator")
