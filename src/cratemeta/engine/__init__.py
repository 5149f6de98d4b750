"""
Engine version detection and the session-scoped catalog context.
"""

from .context import CatalogContext
from .version import EngineVersion, VersionDispatch, VersionOracle

__all__ = ["CatalogContext", "EngineVersion", "VersionDispatch", "VersionOracle"]
