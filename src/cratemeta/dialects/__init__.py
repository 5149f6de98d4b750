"""
Dialect strategy registry.
"""

from .base import Dialect, DialectCapabilities
from .crate import CrateDialect

__all__ = ["Dialect", "DialectCapabilities", "CrateDialect"]
