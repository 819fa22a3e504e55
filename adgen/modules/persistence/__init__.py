"""
Persistence module public API.
"""

from .adapter import MARKETING_POST_MARKER, PersistenceAdapter

__all__ = ["MARKETING_POST_MARKER", "PersistenceAdapter"]
