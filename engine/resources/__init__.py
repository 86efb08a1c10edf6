"""
Resources module - static data loading.
"""

from engine.resources.database import Database, CATEGORIES

__all__ = [
    "Database",
    "CATEGORIES",
]
