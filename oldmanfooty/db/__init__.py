"""Database package initialization.

This module exposes the public interface of the database package.
"""

from functools import lru_cache

from .db_core import (
    Database,
    DatabaseConfig,
    DatabaseError,
    ConnectionError,
    SessionError,
)
from .operations import with_retry


@lru_cache
def get_database() -> Database:
    """Process-wide database built from the environment on first use."""
    return Database(DatabaseConfig())


__all__ = [
    # Core database classes
    'Database',
    'DatabaseConfig',

    # Exceptions
    'DatabaseError',
    'ConnectionError',
    'SessionError',

    # Default instance
    'get_database',

    # Utilities
    'with_retry',
]
