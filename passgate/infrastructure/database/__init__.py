"""Database infrastructure for SQLite persistence."""

from passgate.infrastructure.database.connection import (
    Database,
    open_database,
)

__all__ = [
    "Database",
    "open_database",
]
