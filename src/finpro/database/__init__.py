"""Database layer for finpro application."""

from finpro.database.base import Database
from finpro.database.factories import (
    create_database,
    create_json_database,
    create_sqlite_database,
)

__all__ = ["Database", "create_database", "create_json_database", "create_sqlite_database"]
