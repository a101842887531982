"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from finpro.database.base import Database
from finpro.database.json_store import JSONFileDatabase
from finpro.database.sqlalchemy_db import SQLAlchemyDatabase

STORAGE_BACKENDS = ("sqlite", "json")


def _default_path(filename: str) -> str:
    # Default to ~/.finpro/<filename>
    home = Path.home()
    db_dir = home / ".finpro"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / filename)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FINPRO_DB_PATH
            environment variable, then defaults to ~/.finpro/finpro.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("FINPRO_DB_PATH")

    if database_path is None:
        database_path = _default_path("finpro.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_json_database(database_path: Optional[str] = None) -> JSONFileDatabase:
    """Create a local JSON file database instance.

    Args:
        database_path: Path to the JSON document. If None, checks FINPRO_DB_PATH
            environment variable, then defaults to ~/.finpro/finpro.json

    Returns:
        JSONFileDatabase instance
    """
    if database_path is None:
        database_path = os.environ.get("FINPRO_DB_PATH")

    if database_path is None:
        database_path = _default_path("finpro.json")

    return JSONFileDatabase(database_path)


def create_database(
    database_path: Optional[str] = None, storage: Optional[str] = None
) -> Database:
    """Create the database selected by ``storage`` or FINPRO_STORAGE (default sqlite).

    Raises:
        ValueError: If the storage backend is unknown
    """
    if storage is None:
        storage = os.environ.get("FINPRO_STORAGE", "sqlite")
    storage = storage.strip().lower()

    if storage == "sqlite":
        return create_sqlite_database(database_path)
    if storage == "json":
        return create_json_database(database_path)
    raise ValueError(
        f"Unknown storage backend: '{storage}'. Supported backends: {', '.join(STORAGE_BACKENDS)}"
    )
