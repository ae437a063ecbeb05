"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from tourops.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV = "TOUROPS_DB_PATH"
DEFAULT_DB_DIR = ".tourops"
DEFAULT_DB_NAME = "tourops.db"


def default_database_path() -> Path:
    """Path of the per-user database, ``~/.tourops/tourops.db``.

    The directory is created on first use.
    """
    db_dir = Path.home() / DEFAULT_DB_DIR
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir / DEFAULT_DB_NAME


def create_database(database_url: str) -> SQLAlchemyDatabase:
    """Create a database for any SQLAlchemy URL."""
    logger.debug("Opening database %s", database_url)
    return SQLAlchemyDatabase(database_url)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. ``~`` is expanded. If None,
            checks the TOUROPS_DB_PATH environment variable, then falls back to
            :func:`default_database_path`

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV) or None

    path = Path(database_path).expanduser() if database_path else default_database_path()
    database = create_database(f"sqlite:///{path}")
    database.database_path = str(path)
    return database
