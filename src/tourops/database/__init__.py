"""Database layer for tourops application."""

from tourops.database.base import Database
from tourops.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
