"""Database layer for bankledger application."""

from bankledger.database.base import Database, UnitOfWork
from bankledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "UnitOfWork", "create_database", "create_sqlite_database"]
