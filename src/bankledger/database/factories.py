"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from bankledger.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)


def default_database_path() -> Path:
    """Return ~/.bankledger/bankledger.db, creating the directory if needed."""
    db_dir = Path.home() / ".bankledger"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "bankledger.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks BANKLEDGER_DB_PATH
            environment variable, then defaults to ~/.bankledger/bankledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("BANKLEDGER_DB_PATH")

    if database_path is None:
        database_path = str(default_database_path())

    logger.debug("Opening SQLite database at %s", database_path)
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database from a full SQLAlchemy URL, falling back to SQLite.

    Args:
        database_url: Any SQLAlchemy URL (e.g. 'postgresql+psycopg://...')
        database_path: SQLite file used when no URL is given
    """
    if database_url:
        logger.debug("Opening database at %s", database_url.split("@")[-1])
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path=database_path)
