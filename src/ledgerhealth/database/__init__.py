"""Database layer for ledgerhealth."""

from ledgerhealth.database.base import Database
from ledgerhealth.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
