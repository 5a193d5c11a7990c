"""Database modules"""

from leasedocs.db.base import DatabaseInterface
from leasedocs.db.sqlite import init_db, get_connection
from leasedocs.db.sqlite_client import SQLiteClient


def get_database() -> DatabaseInterface:
    """Return an initialized database client."""
    client = SQLiteClient()
    client.init_db()
    return client


__all__ = [
    "DatabaseInterface",
    "SQLiteClient",
    "get_database",
    "init_db",
    "get_connection",
]
