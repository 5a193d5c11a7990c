"""SQLite implementation of DatabaseInterface"""

import logging
from typing import List, Optional

from leasedocs.db.base import DatabaseInterface
from leasedocs.db import sqlite as sqlite_ops
from leasedocs.utils.config import get_settings

logger = logging.getLogger(__name__)


class SQLiteClient(DatabaseInterface):
    """SQLite implementation of DatabaseInterface.
    Wraps the functions in sqlite.py."""

    def init_db(self) -> None:
        sqlite_ops.init_db()

    def list_templates(self) -> List[dict]:
        return sqlite_ops.list_templates()

    def get_template(self, template_id: str) -> Optional[dict]:
        return sqlite_ops.get_template(template_id)

    def upsert_template(self, template: dict) -> str:
        return sqlite_ops.upsert_template(template)

    def delete_template(self, template_id: str) -> bool:
        return sqlite_ops.delete_template(template_id)

    def upsert_document(self, document: dict) -> str:
        return sqlite_ops.upsert_document(document)

    def get_document(self, document_id: str) -> Optional[dict]:
        return sqlite_ops.get_document(document_id)

    def list_documents(self, filters: Optional[dict] = None) -> List[dict]:
        return sqlite_ops.list_documents(filters)

    def delete_document(self, document_id: str) -> bool:
        return sqlite_ops.delete_document(document_id)

    def get_status(self) -> dict:
        settings = get_settings()
        try:
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "templates": sqlite_ops.count_rows("templates"),
                "documents": sqlite_ops.count_rows("documents"),
                "status": "connected",
            }
        except Exception as e:
            logger.warning(f"SQLite status check failed: {e}")
            return {
                "mode": "sqlite",
                "path": settings.database_path,
                "status": f"error: {e}",
            }
