"""SQLite database operations"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from leasedocs.utils.config import get_settings

# Columns stored as JSON text
_TEMPLATE_JSON = ("variables",)
_DOCUMENT_JSON = ("metadata", "shared_with")

TEMPLATE_COLUMNS = (
    "id", "name", "type", "description", "body", "variables",
    "is_active", "usage_count", "created_date", "last_modified",
)

DOCUMENT_COLUMNS = (
    "id", "name", "type", "category", "description", "status", "metadata",
    "property_id", "unit_id", "manager_id", "tenant_id",
    "is_shared", "shared_with",
    "file_url", "file_name", "file_format", "file_size",
    "uploaded_by", "created_at", "updated_at", "expires_at",
)


def get_db_path() -> Path:
    """Get database path from settings"""
    settings = get_settings()
    return Path(settings.database_path)


@contextmanager
def get_connection():
    """Get a database connection as context manager"""
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Initialize database with schema"""
    with get_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS templates (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                type TEXT NOT NULL,
                description TEXT NOT NULL,
                body TEXT NOT NULL,
                variables TEXT NOT NULL DEFAULT '[]',
                is_active INTEGER NOT NULL DEFAULT 1,
                usage_count INTEGER NOT NULL DEFAULT 0,
                created_date TIMESTAMP,
                last_modified TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                type TEXT NOT NULL,
                category TEXT DEFAULT '',
                description TEXT DEFAULT '',
                status TEXT NOT NULL DEFAULT 'draft',
                metadata TEXT NOT NULL DEFAULT '{}',
                property_id TEXT,
                unit_id TEXT,
                manager_id TEXT,
                tenant_id TEXT,
                is_shared INTEGER NOT NULL DEFAULT 0,
                shared_with TEXT NOT NULL DEFAULT '[]',
                file_url TEXT,
                file_name TEXT,
                file_format TEXT,
                file_size INTEGER,
                uploaded_by TEXT,
                created_at TIMESTAMP,
                updated_at TIMESTAMP,
                expires_at TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_documents_status
            ON documents(status)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_documents_property
            ON documents(property_id)
        """)


def _encode(row: dict, columns: tuple, json_columns: tuple) -> tuple:
    values = []
    for col in columns:
        value = row.get(col)
        if col in json_columns:
            value = json.dumps(value if value is not None else ([] if col != "metadata" else {}),
                               ensure_ascii=False, default=str)
        elif hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value"):  # enums
            value = value.value
        values.append(value)
    return tuple(values)


def _decode(row: sqlite3.Row, json_columns: tuple) -> dict:
    data = dict(row)
    for col in json_columns:
        if data.get(col) is not None:
            data[col] = json.loads(data[col])
    return data


def _upsert(table: str, columns: tuple, json_columns: tuple, row: dict) -> str:
    # ON CONFLICT keeps the rowid, so list order stays insertion order
    placeholders = ", ".join("?" for _ in columns)
    updates = ", ".join(f"{col} = excluded.{col}" for col in columns if col != "id")
    with get_connection() as conn:
        conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}",
            _encode(row, columns, json_columns),
        )
    return row["id"]


def _delete(table: str, row_id: str) -> bool:
    with get_connection() as conn:
        cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
        return cursor.rowcount > 0


def upsert_template(template: dict) -> str:
    """Insert or update a template"""
    return _upsert("templates", TEMPLATE_COLUMNS, _TEMPLATE_JSON, template)


def get_template(template_id: str) -> Optional[dict]:
    """Get a template by ID"""
    with get_connection() as conn:
        row = conn.execute("SELECT * FROM templates WHERE id = ?", (template_id,)).fetchone()
        return _decode(row, _TEMPLATE_JSON) if row else None


def list_templates() -> list[dict]:
    """Get all templates in insertion order"""
    with get_connection() as conn:
        rows = conn.execute("SELECT * FROM templates ORDER BY rowid").fetchall()
        return [_decode(row, _TEMPLATE_JSON) for row in rows]


def delete_template(template_id: str) -> bool:
    """Delete a template by ID"""
    return _delete("templates", template_id)


def upsert_document(document: dict) -> str:
    """Insert or update a document"""
    return _upsert("documents", DOCUMENT_COLUMNS, _DOCUMENT_JSON, document)


def get_document(document_id: str) -> Optional[dict]:
    """Get a document by ID"""
    with get_connection() as conn:
        row = conn.execute("SELECT * FROM documents WHERE id = ?", (document_id,)).fetchone()
        return _decode(row, _DOCUMENT_JSON) if row else None


def list_documents(filters: Optional[dict] = None) -> list[dict]:
    """List documents matching filters, newest first"""
    filters = filters or {}
    clauses = []
    params: list = []

    for col in ("status", "type", "category", "property_id", "tenant_id", "manager_id"):
        value = filters.get(col)
        if value:
            clauses.append(f"{col} = ?")
            params.append(value.value if hasattr(value, "value") else value)

    search = filters.get("search")
    if search:
        clauses.append(
            "(LOWER(name) LIKE ? OR LOWER(description) LIKE ? OR LOWER(category) LIKE ?)"
        )
        like = f"%{search.lower()}%"
        params.extend([like, like, like])

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with get_connection() as conn:
        rows = conn.execute(
            f"SELECT * FROM documents {where} ORDER BY created_at DESC, rowid DESC",
            params,
        ).fetchall()
        return [_decode(row, _DOCUMENT_JSON) for row in rows]


def delete_document(document_id: str) -> bool:
    """Delete a document by ID"""
    return _delete("documents", document_id)


def count_rows(table: str) -> int:
    """Count rows of a table"""
    with get_connection() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
