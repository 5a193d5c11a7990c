"""Abstract persistence interface for templates and documents"""

from abc import ABC, abstractmethod
from typing import List, Optional


class DatabaseInterface(ABC):
    """Abstract interface for template and document persistence.
    Rows are plain dicts shaped like the Template and Document models."""

    @abstractmethod
    def init_db(self) -> None:
        """Initialize database schema (create tables, indexes)."""

    # Templates

    @abstractmethod
    def list_templates(self) -> List[dict]:
        """All templates in insertion order."""

    @abstractmethod
    def get_template(self, template_id: str) -> Optional[dict]:
        """Get template by ID."""

    @abstractmethod
    def upsert_template(self, template: dict) -> str:
        """Insert or update a template, keeping its position. Returns template ID."""

    @abstractmethod
    def delete_template(self, template_id: str) -> bool:
        """Delete a template. Returns False if it did not exist."""

    # Documents

    @abstractmethod
    def upsert_document(self, document: dict) -> str:
        """Insert or update a document. Returns document ID."""

    @abstractmethod
    def get_document(self, document_id: str) -> Optional[dict]:
        """Get document by ID."""

    @abstractmethod
    def list_documents(self, filters: Optional[dict] = None) -> List[dict]:
        """List documents, newest first.

        filters may hold status, type, category, property_id, tenant_id,
        manager_id (exact match) and search (case-insensitive substring of
        name, description or category)."""

    @abstractmethod
    def delete_document(self, document_id: str) -> bool:
        """Delete a document permanently. Returns False if it did not exist."""

    @abstractmethod
    def get_status(self) -> dict:
        """Get database status info (table counts, connection status)."""
