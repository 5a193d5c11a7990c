"""Document models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """Kinds of managed documents"""
    CONTRACT = "contract"
    LEASE = "lease"
    INSPECTION = "inspection"
    RECEIPT = "receipt"
    POLICY = "policy"
    INSURANCE = "insurance"
    OTHER = "other"


class DocumentStatus(str, Enum):
    """Lifecycle status of a document"""
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class DownloadFormat(str, Enum):
    """Formats a document can be downloaded in"""
    PDF = "pdf"
    DOCX = "docx"


class Credential(BaseModel):
    """Caller identity passed explicitly into every user-initiated action"""
    user_id: str
    token: str = ""


class Document(BaseModel):
    """A generated or uploaded document"""
    id: str = ""
    name: str
    type: DocumentType = DocumentType.OTHER
    category: str = ""
    description: str = ""
    status: DocumentStatus = DocumentStatus.DRAFT
    metadata: dict = {}

    # Associations (references, not ownership)
    property_id: Optional[str] = None
    unit_id: Optional[str] = None
    manager_id: Optional[str] = None
    tenant_id: Optional[str] = None

    is_shared: bool = False
    shared_with: list[str] = []

    # Attached upload
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_format: Optional[str] = None
    file_size: Optional[int] = None

    uploaded_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    expires_at: Optional[datetime] = None

    @property
    def content(self) -> str:
        return self.metadata.get("content", "")

    @property
    def has_upload(self) -> bool:
        return bool(self.file_url)


class DocumentFilter(BaseModel):
    """Filter applied when listing documents"""
    status: Optional[DocumentStatus] = None
    type: Optional[DocumentType] = None
    category: Optional[str] = None
    property_id: Optional[str] = None
    tenant_id: Optional[str] = None
    manager_id: Optional[str] = None
    search: Optional[str] = None


class DocumentStats(BaseModel):
    """Counts returned by the document summary"""
    total: int = 0
    by_type: dict[str, int] = {}
    recent: int = 0


class DownloadResult(BaseModel):
    """Bytes ready to be streamed to the caller"""
    filename: str
    media_type: str
    data: bytes
