"""Document template models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TemplateType(str, Enum):
    """Categories of document templates"""
    LEASE = "lease"
    NOTICE = "notice"
    RECEIPT = "receipt"
    REPORT = "report"


class Template(BaseModel):
    """A stored document skeleton with {{PLACEHOLDER}} tokens"""
    id: str
    name: str
    type: TemplateType = TemplateType.LEASE
    description: str
    body: str
    variables: list[str] = []
    is_active: bool = True
    usage_count: int = 0
    created_date: datetime = Field(default_factory=datetime.now)
    last_modified: datetime = Field(default_factory=datetime.now)


class TemplateFilter(BaseModel):
    """Filter applied when listing templates"""
    search_text: Optional[str] = None
    type: Optional[TemplateType] = None


class TemplateStats(BaseModel):
    """Summary counts shown above the template list"""
    total: int = 0
    active: int = 0
    by_type: dict[str, int] = {}
