"""Request/response schemas for the leasedocs API"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from leasedocs.models.contract import ContractForm
from leasedocs.models.template import TemplateType


class TemplateCreateRequest(BaseModel):
    """New template; variables are derived from the body"""
    name: str = Field(..., min_length=1)
    type: TemplateType = TemplateType.LEASE
    description: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class TemplateUpdateRequest(BaseModel):
    """Partial template update; unset fields are left alone"""
    name: Optional[str] = None
    type: Optional[TemplateType] = None
    description: Optional[str] = None
    body: Optional[str] = None
    is_active: Optional[bool] = None


class RenderRequest(BaseModel):
    """Values to substitute into a template's placeholders"""
    values: dict[str, str] = {}
    strict: bool = False


class RenderResponse(BaseModel):
    template_id: str
    content: str


class VariablesRequest(BaseModel):
    body: str


class VariablesResponse(BaseModel):
    variables: list[str] = []


class ContractRequest(BaseModel):
    """Generate a contract and store it as a draft"""
    form: ContractForm
    name: Optional[str] = None
    description: str = ""


class DocumentUpdateRequest(BaseModel):
    """Partial update of document details"""
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    expires_at: Optional[datetime] = None


class ContentRequest(BaseModel):
    """Replacement body for a draft contract"""
    content: str


class SigningOutcomeRequest(BaseModel):
    accepted: bool


class ShareRequest(BaseModel):
    user_ids: list[str] = Field(..., min_length=1)


class HealthResponse(BaseModel):
    status: str = "ok"
    templates: int = 0
    documents: int = 0
