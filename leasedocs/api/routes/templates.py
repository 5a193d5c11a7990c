"""Template API routes: CRUD, duplicate, toggle, render and variable extraction."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from leasedocs.api.deps import get_credential, get_templates
from leasedocs.api.schemas import (
    RenderRequest,
    RenderResponse,
    TemplateCreateRequest,
    TemplateUpdateRequest,
    VariablesRequest,
    VariablesResponse,
)
from leasedocs.models.template import Template, TemplateFilter, TemplateStats, TemplateType
from leasedocs.services.template_store import TemplateStore
from leasedocs.services.variables import extract_variables

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_credential)])


@router.get("/api/templates", response_model=list[Template])
async def list_templates(
    search_text: Optional[str] = None,
    type: Optional[TemplateType] = None,
    store: TemplateStore = Depends(get_templates),
):
    """List templates matching the search text and type, in creation order."""
    return store.list(TemplateFilter(search_text=search_text, type=type))


@router.get("/api/templates/stats", response_model=TemplateStats)
async def template_stats(store: TemplateStore = Depends(get_templates)):
    return store.stats()


@router.post("/api/templates", response_model=Template, status_code=201)
async def create_template(
    request: TemplateCreateRequest,
    store: TemplateStore = Depends(get_templates),
):
    return store.create(
        name=request.name,
        type=request.type,
        description=request.description,
        body=request.body,
    )


@router.get("/api/templates/{template_id}", response_model=Template)
async def get_template(template_id: str, store: TemplateStore = Depends(get_templates)):
    return store.get(template_id)


@router.patch("/api/templates/{template_id}", response_model=Template)
async def update_template(
    template_id: str,
    request: TemplateUpdateRequest,
    store: TemplateStore = Depends(get_templates),
):
    return store.update(template_id, **request.model_dump(exclude_unset=True))


@router.post("/api/templates/{template_id}/duplicate", response_model=Template, status_code=201)
async def duplicate_template(template_id: str, store: TemplateStore = Depends(get_templates)):
    return store.duplicate(template_id)


@router.post("/api/templates/{template_id}/toggle", response_model=Template)
async def toggle_template(template_id: str, store: TemplateStore = Depends(get_templates)):
    return store.toggle_active(template_id)


@router.delete("/api/templates/{template_id}", status_code=204)
async def delete_template(template_id: str, store: TemplateStore = Depends(get_templates)):
    store.delete(template_id)
    return Response(status_code=204)


@router.post("/api/templates/{template_id}/render", response_model=RenderResponse)
async def render_template(
    template_id: str,
    request: RenderRequest,
    store: TemplateStore = Depends(get_templates),
):
    """Fill a template's placeholders; records a usage."""
    content = store.render(template_id, request.values, strict=request.strict)
    return RenderResponse(template_id=template_id, content=content)


@router.post("/api/variables", response_model=VariablesResponse)
async def variables(request: VariablesRequest):
    """Placeholders found in an arbitrary body, first occurrence order."""
    return VariablesResponse(variables=extract_variables(request.body))
