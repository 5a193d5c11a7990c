"""Document API routes: contract generation, upload, lifecycle and download."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from leasedocs.api.deps import get_credential, get_documents
from leasedocs.api.schemas import (
    ContentRequest,
    ContractRequest,
    DocumentUpdateRequest,
    ShareRequest,
    SigningOutcomeRequest,
)
from leasedocs.models.document import (
    Credential,
    Document,
    DocumentFilter,
    DocumentStats,
    DocumentStatus,
    DocumentType,
    DownloadFormat,
)
from leasedocs.services.documents import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/contracts", response_model=Document, status_code=201)
async def generate_contract(
    request: ContractRequest,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    """Render a manager or tenant contract and store it as a draft."""
    return service.generate_contract(
        credential, request.form, name=request.name, description=request.description
    )


@router.get("/api/documents", response_model=list[Document])
async def list_documents(
    status: Optional[DocumentStatus] = None,
    type: Optional[DocumentType] = None,
    category: Optional[str] = None,
    property_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    manager_id: Optional[str] = None,
    search: Optional[str] = None,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.list(DocumentFilter(
        status=status,
        type=type,
        category=category,
        property_id=property_id,
        tenant_id=tenant_id,
        manager_id=manager_id,
        search=search,
    ))


@router.get("/api/documents/stats", response_model=DocumentStats)
async def document_stats(
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.stats()


@router.post("/api/documents/upload", response_model=Document, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    name: str = Form(...),
    type: DocumentType = Form(DocumentType.OTHER),
    category: str = Form(""),
    description: str = Form(""),
    property_id: Optional[str] = Form(None),
    unit_id: Optional[str] = Form(None),
    manager_id: Optional[str] = Form(None),
    tenant_id: Optional[str] = Form(None),
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    """Store a PDF/DOC/DOCX file as a document."""
    data = await file.read()
    return service.upload(
        credential,
        name=name,
        filename=file.filename or "",
        data=data,
        type=type,
        category=category,
        description=description,
        property_id=property_id,
        unit_id=unit_id,
        manager_id=manager_id,
        tenant_id=tenant_id,
    )


@router.get("/api/documents/{document_id}", response_model=Document)
async def get_document(
    document_id: str,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.get(document_id)


@router.patch("/api/documents/{document_id}", response_model=Document)
async def update_document(
    document_id: str,
    request: DocumentUpdateRequest,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.update_details(
        credential, document_id, **request.model_dump(exclude_unset=True)
    )


@router.put("/api/documents/{document_id}/content", response_model=Document)
async def edit_content(
    document_id: str,
    request: ContentRequest,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    """Save edited content of a draft contract."""
    return service.edit_content(credential, document_id, request.content)


@router.post("/api/documents/{document_id}/send", response_model=Document)
async def send_for_signature(
    document_id: str,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.send_for_signature(credential, document_id)


@router.post("/api/documents/{document_id}/signing", response_model=Document)
async def signing_outcome(
    document_id: str,
    request: SigningOutcomeRequest,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    """Record whether the counterpart signed or rejected."""
    return service.record_signing_outcome(document_id, request.accepted)


@router.post("/api/documents/{document_id}/toggle", response_model=Document)
async def toggle_document(
    document_id: str,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.toggle_active(credential, document_id)


@router.post("/api/documents/{document_id}/share", response_model=Document)
async def share_document(
    document_id: str,
    request: ShareRequest,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.share(credential, document_id, request.user_ids)


@router.post("/api/documents/{document_id}/unshare", response_model=Document)
async def unshare_document(
    document_id: str,
    request: ShareRequest,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    return service.unshare(credential, document_id, request.user_ids)


@router.delete("/api/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    service.delete(credential, document_id)
    return Response(status_code=204)


@router.get("/api/documents/{document_id}/download")
async def download_document(
    document_id: str,
    format: DownloadFormat = DownloadFormat.PDF,
    credential: Credential = Depends(get_credential),
    service: DocumentService = Depends(get_documents),
):
    """Stream the uploaded file, or the content converted to PDF/DOCX."""
    result = service.download(credential, document_id, format)
    return Response(
        content=result.data,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
