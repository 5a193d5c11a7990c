"""Document lifecycle: generation, upload, editing, status changes and download.

Status machine:

    draft --send--> pending --sign--> active <--toggle--> inactive
                            --reject--> rejected

Any document can be deleted; deletion is permanent and leaves the usage
count of the template it came from alone.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from uuid import uuid4

from leasedocs.db.base import DatabaseInterface
from leasedocs.errors import AuthError, InvalidStateError, NotFoundError, ValidationError
from leasedocs.models.contract import ContractForm, ContractKind
from leasedocs.models.document import (
    Credential,
    Document,
    DocumentFilter,
    DocumentStats,
    DocumentStatus,
    DocumentType,
    DownloadFormat,
    DownloadResult,
)
from leasedocs.services.contract import ContractContentGenerator
from leasedocs.services.storage import FileStorage
from leasedocs.services.template_store import TemplateStore
from leasedocs.utils.config import get_settings

logger = logging.getLogger(__name__)

# (current status, action) -> next status
TRANSITIONS = {
    (DocumentStatus.DRAFT, "send"): DocumentStatus.PENDING,
    (DocumentStatus.PENDING, "sign"): DocumentStatus.ACTIVE,
    (DocumentStatus.PENDING, "reject"): DocumentStatus.REJECTED,
    (DocumentStatus.ACTIVE, "deactivate"): DocumentStatus.INACTIVE,
    (DocumentStatus.INACTIVE, "activate"): DocumentStatus.ACTIVE,
}

CONTRACT_CATEGORIES = {
    ContractKind.MANAGER: "Management Contract",
    ContractKind.TENANT: "Lease Contract",
}

RECENT_WINDOW = timedelta(days=30)


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower() or "document"


def require_credential(credential: Optional[Credential]) -> Credential:
    if credential is None or not credential.user_id:
        raise AuthError("Authentication required")
    return credential


class DocumentService:
    """Persists documents and guards their status transitions"""

    def __init__(
        self,
        db: DatabaseInterface,
        storage: Optional[FileStorage] = None,
        converter=None,
        templates: Optional[TemplateStore] = None,
        generator: Optional[ContractContentGenerator] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self._storage = storage
        self._converter = converter
        self.templates = templates
        self._clock = clock
        self.generator = generator or ContractContentGenerator(clock=clock)

    @property
    def storage(self) -> FileStorage:
        """Lazy-load file storage."""
        if self._storage is None:
            self._storage = FileStorage()
        return self._storage

    @property
    def converter(self):
        """Lazy-load format converter."""
        if self._converter is None:
            from leasedocs.services.conversion import FormatConverter
            self._converter = FormatConverter()
        return self._converter

    # Persistence helpers

    def _save(self, document: Document) -> Document:
        document = document.model_copy(update={"updated_at": self._clock()})
        self.db.upsert_document(document.model_dump())
        return document

    def get(self, document_id: str) -> Document:
        row = self.db.get_document(document_id)
        if not row:
            raise NotFoundError(f"Document not found: {document_id}")
        return Document(**row)

    def list(self, filter: Optional[DocumentFilter] = None) -> list[Document]:
        filters = (filter or DocumentFilter()).model_dump(exclude_none=True)
        return [Document(**row) for row in self.db.list_documents(filters)]

    def _transition(self, document: Document, action: str) -> DocumentStatus:
        next_status = TRANSITIONS.get((document.status, action))
        if next_status is None:
            raise InvalidStateError(
                f"Cannot {action} a document that is {document.status.value}"
            )
        return next_status

    # Creation

    def generate_contract(
        self,
        credential: Credential,
        form: ContractForm,
        name: Optional[str] = None,
        description: str = "",
    ) -> Document:
        """Render a contract and store it as a draft document."""
        credential = require_credential(credential)
        if form.template_id:
            if self.templates is None:
                raise NotFoundError(f"Template not found: {form.template_id}")
            self.templates.get(form.template_id)

        generated = self.generator.generate(form)
        now = self._clock()
        document = Document(
            id=str(uuid4()),
            name=name or f"{generated.title.title()} - {form.counterpart.name}",
            type=DocumentType.CONTRACT,
            category=CONTRACT_CATEGORIES[form.kind],
            description=description,
            status=DocumentStatus.DRAFT,
            metadata={
                "content": generated.content,
                "contract_type": form.kind.value,
                "template_id": form.template_id,
                "generated_at": generated.generated_at,
            },
            property_id=form.property.id,
            manager_id=form.counterpart.id if form.kind == ContractKind.MANAGER else None,
            tenant_id=form.counterpart.id if form.kind == ContractKind.TENANT else None,
            uploaded_by=credential.user_id,
            created_at=now,
        )
        document = self._save(document)
        if form.template_id:
            self.templates.record_usage(form.template_id)
        logger.info(f"Created draft contract {document.id} for {form.counterpart.name}")
        return document

    def upload(
        self,
        credential: Credential,
        name: str,
        filename: str,
        data: bytes,
        type: DocumentType = DocumentType.OTHER,
        category: str = "",
        description: str = "",
        property_id: Optional[str] = None,
        unit_id: Optional[str] = None,
        manager_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Document:
        """Store an uploaded file as a document in the configured initial status."""
        credential = require_credential(credential)
        if not name or not name.strip():
            raise ValidationError("Document name is required", field="name")
        initial = DocumentStatus(get_settings().upload_initial_status)

        file_url = self.storage.save(filename, data)
        try:
            document = Document(
                id=str(uuid4()),
                name=name.strip(),
                type=type,
                category=category,
                description=description,
                status=initial,
                property_id=property_id,
                unit_id=unit_id,
                manager_id=manager_id,
                tenant_id=tenant_id,
                file_url=file_url,
                file_name=filename,
                file_format=self.storage.extension(filename),
                file_size=len(data),
                uploaded_by=credential.user_id,
                created_at=self._clock(),
                expires_at=expires_at,
            )
            document = self._save(document)
        except Exception:
            self.storage.delete(file_url)
            raise
        logger.info(f"Uploaded document {document.id} ({filename})")
        return document

    # Edits

    def update_details(self, credential: Credential, document_id: str, **fields) -> Document:
        """Change name, description, category or expiry."""
        require_credential(credential)
        allowed = {"name", "description", "category", "expires_at"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )
        if "name" in fields and not (fields["name"] or "").strip():
            raise ValidationError("Document name is required", field="name")
        document = self.get(document_id)
        return self._save(document.model_copy(update=fields))

    def edit_content(self, credential: Credential, document_id: str, content: str) -> Document:
        """Replace the body of a draft contract."""
        credential = require_credential(credential)
        document = self.get(document_id)
        if document.type != DocumentType.CONTRACT:
            raise InvalidStateError("Only generated contracts can be edited")
        if document.status != DocumentStatus.DRAFT:
            raise InvalidStateError(
                f"Only draft contracts can be edited; this one is {document.status.value}"
            )
        metadata = dict(document.metadata)
        metadata["content"] = content
        metadata["last_edited"] = self._clock().isoformat()
        metadata["last_edited_by"] = credential.user_id
        document = self._save(document.model_copy(update={"metadata": metadata}))
        logger.info(f"Edited content of document {document_id}")
        return document

    # Status

    def send_for_signature(self, credential: Credential, document_id: str) -> Document:
        credential = require_credential(credential)
        document = self.get(document_id)
        status = self._transition(document, "send")
        metadata = dict(document.metadata)
        metadata["sent_at"] = self._clock().isoformat()
        metadata["sent_by"] = credential.user_id
        document = self._save(document.model_copy(update={"status": status, "metadata": metadata}))
        logger.info(f"Document {document_id} sent for signature by {credential.user_id}")
        return document

    def record_signing_outcome(self, document_id: str, accepted: bool) -> Document:
        """Callback for the external signing flow."""
        document = self.get(document_id)
        status = self._transition(document, "sign" if accepted else "reject")
        document = self._save(document.model_copy(update={"status": status}))
        logger.info(f"Document {document_id} is now {status.value}")
        return document

    def toggle_active(self, credential: Credential, document_id: str) -> Document:
        require_credential(credential)
        document = self.get(document_id)
        action = "deactivate" if document.status == DocumentStatus.ACTIVE else "activate"
        status = self._transition(document, action)
        document = self._save(document.model_copy(update={"status": status}))
        logger.info(f"Document {document_id} is now {status.value}")
        return document

    # Sharing

    def share(self, credential: Credential, document_id: str, user_ids: List[str]) -> Document:
        """Grant visibility to more counterparts; existing grants stay."""
        require_credential(credential)
        user_ids = [uid for uid in user_ids if uid]
        if not user_ids:
            raise ValidationError("Choose at least one person to share with", field="shared_with")
        document = self.get(document_id)
        if document.status == DocumentStatus.DRAFT:
            raise InvalidStateError("Draft documents cannot be shared")
        shared_with = list(dict.fromkeys(document.shared_with + user_ids))
        document = self._save(document.model_copy(update={
            "shared_with": shared_with,
            "is_shared": True,
        }))
        logger.info(f"Document {document_id} shared with {len(shared_with)} user(s)")
        return document

    def unshare(self, credential: Credential, document_id: str, user_ids: List[str]) -> Document:
        require_credential(credential)
        document = self.get(document_id)
        shared_with = [uid for uid in document.shared_with if uid not in set(user_ids)]
        return self._save(document.model_copy(update={
            "shared_with": shared_with,
            "is_shared": bool(shared_with),
        }))

    # Removal and download

    def delete(self, credential: Credential, document_id: str) -> None:
        """Delete permanently, including any stored file."""
        require_credential(credential)
        document = self.get(document_id)
        if document.file_url:
            if not self.storage.delete(document.file_url):
                logger.warning(f"Stored file for document {document_id} was already gone")
        self.db.delete_document(document_id)
        logger.info(f"Deleted document {document_id}")

    def download(
        self, credential: Credential, document_id: str, fmt: DownloadFormat
    ) -> DownloadResult:
        """Original bytes for uploads; a fresh conversion for generated content."""
        from leasedocs.services.conversion import MEDIA_TYPES

        require_credential(credential)
        try:
            fmt = DownloadFormat(fmt)
        except ValueError:
            raise ValidationError(
                f"Unsupported format '{fmt}'. Supported formats: pdf, docx", field="format"
            )
        document = self.get(document_id)
        base_name = sanitize_filename(document.name)

        if document.has_upload:
            original = (document.file_format or self.storage.extension(document.file_url)).lower()
            return DownloadResult(
                filename=f"{base_name}.{original}",
                media_type=MEDIA_TYPES.get(original, "application/octet-stream"),
                data=self.storage.read(document.file_url),
            )

        if not document.content:
            raise InvalidStateError("Document has no content or file to download")
        data = self.converter.convert(document.content, fmt, title=document.name)
        return DownloadResult(
            filename=f"{base_name}.{fmt.value}",
            media_type=MEDIA_TYPES[fmt.value],
            data=data,
        )

    def stats(self) -> DocumentStats:
        documents = self.list()
        since = self._clock() - RECENT_WINDOW
        by_type: dict[str, int] = {}
        for document in documents:
            by_type[document.type.value] = by_type.get(document.type.value, 0) + 1
        return DocumentStats(
            total=len(documents),
            by_type=by_type,
            recent=sum(1 for d in documents if d.created_at >= since),
        )
