"""Async HTTP client for the leasedocs API.

Every call is made on behalf of the credential the client was built with;
nothing is read from ambient state. Failures surface as TransportError
carrying the server's ``detail`` message, or a generic one when the server
sent none.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from leasedocs.errors import TransportError
from leasedocs.models.contract import ContractForm
from leasedocs.models.document import (
    Credential,
    Document,
    DocumentFilter,
    DocumentStats,
    DownloadFormat,
)
from leasedocs.models.template import Template, TemplateFilter, TemplateType
from leasedocs.utils.config import get_settings

logger = logging.getLogger(__name__)


class RequestEpoch:
    """Generation counter used to drop responses that arrive out of order.

    Call ``begin()`` before issuing a request and keep the number it
    returns; when the response lands, apply it only if ``is_current()``.
    """

    def __init__(self):
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation


class LeasedocsClient:
    """JSON client for the templates, contracts and documents endpoints"""

    def __init__(
        self,
        credential: Credential,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        settings = get_settings()
        self.credential = credential
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.request_timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "LeasedocsClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.credential.token}"}

    @staticmethod
    async def _error_detail(response) -> Optional[str]:
        try:
            body = await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            return None
        if isinstance(body, dict) and isinstance(body.get("detail"), str):
            return body["detail"]
        return None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
        data: Any = None,
        raw: bool = False,
    ):
        if self._session is None:
            raise TransportError("Client session is not open")
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v.value if hasattr(v, "value") else v for k, v in params.items()}
        try:
            async with self._session.request(
                method, url, json=json, params=params, data=data, headers=self._headers()
            ) as response:
                if response.status >= 400:
                    detail = await self._error_detail(response)
                    logger.warning(f"{method} {path} failed with {response.status}: {detail}")
                    raise TransportError(detail, status=response.status)
                if raw:
                    return await response.read()
                if response.status == 204:
                    return None
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError() from e

    # Templates

    async def list_templates(self, filter: Optional[TemplateFilter] = None) -> list[Template]:
        params = (filter or TemplateFilter()).model_dump(exclude_none=True)
        body = await self._request("GET", "/api/templates", params=params)
        return [Template(**item) for item in body]

    async def create_template(
        self, name: str, type: TemplateType, description: str, body: str
    ) -> Template:
        payload = {"name": name, "type": type.value, "description": description, "body": body}
        return Template(**await self._request("POST", "/api/templates", json=payload))

    async def render_template(
        self, template_id: str, values: dict[str, str], strict: bool = False
    ) -> str:
        body = await self._request(
            "POST", f"/api/templates/{template_id}/render",
            json={"values": values, "strict": strict},
        )
        return body["content"]

    async def extract_variables(self, body: str) -> list[str]:
        result = await self._request("POST", "/api/variables", json={"body": body})
        return result["variables"]

    # Contracts and documents

    async def generate_contract(self, form: ContractForm, name: Optional[str] = None) -> Document:
        payload = {"form": form.model_dump(mode="json"), "name": name}
        return Document(**await self._request("POST", "/api/contracts", json=payload))

    async def list_documents(self, filter: Optional[DocumentFilter] = None) -> list[Document]:
        params = (filter or DocumentFilter()).model_dump(exclude_none=True)
        body = await self._request("GET", "/api/documents", params=params)
        return [Document(**item) for item in body]

    async def get_document(self, document_id: str) -> Document:
        return Document(**await self._request("GET", f"/api/documents/{document_id}"))

    async def upload_document(
        self, name: str, filename: str, data: bytes, type: str = "other", category: str = ""
    ) -> Document:
        form = aiohttp.FormData()
        form.add_field("name", name)
        form.add_field("type", type)
        form.add_field("category", category)
        form.add_field("file", data, filename=filename)
        return Document(**await self._request("POST", "/api/documents/upload", data=form))

    async def edit_content(self, document_id: str, content: str) -> Document:
        body = await self._request(
            "PUT", f"/api/documents/{document_id}/content", json={"content": content}
        )
        return Document(**body)

    async def send_for_signature(self, document_id: str) -> Document:
        return Document(**await self._request("POST", f"/api/documents/{document_id}/send"))

    async def toggle_active(self, document_id: str) -> Document:
        return Document(**await self._request("POST", f"/api/documents/{document_id}/toggle"))

    async def share(self, document_id: str, user_ids: list[str]) -> Document:
        body = await self._request(
            "POST", f"/api/documents/{document_id}/share", json={"user_ids": user_ids}
        )
        return Document(**body)

    async def delete_document(self, document_id: str) -> None:
        await self._request("DELETE", f"/api/documents/{document_id}")

    async def download(self, document_id: str, fmt: DownloadFormat) -> bytes:
        return await self._request(
            "GET", f"/api/documents/{document_id}/download",
            params={"format": DownloadFormat(fmt)}, raw=True,
        )

    async def document_stats(self) -> DocumentStats:
        return DocumentStats(**await self._request("GET", "/api/documents/stats"))


class DocumentListLoader:
    """Keeps the latest document list, ignoring superseded loads"""

    def __init__(self, client: LeasedocsClient, epoch: Optional[RequestEpoch] = None):
        self.client = client
        self.epoch = epoch or RequestEpoch()
        self.documents: list[Document] = []

    async def load(self, filter: Optional[DocumentFilter] = None) -> Optional[list[Document]]:
        """Fetch documents; returns None when a newer load started meanwhile."""
        generation = self.epoch.begin()
        documents = await self.client.list_documents(filter)
        if not self.epoch.is_current(generation):
            logger.debug(f"Discarding stale document list (generation {generation})")
            return None
        self.documents = documents
        return documents
