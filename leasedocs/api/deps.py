"""Request dependencies: services held on the app and the caller's credential"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from leasedocs.errors import AuthError
from leasedocs.models.document import Credential
from leasedocs.services.documents import DocumentService
from leasedocs.services.template_store import TemplateStore
from leasedocs.utils.config import get_settings

bearer = HTTPBearer(auto_error=False)


def get_templates(request: Request) -> TemplateStore:
    return request.app.state.templates


def get_documents(request: Request) -> DocumentService:
    return request.app.state.documents


def get_credential(
    auth: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Credential:
    """Resolve the bearer token against the configured API keys."""
    if auth is None or not auth.credentials:
        raise AuthError("Authentication required")
    user_id = get_settings().token_map().get(auth.credentials)
    if user_id is None:
        raise AuthError("Invalid or expired token")
    return Credential(user_id=user_id, token=auth.credentials)
