"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leasedocs.api.routes.documents import router as documents_router
from leasedocs.api.routes.templates import router as templates_router
from leasedocs.api.schemas import HealthResponse
from leasedocs.db import DatabaseInterface, get_database
from leasedocs.errors import LeasedocsError
from leasedocs.services.documents import DocumentService
from leasedocs.services.storage import FileStorage
from leasedocs.services.template_store import TemplateStore
from leasedocs.utils.config import get_settings

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI):
    """Map pipeline errors onto HTTP status codes with a {"detail": ...} body"""

    @app.exception_handler(LeasedocsError)
    async def leasedocs_error_handler(request: Request, exc: LeasedocsError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        content = {"detail": exc.message}
        field = getattr(exc, "field", None)
        if field:
            content["field"] = field
        return JSONResponse(status_code=exc.status_code, content=content)


def create_app(
    db: Optional[DatabaseInterface] = None,
    storage: Optional[FileStorage] = None,
    converter=None,
) -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        logger.info(f"leasedocs API ready ({app.state.db.get_status().get('status')})")
        yield

    app = FastAPI(
        title="Leasedocs API",
        description="Document templates, contract generation and document lifecycle",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    db = db or get_database()
    templates = TemplateStore(db)
    app.state.db = db
    app.state.templates = templates
    app.state.documents = DocumentService(
        db, storage=storage, converter=converter, templates=templates
    )

    setup_exception_handlers(app)
    app.include_router(templates_router)
    app.include_router(documents_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        status = app.state.db.get_status()
        return HealthResponse(
            status="ok" if status.get("status") == "connected" else status.get("status", "error"),
            templates=status.get("templates", 0),
            documents=status.get("documents", 0),
        )

    return app
