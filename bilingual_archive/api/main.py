"""FastAPI application setup for the bilingual archive API."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import time

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from .middleware import setup_middleware
from .models import ErrorResponse
from .routes import admin, imports, nodes
from ..config import ArchiveSettings, build_store, load_settings
from ..exceptions import (
    ArchiveError,
    InvalidFieldError,
    InvalidParentError,
    NotFoundError,
    PersistenceError,
    UnsupportedFormatError,
)
from ..importer.service import ImportService
from ..storage.node_store import NodeStore
from ..storage.sql_store import SqlNodeBackend
from ..translation.service import TranslationService

logger = logging.getLogger(__name__)

API_TITLE = "Bilingual Archive API"
API_VERSION = "0.1.0"

# Most specific first.
ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (InvalidParentError, status.HTTP_409_CONFLICT, "invalid_destination"),
    (InvalidFieldError, status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid_field"),
    (UnsupportedFormatError, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "unsupported_format"),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE, "persistence_error"),
]


def _error_response(request: Request, status_code: int, detail: str, error_code: str,
                    headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            detail=detail,
            error_code=error_code,
            path=request.url.path,
        ).model_dump(mode="json"),
        headers=headers,
    )


def create_app(
    settings: Optional[ArchiveSettings] = None,
    store: Optional[NodeStore] = None,
    translator: Optional[TranslationService] = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Archive settings, read from the environment when omitted
        store: Node store, built from ``settings`` when omitted
        translator: Translation service, built from ``settings`` when omitted

    Returns:
        FastAPI: Configured application
    """
    settings = settings or load_settings()
    store = store or build_store(settings)
    translator = translator or TranslationService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.start_time = time.time()
        await store.initialize()
        mode = "local-only" if store.local_only else "remote-primary"
        logger.info(f"API starting up ({mode} storage)")
        yield
        logger.info("API shutting down")
        await translator.close()
        if isinstance(store.remote, SqlNodeBackend):
            await store.remote.close()

    app = FastAPI(
        title=API_TITLE,
        description="Browse and curate a bilingual English/Hebrew content archive",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.translator = translator
    app.state.import_service = ImportService(store, translator)

    # Setup middleware
    setup_middleware(app)

    @app.exception_handler(ArchiveError)
    async def archive_exception_handler(request: Request, exc: ArchiveError):
        """Map archive errors onto HTTP status codes."""
        for error_type, status_code, error_code in ERROR_STATUS:
            if isinstance(exc, error_type):
                if status_code >= 500:
                    logger.error(f"{error_code} on {request.url.path}: {exc}")
                return _error_response(request, status_code, str(exc), error_code)
        logger.exception(f"Unhandled archive error: {exc}")
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "internal_server_error"
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions."""
        return _error_response(
            request, exc.status_code, str(exc.detail), f"http_{exc.status_code}", exc.headers
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle generic exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"An unexpected error occurred: {str(exc)}",
            "internal_server_error",
        )

    app.include_router(nodes.router)
    app.include_router(imports.router)
    app.include_router(admin.router)

    @app.get("/", summary="API root", description="Get API information")
    async def root() -> Dict[str, Any]:
        """Get API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "documentation": "/docs",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/health", summary="Health check", description="Check if the API is healthy")
    async def health_check() -> Dict[str, Any]:
        """Check if the API is healthy."""
        return {
            "status": "ok",
            "storage": "local-only" if store.local_only else "remote-primary",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.time() - app.state.start_time if hasattr(app.state, "start_time") else 0,
        }

    return app


def app_from_env() -> FastAPI:
    """Configure logging and build the app from environment settings.

    Run with ``uvicorn --factory bilingual_archive.api.main:app_from_env``.
    """
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return create_app(settings)
