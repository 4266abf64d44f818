"""Foodies API: FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foodies.core.config import settings
from foodies.core.exceptions import register_exception_handlers
from foodies.db.base import async_session_factory
from foodies.middleware.audit import AuditMiddleware
from foodies.routers import api_router
from foodies.schemas.common import HealthResponse
from foodies.services.identity import IdentityClient
from foodies.services.storage import StorageClient


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the identity and storage clients once per process.

    Anything already placed on ``app.state`` (tests inject fakes) is kept.
    """
    owned = []
    if getattr(app.state, "identity", None) is None:
        app.state.identity = IdentityClient()
        owned.append(app.state.identity)
    if getattr(app.state, "storage", None) is None:
        app.state.storage = StorageClient()
        owned.append(app.state.storage)
    try:
        yield
    finally:
        for client in owned:
            await client.aclose()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
        lifespan=lifespan,
    )
    app.state.session_factory = async_session_factory

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- API routes (/api/*) ---
    app.include_router(api_router)

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
