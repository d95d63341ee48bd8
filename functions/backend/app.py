"""
FastAPI application entry point for the Fitness Chronicle backend.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from google.api_core import exceptions

from backend.auth import TokenVerifier
from backend.config import Settings, get_settings
from backend.dependencies import build_store, build_token_verifier
from backend.errors import NotFoundError, UnauthorizedError
from backend.routes import fitness_router, label_router
from backend.store import DocumentStore

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "Fitness Chronicle server is running!"


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(UnauthorizedError)
    async def _unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(status_code=401, content={"detail": exc.message})

    @app.exception_handler(exceptions.TooManyRequests)
    async def _quota(request: Request, exc: exceptions.TooManyRequests):
        logger.warning("Firestore quota exceeded on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=429,
            content={"detail": "Quota exceeded. Please try again later."},
        )

    @app.exception_handler(exceptions.Aborted)
    async def _aborted(request: Request, exc: exceptions.Aborted):
        logger.warning("Transaction aborted on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=409,
            content={"detail": "The request conflicted with a concurrent update."},
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[DocumentStore] = None,
    verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Fitness Chronicle Backend (FastAPI)", version="0.1.0")
    app.state.store = store if store is not None else build_store(settings)
    app.state.token_verifier = (
        verifier if verifier is not None else build_token_verifier(settings)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    prefix = settings.api_prefix.rstrip("/")
    app.include_router(fitness_router, prefix=f"{prefix}/fitness")
    app.include_router(label_router, prefix=f"{prefix}/label")
    app.include_router(label_router, prefix=f"{prefix}/emoji")
    _install_error_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def health() -> str:
        return HEALTH_MESSAGE

    return app


app = create_app()
