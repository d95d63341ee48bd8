"""
Dependency wiring for the FastAPI app.

The store and token verifier are built once by create_app and kept on
app.state; request handlers receive them through these dependencies.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from firebase_admin import firestore

from backend.auth import (
    FirebaseTokenVerifier,
    StaticTokenVerifier,
    TokenVerifier,
    resolve_user_id,
)
from backend.config import Settings
from backend.errors import UnauthorizedError
from backend.firebase import init_firebase_app
from backend.store import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)


def _use_in_memory(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not settings.firebase_configured


def build_store(settings: Settings) -> DocumentStore:
    if _use_in_memory(settings):
        if not settings.use_in_memory_backends:
            logger.warning("Firebase is not configured; using the in-memory store")
        return InMemoryDocumentStore()
    app = init_firebase_app(settings)
    return FirestoreDocumentStore(firestore.client(app=app))


def build_token_verifier(settings: Settings) -> TokenVerifier:
    if _use_in_memory(settings):
        return StaticTokenVerifier(dict(settings.static_auth_tokens))
    return FirebaseTokenVerifier(init_firebase_app(settings))


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> str:
    try:
        return resolve_user_id(verifier, authorization)
    except UnauthorizedError as e:
        raise HTTPException(status_code=401, detail=e.message)
