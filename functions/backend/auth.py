"""
Resolving a bearer credential to a user id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from firebase_admin import auth

from backend.errors import UnauthorizedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class TokenVerifier(Protocol):
    """Maps an ID token to a uid, or None when the token is not valid."""

    def verify(self, id_token: str) -> Optional[str]:
        ...


@dataclass
class StaticTokenVerifier:
    """Fixed token -> uid table for local runs and tests."""

    tokens: Dict[str, str] = field(default_factory=dict)

    def verify(self, id_token: str) -> Optional[str]:
        return self.tokens.get(id_token)


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, app=None):
        self.app = app

    def verify(self, id_token: str) -> Optional[str]:
        try:
            decoded = auth.verify_id_token(id_token, app=self.app)
        except (
            auth.InvalidIdTokenError,
            auth.CertificateFetchError,
            auth.UserDisabledError,
            ValueError,
        ) as e:
            logger.warning("Firebase ID token verification failed: %s", e)
            return None
        return decoded.get("uid")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extracts the token from an `Authorization: Bearer <token>` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def resolve_user_id(verifier: TokenVerifier, authorization: Optional[str]) -> str:
    """
    Raises:
        UnauthorizedError: no token, or the verifier rejected it.
    """
    token = bearer_token(authorization)
    user_id = verifier.verify(token) if token else None
    if not user_id:
        raise UnauthorizedError()
    return user_id
