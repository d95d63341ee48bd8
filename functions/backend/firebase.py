"""
Firebase Admin SDK initialization.

The app is created explicitly from settings and handed to whatever needs it
(the Firestore store, the token verifier), instead of being initialized as a
side effect of importing a module.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

import firebase_admin
from firebase_admin import credentials

from backend.config import Settings

logger = logging.getLogger(__name__)

APP_NAME = "fitness-chronicle"


def load_service_account(settings: Settings) -> Optional[Union[dict, str]]:
    """
    Returns the service account as a parsed dict or a file path, or None.

    Raises:
        ValueError: FIREBASE_SERVICE_ACCOUNT_JSON is set but is not valid JSON.
    """
    if settings.firebase_service_account_json:
        try:
            return json.loads(settings.firebase_service_account_json)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Failed to parse FIREBASE_SERVICE_ACCOUNT_JSON: {e}"
            ) from e

    path = settings.firebase_service_account_path
    if path and Path(path).is_file():
        return str(path)
    return None


def init_firebase_app(settings: Settings, name: str = APP_NAME) -> firebase_admin.App:
    """Returns the named Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass

    service_account = load_service_account(settings)
    if service_account is not None:
        credential = credentials.Certificate(service_account)
    else:
        credential = credentials.ApplicationDefault()

    options = None
    if settings.firebase_project_id:
        options = {"projectId": settings.firebase_project_id}

    app = firebase_admin.initialize_app(credential, options, name=name)
    logger.info("Firebase Admin SDK initialized (app=%s)", name)
    return app
