"""
Firebase Admin App

One Firebase app per process, shared by the Firestore document store and
ID token verification.
"""

import logging

import firebase_admin
from firebase_admin import credentials

from src.config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_firebase_app(settings: Settings | None = None) -> firebase_admin.App:
    """
    Get the default Firebase app, initializing it on first use.

    Uses the service account file when configured, otherwise application
    default credentials.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    settings = settings or get_settings()
    if settings.firebase_credentials_file:
        cred = credentials.Certificate(settings.firebase_credentials_file)
    else:
        cred = credentials.ApplicationDefault()
    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None

    app = firebase_admin.initialize_app(cred, options)
    logger.info("Initialized Firebase app")
    return app
