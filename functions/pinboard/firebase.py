"""
Firebase app bootstrap shared by the Firestore and Firebase Storage clients.
"""

from __future__ import annotations

import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)

APP_NAME = "pinboard"


def get_firebase_app(
    credentials_path: Optional[str] = None,
    project_id: Optional[str] = None,
    storage_bucket: Optional[str] = None,
) -> firebase_admin.App:
    """
    Return the named Firebase app, initializing it on first use.

    Without a credentials file the application default credentials are used.
    """
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass

    cred = (
        credentials.Certificate(credentials_path)
        if credentials_path
        else credentials.ApplicationDefault()
    )
    options = {}
    if project_id:
        options["projectId"] = project_id
    if storage_bucket:
        options["storageBucket"] = storage_bucket
    logger.info("Initializing Firebase app for project %s", project_id or "<default>")
    return firebase_admin.initialize_app(cred, options=options, name=APP_NAME)
