from __future__ import annotations

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def init_firestore(
    *,
    project_id: Optional[str] = None,
    service_account_json: Optional[str] = None,
    credentials_path: Optional[str] = None,
):
    """Initialise the Firebase Admin SDK once and return a Firestore client.

    Credential sources, in order:
        1. ``service_account_json`` (the FIREBASE_SERVICE_ACCOUNT env value)
        2. ``credentials_path`` (a service account key file)
        3. Application Default Credentials
    """

    if firebase_admin._apps:
        return firestore.client()

    app_options = {"projectId": project_id} if project_id else None

    if service_account_json:
        try:
            cred = credentials.Certificate(json.loads(service_account_json))
        except ValueError as exc:
            raise ValidationError(f"FIREBASE_SERVICE_ACCOUNT is not a valid service account: {exc}") from exc
        source = "environment"
    elif credentials_path:
        if not os.path.exists(credentials_path):
            raise ValidationError(f"Service account file not found: {credentials_path}")
        cred = credentials.Certificate(credentials_path)
        source = credentials_path
    else:
        cred = credentials.ApplicationDefault()
        source = "application default credentials"

    firebase_admin.initialize_app(cred, app_options)
    logger.info("Firebase initialised (%s, project=%s)", source, project_id or "<from credentials>")
    return firestore.client()
