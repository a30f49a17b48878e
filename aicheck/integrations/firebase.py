"""
Firestore integration.

`db` is None until `initialize()` runs in the FastAPI lifespan. Monitoring
and persistence are both optional sinks: when Firestore cannot be reached
they log and keep working in memory.
"""

import os
import json
import logging
import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)

# Consumers read `firebase.db` at call time.
db = None  # firestore.Client | None


def _credentials():
    service_account_json = os.getenv("FIREBASE_SERVICE_ACCOUNT")
    if not service_account_json:
        return None
    try:
        return credentials.Certificate(json.loads(service_account_json))
    except Exception as e:
        logger.error(f"[STARTUP] Invalid FIREBASE_SERVICE_ACCOUNT: {e}")
        return None


def initialize() -> None:
    """Initialize the Admin SDK and bind a Firestore client to `db`."""
    global db

    try:
        if not firebase_admin._apps:
            cred = _credentials()
            if cred is not None:
                firebase_admin.initialize_app(cred)
            else:
                firebase_admin.initialize_app()
        db = firestore.client()
        logger.info("[STARTUP] Firebase initialized")
    except Exception as e:
        db = None
        logger.warning(f"[STARTUP] Firestore unavailable, analysis events stay in memory: {e}")
