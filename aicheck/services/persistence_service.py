"""
Best-effort storage of finished analyses in Firestore (`analyses`).

Disabled unless `settings.persist_results` is on. Writes happen off the
event loop and failures are only logged.
"""

import asyncio
import logging
from datetime import datetime, timezone

from pydantic import BaseModel

from aicheck.integrations import firebase as firebase_module

logger = logging.getLogger(__name__)

ANALYSES_COLLECTION = "analyses"


def _sync_save(doc_id: str, record: dict) -> None:
    db = firebase_module.db
    if not db:
        logger.warning("[PERSIST] Firebase not initialized; skipping save.")
        return
    try:
        db.collection(ANALYSES_COLLECTION).document(doc_id).set(record)
        logger.info(f"[PERSIST] Saved analysis {doc_id}")
    except Exception as e:
        logger.error(f"[PERSIST ERROR] Failed to save analysis {doc_id}: {e}")


class PersistenceService:
    def save(self, result: BaseModel, kind: str = "classification") -> None:
        record = result.model_dump(mode="json", exclude={"stages"})
        record["type"] = kind
        record["saved_at"] = datetime.now(timezone.utc)

        stamp = int(record["saved_at"].timestamp() * 1000)
        doc_id = f"{record.get('fingerprint') or 'nofp'}_{kind}_{stamp}"

        try:
            loop = asyncio.get_running_loop()
            loop.create_task(asyncio.to_thread(_sync_save, doc_id, record))
        except RuntimeError:
            _sync_save(doc_id, record)
