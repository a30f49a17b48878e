"""
Analysis monitoring.

Keeps rolling in-memory stats of recent analyses and mirrors each event to
Firestore (`analysis_events`).

The Firebase `db` client is read at call time through the integration module
so it picks up the instance created during the FastAPI lifespan.

`record` is fire-and-forget: inside a running event loop the Firestore write
is pushed to a worker thread so it never delays the pipeline. In sync
contexts (tests, scripts) it runs inline.
"""

import asyncio
import logging
from collections import Counter, deque
from datetime import datetime, timezone

from aicheck.config import settings
from aicheck.integrations import firebase as firebase_module

logger = logging.getLogger(__name__)

EVENTS_COLLECTION = "analysis_events"


def _sync_log(event: dict) -> None:
    db = firebase_module.db
    if not db:
        logger.debug("[MONITOR] Firebase not initialized; event kept in memory only.")
        return
    try:
        db.collection(EVENTS_COLLECTION).add(event)
    except Exception as e:
        logger.error(f"[MONITOR LOG ERROR] Failed to store analysis event: {e}")


class MonitoringService:
    def __init__(self, history_size: int = settings.monitoring_history_size):
        self.history: deque = deque(maxlen=history_size)
        self.total = 0
        self.cached = 0
        self.labels: Counter = Counter()
        self.kinds: Counter = Counter()
        self._confidence_sum = 0.0
        self._latency_sum = 0

    def record(self, kind: str, label: str, confidence: float, latency_ms: int, is_cached: bool = False) -> None:
        """
        Record one finished analysis.

        Args:
            kind: Content kind ("text", "image", ...).
            label: Final label, or verification status for verify runs.
            confidence: Final confidence in [0, 1].
            latency_ms: Wall time of the run.
            is_cached: True when served from the fingerprint cache.
        """
        event = {
            "timestamp": datetime.now(timezone.utc),
            "kind": kind,
            "label": label,
            "confidence": float(confidence),
            "latency_ms": int(latency_ms),
            "is_cached": is_cached,
        }

        self.history.append(event)
        self.total += 1
        self.cached += int(is_cached)
        self.labels[label] += 1
        self.kinds[kind] += 1
        self._confidence_sum += float(confidence)
        self._latency_sum += int(latency_ms)

        logger.info(f"[MONITOR] {kind} -> {label} ({confidence:.2f}) in {latency_ms}ms")

        try:
            loop = asyncio.get_running_loop()
            loop.create_task(asyncio.to_thread(_sync_log, event))
        except RuntimeError:
            # No running event loop: sync context (tests, CLI). Run inline.
            _sync_log(event)

    def stats(self) -> dict:
        return {
            "total_analyses": self.total,
            "cached_analyses": self.cached,
            "average_confidence": round(self._confidence_sum / self.total, 4) if self.total else 0.0,
            "average_latency_ms": round(self._latency_sum / self.total) if self.total else 0,
            "by_label": dict(self.labels),
            "by_kind": dict(self.kinds),
            "recent": [
                {**e, "timestamp": e["timestamp"].isoformat()} for e in list(self.history)[-10:]
            ],
        }

    def reset(self) -> None:
        self.__init__(history_size=self.history.maxlen)
