"""
Fingerprint result cache: Redis (preferred) → Local Memory (fallback).

One `FingerprintCache` per namespace ("classify", "verify"), each with its own
TTL. Instances are created by the dependency layer and handed to the
orchestrator, so tests can build isolated caches with a fake clock.

The Redis client is accessed at call-time via the integration module so that
it picks up the instance initialized during the FastAPI lifespan.

Memory entries expire lazily: an expired entry is dropped when it is read or
when `cleanup()` runs. There is no timer thread.
"""

import json
import time
import logging
from collections import OrderedDict
from typing import Any, Callable, Optional, Type

from pydantic import BaseModel

from aicheck.config import settings
from aicheck.integrations import redis_client as redis_module

logger = logging.getLogger(__name__)


class CacheEntry(BaseModel):
    key: str
    payload: Any
    created_at: float


class FingerprintCache:
    def __init__(
        self,
        namespace: str,
        ttl_sec: float,
        payload_model: Type[BaseModel],
        max_size: int = settings.local_cache_max_size,
        clock: Callable[[], float] = time.time,
        use_redis: bool = True,
    ):
        self.namespace = namespace
        self.ttl_sec = ttl_sec
        self.payload_model = payload_model
        self.max_size = max_size
        self._clock = clock
        self._use_redis = use_redis
        self._local: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def _redis(self):
        return redis_module.client if self._use_redis else None

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at > self.ttl_sec

    def get(self, key: str) -> Optional[CacheEntry]:
        rc = self._redis()
        if rc:
            try:
                data = rc.get(f"{self.namespace}:{key}")
                if data:
                    raw = json.loads(data)
                    entry = CacheEntry(
                        key=key,
                        payload=self.payload_model.model_validate(raw["payload"]),
                        created_at=raw["created_at"],
                    )
                    if not self._is_expired(entry):
                        logger.info(f"[CACHE] Redis HIT {self.namespace}:{key}")
                        self.hits += 1
                        return entry
                logger.info(f"[CACHE] Redis MISS {self.namespace}:{key}")
                self.misses += 1
                return None
            except Exception as e:
                logger.warning(f"Redis get failed: {e}")
                self.misses += 1
                return None

        entry = self._local.get(key)
        if entry is None:
            logger.info(f"[CACHE] Local Memory MISS {self.namespace}:{key}")
            self.misses += 1
            return None

        if self._is_expired(entry):
            logger.info(f"[CACHE] Local Memory EXPIRED {self.namespace}:{key}")
            del self._local[key]
            self.misses += 1
            return None

        logger.info(f"[CACHE] Local Memory HIT {self.namespace}:{key}")
        self._local.move_to_end(key)
        self.hits += 1
        return entry

    def set(self, key: str, payload: BaseModel) -> None:
        entry = CacheEntry(key=key, payload=payload, created_at=self._clock())
        rc = self._redis()
        if rc:
            try:
                body = json.dumps({
                    "payload": payload.model_dump(mode="json"),
                    "created_at": entry.created_at,
                })
                rc.set(f"{self.namespace}:{key}", body, ex=int(self.ttl_sec))
                return
            except Exception as e:
                logger.warning(f"Redis set failed: {e}. Falling back to memory.")

        if key in self._local:
            self._local.move_to_end(key)
        self._local[key] = entry
        if len(self._local) > self.max_size:
            self._local.popitem(last=False)

    def cleanup(self) -> int:
        """Drop every expired memory entry. Returns how many were removed."""
        expired = [k for k, e in self._local.items() if self._is_expired(e)]
        for k in expired:
            del self._local[k]
        if expired:
            logger.info(f"[CACHE] {self.namespace} cleanup removed {len(expired)} entries")
        return len(expired)

    def clear(self) -> None:
        self._local.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        lookups = self.hits + self.misses
        return {
            "namespace": self.namespace,
            "entries": len(self._local),
            "ttl_sec": self.ttl_sec,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / lookups, 3) if lookups else 0.0,
        }
