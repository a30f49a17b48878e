"""
Upstash Redis integration.

`client` stays None until `initialize()` runs inside the FastAPI lifespan.
The fingerprint cache reads `redis_client.client` at call time, so a missing
or failed client simply leaves caching in process memory.
"""

import os
import logging
from upstash_redis import Redis

logger = logging.getLogger(__name__)

client = None  # Redis | None


def initialize() -> None:
    """Bind an Upstash Redis client to `client` when credentials are present."""
    global client

    redis_url = os.getenv("UPSTASH_REDIS_HOST")
    redis_token = os.getenv("UPSTASH_REDIS_PASSWORD")

    if not (redis_url and redis_token):
        logger.warning("[STARTUP] Redis credentials not found. Result cache will stay in memory.")
        return

    try:
        client = Redis(url=redis_url, token=redis_token)
        logger.info("[STARTUP] Upstash Redis client initialized")
    except Exception as e:
        client = None
        logger.error(f"[STARTUP] Failed to initialize Upstash Redis client: {e}")
