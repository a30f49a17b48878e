import os
import asyncio
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables before anything reads them
load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from aicheck.api import analysis, system  # noqa: E402
from aicheck.config import settings  # noqa: E402
from aicheck.core.dependencies import get_orchestrator  # noqa: E402
from aicheck.integrations import firebase, http_client, redis_client  # noqa: E402

cleanup_task = None


async def periodic_cleanup():
    """Purge expired in-memory cache entries every `cache_cleanup_interval_sec`."""
    while True:
        try:
            await asyncio.sleep(settings.cache_cleanup_interval_sec)
            orchestrator = get_orchestrator()
            removed = 0
            for cache in (orchestrator.cache, orchestrator.verification_cache):
                if cache is not None:
                    removed += cache.cleanup()
            logger.debug(f"[CLEANUP] Periodic cache cleanup removed {removed} entries")
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"[CLEANUP] Error in periodic cleanup: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    global cleanup_task

    firebase.initialize()
    redis_client.initialize()
    await http_client.initialize()
    get_orchestrator()

    if os.getenv("TESTING") != "true":
        cleanup_task = asyncio.create_task(periodic_cleanup())
        logger.info("[STARTUP] Background cache cleanup task started")

    yield

    if cleanup_task:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        cleanup_task = None
        logger.info("[SHUTDOWN] Background cache cleanup task stopped")

    await http_client.close()


app = FastAPI(title="AI Content Check API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(analysis.router)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("aicheck.main:app", host="0.0.0.0", port=port, log_level="info")
