"""
Shared aiohttp ClientSession, opened once during the FastAPI lifespan.

The zero-shot classifier and the web search service both go through
`request_session()`, so a single connection pool serves every outbound call
made by a pipeline run.

Usage:
    async with http_client.request_session() as sess:
        async with sess.get(url, params=params) as response:
            ...

Outside the lifespan (tests, scripts) a temporary session is created and
closed around the block.
"""

import logging
from contextlib import asynccontextmanager

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 30

session: aiohttp.ClientSession | None = None


def _new_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT_SEC))


async def initialize() -> None:
    global session
    session = _new_session()
    logger.info("[STARTUP] Shared HTTP session initialized")


async def close() -> None:
    global session
    if session and not session.closed:
        await session.close()
        logger.info("[SHUTDOWN] Shared HTTP session closed")
    session = None


@asynccontextmanager
async def request_session():
    """
    Yield the shared session if it is open, otherwise a temporary one.

    The shared session is never closed here; `close()` owns it.
    """
    if session and not session.closed:
        yield session
        return

    tmp = _new_session()
    try:
        yield tmp
    finally:
        await tmp.close()
