"""
Google Custom Search client.

Used by the `web_verification` classification stage and by every search
step of content verification.
"""

import logging

from aicheck.config import settings
from aicheck.core.errors import ProviderError, ProviderUnavailableError
from aicheck.integrations import http_client
from aicheck.schemas.verification import SearchHit, SearchResponse

logger = logging.getLogger(__name__)

PROVIDER = "google_search"
UNAVAILABLE_STATUS_CODES = (401, 403, 429, 503)
MAX_RESULTS_PER_CALL = 10


class GoogleSearchService:
    name = PROVIDER

    def __init__(self, api_key: str, engine_id: str, base_url: str = settings.search_base_url):
        self.api_key = api_key
        self.engine_id = engine_id
        self.base_url = base_url

    async def search(self, query: str, count: int = settings.search_results_per_query) -> SearchResponse:
        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": str(max(1, min(count, MAX_RESULTS_PER_CALL))),
        }

        async with http_client.request_session() as sess:
            async with sess.get(self.base_url, params=params) as response:
                if response.status in UNAVAILABLE_STATUS_CODES:
                    body = await response.text()
                    raise ProviderUnavailableError(PROVIDER, body[:200], status=response.status)
                if response.status != 200:
                    body = await response.text()
                    raise ProviderError(PROVIDER, body[:200], status=response.status)
                data = await response.json()

        items = [
            SearchHit(
                title=item.get("title", ""),
                snippet=item.get("snippet", ""),
                link=item.get("link", ""),
                display_link=item.get("displayLink", ""),
            )
            for item in data.get("items", [])
        ]

        try:
            total = int(data.get("searchInformation", {}).get("totalResults", len(items)))
        except (TypeError, ValueError):
            total = len(items)

        logger.info(f"[SEARCH] query='{query[:60]}' hits={len(items)}")
        return SearchResponse(items=items, total_results_estimate=total)
