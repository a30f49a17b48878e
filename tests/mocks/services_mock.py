"""
In-memory stand-ins for the reasoning, classifier and search services.

Each fake counts its calls and can be told to sleep (to trip stage timeouts)
or to raise, so pipeline tests never touch the network.
"""

import asyncio

from aicheck.integrations.huggingface import AI_CANDIDATE, HUMAN_CANDIDATE, ZeroShotResult
from aicheck.schemas.verification import SearchResponse


class _Fake:
    def __init__(self, delay: float = 0.0, error: Exception = None):
        self.delay = delay
        self.error = error
        self.calls = 0

    async def _before(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error


class FakeReasoning(_Fake):
    name = "fake_reasoning"

    def __init__(self, reply: str = "", **kwargs):
        super().__init__(**kwargs)
        self.reply = reply
        self.prompts: list[str] = []
        self.media = []

    async def reason(self, prompt, media=None):
        self.prompts.append(prompt)
        self.media.append(media)
        await self._before()
        return self.reply


class FakeClassifier(_Fake):
    name = "fake_classifier"

    def __init__(self, ai_score: float = 0.5, **kwargs):
        super().__init__(**kwargs)
        self.ai_score = ai_score

    async def classify(self, text, labels=None):
        await self._before()
        ranked = sorted(
            [(AI_CANDIDATE, self.ai_score), (HUMAN_CANDIDATE, 1 - self.ai_score)],
            key=lambda pair: pair[1],
            reverse=True,
        )
        return ZeroShotResult(labels=[l for l, _ in ranked], scores=[s for _, s in ranked])


class FakeSearch(_Fake):
    name = "fake_search"

    def __init__(self, hits=None, **kwargs):
        super().__init__(**kwargs)
        self.hits = list(hits or [])
        self.queries: list[str] = []

    async def search(self, query, count=5):
        self.queries.append(query)
        await self._before()
        return SearchResponse(items=self.hits[:count], total_results_estimate=len(self.hits))
