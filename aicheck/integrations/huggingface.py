"""
Hugging Face zero-shot classifier.

Calls the hosted inference endpoint for an NLI model with two candidate
labels and turns the ranked reply into one piece of evidence for the
`pattern_classification` stage.
"""

import logging
from typing import List, Sequence

from pydantic import BaseModel

from aicheck.config import settings
from aicheck.core.errors import ProviderError, ProviderUnavailableError
from aicheck.integrations import http_client
from aicheck.schemas.analysis import EvidenceItem, Label

logger = logging.getLogger(__name__)

PROVIDER = "huggingface"
SOURCE_ID = "pattern_classification"

AI_CANDIDATE = "AI-generated text"
HUMAN_CANDIDATE = "human-written text"
CANDIDATE_LABELS = (AI_CANDIDATE, HUMAN_CANDIDATE)

UNAVAILABLE_STATUS_CODES = (401, 403, 429, 503)


class ZeroShotResult(BaseModel):
    labels: List[str]
    scores: List[float]

    def top(self) -> tuple[str, float]:
        if not self.labels:
            raise ValueError("empty zero-shot result")
        best = max(range(len(self.scores)), key=self.scores.__getitem__)
        return self.labels[best], self.scores[best]


class HuggingFaceClassifier:
    name = PROVIDER

    def __init__(self, api_key: str, model: str = settings.hf_zero_shot_model, base_url: str = settings.hf_base_url):
        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/{model}"

    async def classify(self, text: str, labels: Sequence[str] = CANDIDATE_LABELS) -> ZeroShotResult:
        payload = {
            "inputs": text[:settings.hf_input_chars],
            "parameters": {"candidate_labels": list(labels)},
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with http_client.request_session() as sess:
            async with sess.post(self.url, json=payload, headers=headers) as response:
                if response.status in UNAVAILABLE_STATUS_CODES:
                    body = await response.text()
                    raise ProviderUnavailableError(PROVIDER, body[:200], status=response.status)
                if response.status != 200:
                    body = await response.text()
                    raise ProviderError(PROVIDER, body[:200], status=response.status)
                data = await response.json()

        # The endpoint answers with either one object or a one-element list.
        if isinstance(data, list):
            if not data:
                raise ProviderError(PROVIDER, "Empty response")
            data = data[0]
        if not isinstance(data, dict) or "labels" not in data or "scores" not in data:
            raise ProviderError(PROVIDER, f"Unexpected response shape: {str(data)[:200]}")

        return ZeroShotResult(labels=data["labels"], scores=data["scores"])


def classification_to_evidence(result: ZeroShotResult) -> EvidenceItem:
    top_label, top_score = result.top()
    if top_label == AI_CANDIDATE:
        label = Label.AI
    elif top_label == HUMAN_CANDIDATE:
        label = Label.HUMAN
    else:
        label = Label.UNKNOWN

    return EvidenceItem(
        source_id=SOURCE_ID,
        label=label,
        confidence=round(max(0.0, min(1.0, top_score)), 4),
        rationale=f"Zero-shot classifier ranked '{top_label}' first ({top_score:.0%}).",
        indicators=[f"{name}: {score:.2f}" for name, score in zip(result.labels, result.scores)],
    )
