"""
Wiring for the default `PipelineOrchestrator`.

Collaborators are built from `settings` and the API keys in the environment.
A provider whose key is missing is left as None, and the orchestrator treats
it as "not configured".

`get_orchestrator` is the FastAPI dependency; tests override it through
`app.dependency_overrides` or `set_orchestrator`.
"""

import os
import logging
from typing import Optional

from aicheck.config import settings
from aicheck.detection.cache import FingerprintCache
from aicheck.detection.heuristics import LocalHeuristicClassifier
from aicheck.detection.pipeline import PipelineOrchestrator
from aicheck.integrations.gemini.client import GeminiReasoningService
from aicheck.integrations.huggingface import HuggingFaceClassifier
from aicheck.integrations.search import GoogleSearchService
from aicheck.schemas.analysis import AnalysisResult
from aicheck.schemas.verification import VerificationReport
from aicheck.services.monitoring_service import MonitoringService
from aicheck.services.persistence_service import PersistenceService

logger = logging.getLogger(__name__)

_orchestrator: Optional[PipelineOrchestrator] = None


def build_orchestrator() -> PipelineOrchestrator:
    gemini_key = os.getenv("GEMINI_API_KEY")
    hf_key = os.getenv("HUGGINGFACE_API_KEY")
    search_key = os.getenv("GOOGLE_SEARCH_API_KEY")
    search_engine = os.getenv("GOOGLE_SEARCH_ENGINE_ID")

    reasoning = GeminiReasoningService(api_key=gemini_key) if gemini_key else None
    classifier = HuggingFaceClassifier(api_key=hf_key) if hf_key else None
    search = GoogleSearchService(api_key=search_key, engine_id=search_engine) if search_key and search_engine else None

    for name, service in (("reasoning", reasoning), ("classifier", classifier), ("search", search)):
        if service is None:
            logger.warning(f"[STARTUP] {name} service not configured; its stage will be skipped or degraded.")

    return PipelineOrchestrator(
        settings=settings,
        cache=FingerprintCache("classify", settings.classification_cache_ttl_sec, AnalysisResult),
        verification_cache=FingerprintCache("verify", settings.verification_cache_ttl_sec, VerificationReport),
        reasoning=reasoning,
        classifier=classifier,
        search=search,
        heuristic=LocalHeuristicClassifier(),
        monitor=MonitoringService(),
        persistence=PersistenceService(),
    )


def get_orchestrator() -> PipelineOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator()
    return _orchestrator


def set_orchestrator(orchestrator: Optional[PipelineOrchestrator]) -> None:
    global _orchestrator
    _orchestrator = orchestrator
