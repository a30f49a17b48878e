"""
Shared pytest fixtures for all test modules.

IMPORTANT: TESTING must be set before the app is imported so the lifespan
skips the background cache cleanup task. Provider keys are removed so the
default orchestrator never points at a real service.
"""

import io
import os

os.environ["TESTING"] = "true"
for _key in ("GEMINI_API_KEY", "HUGGINGFACE_API_KEY", "GOOGLE_SEARCH_API_KEY", "GOOGLE_SEARCH_ENGINE_ID"):
    os.environ.pop(_key, None)

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tests.mocks.firebase_mock import MockFirestore
from tests.mocks.redis_mock import MockRedis
from tests.mocks.services_mock import FakeClassifier, FakeReasoning, FakeSearch

# App import happens AFTER os.environ["TESTING"] is set above.
from aicheck.main import app  # noqa: E402
from aicheck.config import Settings  # noqa: E402
from aicheck.core import dependencies  # noqa: E402
from aicheck.detection.cache import FingerprintCache  # noqa: E402
from aicheck.detection.heuristics import LocalHeuristicClassifier  # noqa: E402
from aicheck.detection.pipeline import PipelineOrchestrator  # noqa: E402
from aicheck.schemas.analysis import AnalysisResult  # noqa: E402
from aicheck.schemas.verification import SearchHit, VerificationReport  # noqa: E402
from aicheck.services.monitoring_service import MonitoringService  # noqa: E402


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_firebase(monkeypatch):
    """Replace firebase.db with an in-memory MockFirestore."""
    from aicheck.integrations import firebase as fb

    mock_db = MockFirestore()
    monkeypatch.setattr(fb, "db", mock_db)
    return mock_db


@pytest.fixture
def mock_redis(monkeypatch):
    """Replace redis_client.client with an in-memory MockRedis."""
    from aicheck.integrations import redis_client as rc

    mock_rc = MockRedis()
    monkeypatch.setattr(rc, "client", mock_rc)
    return mock_rc


@pytest.fixture
def no_redis(monkeypatch):
    """Force the memory cache path."""
    from aicheck.integrations import redis_client as rc

    monkeypatch.setattr(rc, "client", None)


# ---------------------------------------------------------------------------
# Orchestrator fixtures
# ---------------------------------------------------------------------------


def make_orchestrator(
    reasoning=None,
    classifier=None,
    search=None,
    heuristic=None,
    with_cache: bool = True,
    **overrides,
) -> PipelineOrchestrator:
    """Orchestrator with memory-only caches and a fresh monitor."""
    test_settings = Settings(**overrides)
    return PipelineOrchestrator(
        settings=test_settings,
        cache=FingerprintCache("classify", 300, AnalysisResult, use_redis=False) if with_cache else None,
        verification_cache=FingerprintCache("verify", 86400, VerificationReport, use_redis=False) if with_cache else None,
        reasoning=reasoning,
        classifier=classifier,
        search=search,
        heuristic=heuristic,
        monitor=MonitoringService(),
    )


@pytest.fixture
def fake_reasoning():
    return FakeReasoning(AI_REASONING_REPLY)


@pytest.fixture
def fake_classifier():
    return FakeClassifier(ai_score=0.8)


@pytest.fixture
def fake_search():
    return FakeSearch(SAMPLE_HITS)


@pytest.fixture
def orchestrator(fake_reasoning, fake_classifier, fake_search):
    return make_orchestrator(
        reasoning=fake_reasoning,
        classifier=fake_classifier,
        search=fake_search,
        heuristic=LocalHeuristicClassifier(),
    )


@pytest.fixture
def client(mock_firebase, mock_redis, orchestrator):
    """
    FastAPI TestClient with mocked Firebase, Redis and collaborators.

    initialize() calls are patched to no-ops so they can't overwrite our mocks
    or attempt real network connections during the lifespan startup.
    """
    dependencies.set_orchestrator(orchestrator)
    with (
        patch("aicheck.integrations.firebase.initialize"),
        patch("aicheck.integrations.redis_client.initialize"),
    ):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    dependencies.set_orchestrator(None)


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg() -> bytes:
    """Create a minimal 10×10 JPEG in memory: fast and valid."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()


SAMPLE_TEXT = (
    "The city council approved a new budget for public libraries on Tuesday. "
    "Residents attended the meeting to discuss longer opening hours and new reading programs. "
    "Several librarians described how funding cuts had reduced services over the past decade."
)

AI_REASONING_REPLY = (
    '{"isAI": true, "confidence": 0.9, '
    '"reasoning": "Uniform sentence rhythm and generic transitions.", '
    '"indicators": ["uniform rhythm", "generic transitions"]}'
)

HUMAN_REASONING_REPLY = (
    '{"isAI": false, "confidence": 0.8, '
    '"reasoning": "Specific local detail and irregular phrasing.", '
    '"indicators": ["local detail"]}'
)

SAMPLE_HITS = [
    SearchHit(
        title="Council approves library budget",
        snippet="The city council approved a new budget for public libraries on Tuesday.",
        link="https://www.bbc.com/news/library-budget",
        display_link="www.bbc.com",
    ),
    SearchHit(
        title="Library hours debate",
        snippet="Residents discussed longer opening hours at the council meeting.",
        link="https://localblog.example.com/library",
        display_link="localblog.example.com",
    ),
]
