"""Unit tests for aicheck/services/persistence_service.py."""

from aicheck.schemas.analysis import AnalysisResult, Label, PipelineStage
from aicheck.services.persistence_service import ANALYSES_COLLECTION, PersistenceService


def _result() -> AnalysisResult:
    return AnalysisResult(
        label=Label.AI,
        confidence=0.9,
        ai_probability_pct=90,
        human_probability_pct=10,
        explanation="Generic transitions.",
        stages=[PipelineStage(index=0, name="reasoning")],
        fingerprint="deadbeef",
    )


def test_save_writes_document_without_stages(mock_firebase):
    PersistenceService().save(_result())

    docs = mock_firebase.collection(ANALYSES_COLLECTION).all()
    assert len(docs) == 1
    assert docs[0]["label"] == "AI"
    assert docs[0]["type"] == "classification"
    assert "stages" not in docs[0]


def test_document_id_carries_fingerprint_and_type(mock_firebase):
    PersistenceService().save(_result(), "verification")

    doc_ids = list(mock_firebase.collection(ANALYSES_COLLECTION)._docs)
    assert doc_ids[0].startswith("deadbeef_verification_")


def test_save_without_firebase_is_a_noop(monkeypatch):
    from aicheck.integrations import firebase

    monkeypatch.setattr(firebase, "db", None)
    PersistenceService().save(_result())
