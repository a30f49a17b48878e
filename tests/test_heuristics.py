"""Pure unit tests for aicheck/detection/heuristics.py."""

from aicheck.detection.heuristics import (
    LocalHeuristicClassifier,
    ai_phrase_hits,
    formality_ratio,
    human_indicators,
    repetition_ratio,
)
from aicheck.schemas.analysis import Label

STOCK_AI_TEXT = (
    "It is important to note that technology plays a crucial role in modern education. "
    "Firstly, students gain access to information. Secondly, teachers can personalise lessons. "
    "In conclusion, the benefits are significant and far-reaching."
)

CASUAL_TEXT = (
    "Honestly, I think the concert was kinda great! We didn't expect the band to play "
    "that long. Did you see the drummer? Wasn't he amazing?"
)


def test_ai_phrase_hits_finds_stock_phrases():
    hits = ai_phrase_hits(STOCK_AI_TEXT)
    assert "it is important to note" in hits
    assert "in conclusion" in hits
    assert len(hits) >= 3


def test_formality_ratio_counts_connectives():
    assert formality_ratio("plain words only") == 0.0
    text = "Therefore it works. Moreover it scales. Furthermore it is cheap. Consequently we ship."
    assert formality_ratio(text) == 4 / 8


def test_repetition_ratio_bounds():
    assert repetition_ratio("") == 0.0
    assert 0.0 <= repetition_ratio("the the the the cat") <= 1.0


def test_human_indicators_detects_casual_markers():
    indicators = human_indicators(CASUAL_TEXT)
    assert "Colloquial expressions" in indicators
    assert "Contractions and abbreviations" in indicators
    assert "Rhetorical questions" in indicators
    assert "Exclamations" in indicators


def test_stock_phrases_classify_as_ai():
    item = LocalHeuristicClassifier().classify(STOCK_AI_TEXT)
    assert item.label == Label.AI
    assert item.source_id == "local_heuristic"
    assert 0.3 <= item.confidence <= 0.8


def test_casual_text_classifies_as_human():
    item = LocalHeuristicClassifier().classify(CASUAL_TEXT)
    assert item.label == Label.HUMAN
    assert item.confidence == 0.8  # 0.5 + 4 * 0.1, clamped to the ceiling


def test_confidence_never_leaves_bounds():
    text = " ".join(["moreover therefore furthermore consequently in addition likewise nevertheless accordingly"] * 50)
    item = LocalHeuristicClassifier().classify(text + " it is important to note, firstly, secondly, in conclusion.")
    assert item.label == Label.AI
    assert item.confidence == 0.8
