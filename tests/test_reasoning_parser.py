"""Pure unit tests for aicheck/integrations/gemini/parsing.py."""

from aicheck.integrations.gemini.parsing import (
    FreeTextReasoning,
    StructuredReasoning,
    parse_reasoning,
    reasoning_to_evidence,
)
from aicheck.schemas.analysis import Label


def test_bare_json_is_structured():
    outcome = parse_reasoning('{"isAI": true, "confidence": 0.85, "reasoning": "Repetitive cadence.", "indicators": ["cadence"]}')
    assert isinstance(outcome, StructuredReasoning)
    assert outcome.label == Label.AI
    assert outcome.confidence == 0.85
    assert outcome.indicators == ["cadence"]


def test_fenced_json_is_structured():
    raw = 'Here is my analysis:\n```json\n{"isAI": false, "confidence": 0.7, "reasoning": "Personal anecdotes."}\n```'
    outcome = parse_reasoning(raw)
    assert isinstance(outcome, StructuredReasoning)
    assert outcome.label == Label.HUMAN
    assert outcome.rationale == "Personal anecdotes."


def test_label_field_and_percent_confidence():
    outcome = parse_reasoning('{"label": "human", "confidence": 72}')
    assert outcome.label == Label.HUMAN
    assert outcome.confidence == 0.72


def test_json_without_label_falls_back_to_free_text():
    outcome = parse_reasoning('{"confidence": 0.9}')
    assert isinstance(outcome, FreeTextReasoning)
    assert outcome.label == Label.UNKNOWN


def test_free_text_ai_with_strong_wording():
    outcome = parse_reasoning("This is clearly AI-generated; the evidence is in the uniform structure.")
    assert isinstance(outcome, FreeTextReasoning)
    assert outcome.label == Label.AI
    assert outcome.confidence == 0.95  # 0.5 + 0.3 + 0.2, clamped


def test_free_text_hedged_human():
    outcome = parse_reasoning("It might be written by a human.")
    assert outcome.label == Label.HUMAN
    assert outcome.confidence == 0.3


def test_free_text_without_cues_is_unknown():
    outcome = parse_reasoning("I cannot tell.")
    assert outcome.label == Label.UNKNOWN
    assert outcome.confidence == 0.5


def test_free_text_negated_ai_marker_reads_as_human():
    outcome = parse_reasoning("This text is not AI-generated; it reads like natural human writing.")
    assert outcome.label == Label.HUMAN


def test_free_text_negated_human_marker_reads_as_ai():
    outcome = parse_reasoning("The passage is not likely human; the phrasing is uniform throughout.")
    assert outcome.label == Label.AI


def test_free_text_distant_negation_is_ignored():
    outcome = parse_reasoning("I am not sure, but this looks AI-generated.")
    assert outcome.label == Label.AI


def test_reasoning_to_evidence():
    item = reasoning_to_evidence(parse_reasoning('{"isAI": true, "confidence": 0.9, "reasoning": "Generic."}'))
    assert item.source_id == "reasoning"
    assert item.label == Label.AI
    assert item.rationale == "Generic."

    free = reasoning_to_evidence(parse_reasoning("Probably human-written."))
    assert free.label == Label.HUMAN
    assert free.rationale == "Probably human-written."
