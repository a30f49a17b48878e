"""
Local rule-based text classifier.

Runs without any network dependency. The pipeline only reaches for it when the
pattern-classification service is not configured or reports itself
unavailable, so its confidence is clamped well below what a successful
external call can report.
"""

import re
import logging
from collections import Counter

from aicheck.schemas.analysis import EvidenceItem, Label

logger = logging.getLogger(__name__)

SOURCE_ID = "local_heuristic"

FORMAL_CONNECTIVES = (
    "consequently",
    "therefore",
    "furthermore",
    "moreover",
    "in addition",
    "likewise",
    "nevertheless",
    "accordingly",
)

AI_STOCK_PHRASES = (
    "it is important to note",
    "it is worth noting",
    "it is essential",
    "in today's fast-paced world",
    "firstly",
    "secondly",
    "on the one hand",
    "on the other hand",
    "in conclusion",
    "to summarize",
    "overall,",
    "plays a crucial role",
    "delve into",
    "a testament to",
)

COLLOQUIAL_MARKERS = (
    "well,",
    "like,",
    "kinda",
    "gonna",
    "wanna",
    "i mean",
    "you know",
    "honestly",
    "i think",
    "i guess",
    "i feel like",
    "lol",
)

CONTRACTION_RE = re.compile(r"\b\w+'(?:t|s|re|ve|ll|d|m)\b", re.IGNORECASE)
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

CONFIDENCE_FLOOR = 0.3
CONFIDENCE_CEILING = 0.8
LONG_TEXT_CHARS = 1000


def repetition_ratio(text: str) -> float:
    """Distinct words seen more than twice, over total words."""
    words = text.lower().split()
    if not words:
        return 0.0
    counts = Counter(words)
    repeated = sum(1 for c in counts.values() if c > 2)
    return min(repeated / len(words), 1.0)


def formality_ratio(text: str) -> float:
    lower = text.lower()
    found = sum(1 for phrase in FORMAL_CONNECTIVES if phrase in lower)
    return found / len(FORMAL_CONNECTIVES)


def ai_phrase_hits(text: str) -> list[str]:
    lower = text.lower()
    return [phrase for phrase in AI_STOCK_PHRASES if phrase in lower]


def human_indicators(text: str) -> list[str]:
    lower = text.lower()
    indicators = []

    colloquial = [m for m in COLLOQUIAL_MARKERS if m in lower]
    if len(colloquial) >= 2:
        indicators.append("Colloquial expressions")

    if CONTRACTION_RE.search(text):
        indicators.append("Contractions and abbreviations")

    if text.count("?") >= 2:
        indicators.append("Rhetorical questions")

    if text.count("!") >= 1:
        indicators.append("Exclamations")

    return indicators


def average_sentence_length(text: str) -> float:
    sentences = [s for s in SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if not sentences:
        return 0.0
    return sum(len(s) for s in sentences) / len(sentences)


class LocalHeuristicClassifier:
    source_id = SOURCE_ID

    def classify(self, text: str) -> EvidenceItem:
        repetition = repetition_ratio(text)
        formality = formality_ratio(text)
        phrases = ai_phrase_hits(text)
        human = human_indicators(text)

        is_ai = False
        confidence = 0.5
        indicators: list[str] = []

        if len(phrases) >= 3:
            is_ai = True
            confidence += 0.15
            indicators.append(f"Stock AI transition phrases ({len(phrases)})")

        if repetition > 0.6:
            is_ai = True
            confidence += 0.2
            indicators.append("Repetitive wording")

        if formality > 0.8:
            is_ai = True
            confidence += 0.1
            indicators.append("Excessive formality")

        if len(text) > LONG_TEXT_CHARS and formality > 0.6:
            is_ai = True
            confidence += 0.1
            indicators.append("Long text with high formality")

        if average_sentence_length(text) > 80 and formality > 0.5:
            confidence += 0.1
            indicators.append("Long, formal sentences")

        if not is_ai and human:
            confidence += 0.1 * len(human)
            indicators.extend(human)

        confidence = max(CONFIDENCE_FLOOR, min(CONFIDENCE_CEILING, confidence))
        label = Label.AI if is_ai else Label.HUMAN

        rationale = (
            f"Local pattern analysis: {'multiple AI-writing indicators' if is_ai else 'patterns typical of human writing'} "
            f"(repetition {repetition:.0%}, formality {formality:.0%})."
        )
        logger.info(f"[HEURISTIC] label={label.value} confidence={confidence:.2f} indicators={indicators}")

        return EvidenceItem(
            source_id=SOURCE_ID,
            label=label,
            confidence=round(confidence, 4),
            rationale=rationale,
            indicators=indicators or ["Natural patterns detected"],
        )
