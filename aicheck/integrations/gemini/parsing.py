"""
Parsing of reasoning-service replies.

The model is asked for JSON but does not always comply. `parse_reasoning`
returns a tagged union: `StructuredReasoning` when a usable JSON object was
found (bare or inside a ```json fence), otherwise `FreeTextReasoning` built
from keyword cues in the prose.
"""

import re
import json
import logging
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from aicheck.schemas.analysis import EvidenceItem, Label

logger = logging.getLogger(__name__)

SOURCE_ID = "reasoning"

FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)
OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

AI_MARKERS = (
    "ai-generated",
    "ai generated",
    "generated by ai",
    "generated by artificial intelligence",
    "machine-generated",
    "likely ai",
    "synthetic",
    "language model",
)
HUMAN_MARKERS = (
    "human-written",
    "written by a human",
    "human author",
    "likely human",
    "human-authored",
    "natural human",
)
STRONG_MARKERS = ("clearly", "definitely")
EVIDENCE_MARKERS = ("evidence", "patterns")
HEDGE_MARKERS = ("possibly", "might", "could")
# A negation up to two words before a marker, e.g. "not ai-generated", "not likely ai".
NEGATION_RE = re.compile(r"\b(?:not|no|never|isn't|wasn't)\s+(?:[\w-]+\s+){0,2}$")


class StructuredReasoning(BaseModel):
    kind: Literal["structured"] = "structured"
    label: Label
    confidence: float = Field(ge=0.0, le=1.0)
    rationale: str = ""
    indicators: List[str] = Field(default_factory=list)


class FreeTextReasoning(BaseModel):
    kind: Literal["free_text"] = "free_text"
    label: Label
    confidence: float = Field(ge=0.0, le=1.0)
    text: str


ReasoningOutcome = Annotated[
    Union[StructuredReasoning, FreeTextReasoning], Field(discriminator="kind")
]


def _extract_json(raw: str) -> Optional[dict]:
    candidates = [raw.strip()]
    fence = FENCE_RE.search(raw)
    if fence:
        candidates.insert(0, fence.group(1))
    obj = OBJECT_RE.search(raw)
    if obj:
        candidates.append(obj.group(0))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _label_from_json(data: dict) -> Optional[Label]:
    if isinstance(data.get("isAI"), bool):
        return Label.AI if data["isAI"] else Label.HUMAN

    value = str(data.get("label", "")).strip().lower()
    if value in ("ai", "ai-generated", "artificial"):
        return Label.AI
    if value in ("human", "human-written"):
        return Label.HUMAN
    if value == "unknown":
        return Label.UNKNOWN
    return None


def _as_confidence(value) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.5
    # Some replies use a 0-100 scale.
    if confidence > 1.0:
        confidence /= 100.0
    return max(0.0, min(1.0, confidence))


def _structured(data: dict) -> Optional[StructuredReasoning]:
    label = _label_from_json(data)
    if label is None:
        return None

    rationale = data.get("reasoning") or data.get("rationale") or data.get("explanation") or ""
    indicators = data.get("indicators") or []
    if not isinstance(indicators, list):
        indicators = [str(indicators)]

    return StructuredReasoning(
        label=label,
        confidence=_as_confidence(data.get("confidence")),
        rationale=str(rationale),
        indicators=[str(i) for i in indicators],
    )


def _marker_hits(lower: str, markers) -> tuple[int, int]:
    """Count (plain, negated) occurrences of the markers."""
    plain = negated = 0
    for marker in markers:
        for match in re.finditer(re.escape(marker), lower):
            if NEGATION_RE.search(lower[max(0, match.start() - 40):match.start()]):
                negated += 1
            else:
                plain += 1
    return plain, negated


def _free_text(raw: str) -> FreeTextReasoning:
    lower = raw.lower()
    ai_plain, ai_negated = _marker_hits(lower, AI_MARKERS)
    human_plain, human_negated = _marker_hits(lower, HUMAN_MARKERS)
    # "not AI-generated" speaks for the human label and vice versa.
    ai_hits = ai_plain + human_negated
    human_hits = human_plain + ai_negated

    if ai_hits > human_hits:
        label = Label.AI
    elif human_hits > ai_hits:
        label = Label.HUMAN
    else:
        label = Label.UNKNOWN

    confidence = 0.5
    if any(m in lower for m in STRONG_MARKERS):
        confidence += 0.3
    if any(m in lower for m in EVIDENCE_MARKERS):
        confidence += 0.2
    if any(re.search(rf"\b{m}\b", lower) for m in HEDGE_MARKERS):
        confidence -= 0.2
    confidence = max(0.2, min(0.95, confidence))

    return FreeTextReasoning(label=label, confidence=round(confidence, 4), text=raw.strip())


def parse_reasoning(raw: str) -> Union[StructuredReasoning, FreeTextReasoning]:
    data = _extract_json(raw)
    if data is not None:
        structured = _structured(data)
        if structured is not None:
            return structured
        logger.warning("[REASONING] JSON reply without a usable label, falling back to free text")
    return _free_text(raw)


def reasoning_to_evidence(outcome: Union[StructuredReasoning, FreeTextReasoning]) -> EvidenceItem:
    if isinstance(outcome, StructuredReasoning):
        rationale = outcome.rationale or f"Reasoning service labelled the content {outcome.label.value}."
        indicators = outcome.indicators
    else:
        rationale = outcome.text[:500]
        indicators = ["Unstructured reasoning reply"]

    return EvidenceItem(
        source_id=SOURCE_ID,
        label=outcome.label,
        confidence=outcome.confidence,
        rationale=rationale,
        indicators=indicators,
    )
