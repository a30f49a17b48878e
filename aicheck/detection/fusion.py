"""
Evidence fusion: turns per-source opinions into one decision.

`fuse` is pure: same evidence list in the same order always yields the same
outcome. It never raises; an empty list is a valid, low-confidence input.

Scoring:
  * Labelled items add `confidence * weight` to the AI or Human bucket.
    `Unknown` items add nothing but still count toward the confidence average.
  * The web-verification source carries a raw similarity in `signal` and is
    scored with a three-way split instead of its label.
  * `final_ratio = ai / (ai + human)`; AI only above `ai_threshold`.
"""

import logging
from typing import NamedTuple, Optional, Sequence

from pydantic import BaseModel

from aicheck.config import settings
from aicheck.schemas.analysis import EvidenceItem, Label

logger = logging.getLogger(__name__)

WEB_SOURCE_ID = "web_verification"
EXPLANATION_SEPARATOR = " | "


class FusionPolicy(BaseModel):
    ai_threshold: float = settings.ai_label_threshold
    suspicious_confidence: float = settings.suspicious_confidence
    max_confidence: float = settings.max_confidence
    no_evidence_confidence: float = settings.no_evidence_confidence
    web_source_id: str = WEB_SOURCE_ID
    web_high_similarity: float = settings.web_high_similarity
    web_low_similarity: float = settings.web_low_similarity


class FusionOutcome(NamedTuple):
    label: Label
    confidence: float
    ai_probability_pct: int
    human_probability_pct: int
    explanation: str
    final_ratio: float


def web_similarity_split(similarity: float, policy: FusionPolicy) -> tuple[float, float]:
    """(ai_share, human_share) for a web-similarity signal."""
    if similarity > policy.web_high_similarity:
        return 0.2, 0.8
    if similarity < policy.web_low_similarity:
        return 0.8, 0.2
    return 0.5, 0.5


def _score_item(item: EvidenceItem, policy: FusionPolicy) -> tuple[float, float]:
    if item.source_id == policy.web_source_id and item.signal is not None:
        ai_share, human_share = web_similarity_split(item.signal, policy)
        return ai_share * item.weight, human_share * item.weight

    if item.label == Label.AI:
        return item.confidence * item.weight, 0.0
    if item.label == Label.HUMAN:
        return 0.0, item.confidence * item.weight
    return 0.0, 0.0


def _degraded_note(failed_stages: Sequence[str]) -> Optional[str]:
    if not failed_stages:
        return None
    names = ", ".join(failed_stages)
    return f"Reduced evidence: {len(failed_stages)} stage(s) failed ({names})."


def fuse(
    evidence: Sequence[EvidenceItem],
    *,
    failed_stages: Sequence[str] = (),
    policy: FusionPolicy = None,
) -> FusionOutcome:
    if policy is None:
        policy = FusionPolicy()

    note = _degraded_note(failed_stages)

    if not evidence:
        explanation = "No evidence was available: every analysis stage failed or was skipped, so the result defaults to human-authored with low confidence."
        if note:
            explanation = f"{explanation} {note}"
        logger.info("[FUSION] No evidence; returning low-confidence Human")
        return FusionOutcome(
            label=Label.HUMAN,
            confidence=policy.no_evidence_confidence,
            ai_probability_pct=50,
            human_probability_pct=50,
            explanation=explanation,
            final_ratio=0.5,
        )

    ai_score = 0.0
    human_score = 0.0
    total_confidence = 0.0

    for item in evidence:
        ai_part, human_part = _score_item(item, policy)
        ai_score += ai_part
        human_score += human_part
        total_confidence += item.confidence

    total_score = ai_score + human_score
    final_ratio = ai_score / total_score if total_score > 0 else 0.5
    confidence = min(total_confidence / len(evidence), policy.max_confidence)

    if final_ratio > policy.ai_threshold:
        label = Label.SUSPICIOUS if confidence < policy.suspicious_confidence else Label.AI
    else:
        label = Label.HUMAN

    ai_pct = int(round(final_ratio * 100))
    ai_pct = max(0, min(100, ai_pct))

    rationales = [item.rationale.strip() for item in evidence if item.rationale.strip()]
    if not rationales:
        rationales = [f"{len(evidence)} source(s) reported without rationale."]
    explanation = EXPLANATION_SEPARATOR.join(rationales)
    if note:
        explanation = f"{explanation}{EXPLANATION_SEPARATOR}{note}"

    logger.info(
        f"[FUSION] ai={ai_score:.3f} human={human_score:.3f} ratio={final_ratio:.3f} "
        f"label={label.value} confidence={confidence:.3f} sources={len(evidence)}"
    )

    return FusionOutcome(
        label=label,
        confidence=round(confidence, 4),
        ai_probability_pct=ai_pct,
        human_probability_pct=100 - ai_pct,
        explanation=explanation,
        final_ratio=final_ratio,
    )
