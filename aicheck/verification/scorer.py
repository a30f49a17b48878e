"""
Verification scorer.

Combines the four factor scores into one 0-100 figure. Factor scores are
oriented so that higher always means "more trustworthy"; `build_factors`
does the flipping for similarity and plagiarism so that `score_factors`
only ever sees a weighted average.
"""

import logging
from typing import Optional, Sequence

from aicheck.schemas.verification import (
    FactorName,
    RiskTier,
    VerificationFactor,
    VerificationReport,
    VerificationStatus,
)

logger = logging.getLogger(__name__)

FACTOR_WEIGHTS = {
    FactorName.SIMILARITY: 0.30,
    FactorName.SOURCE_CREDIBILITY: 0.25,
    FactorName.PLAGIARISM: 0.25,
    FactorName.FACT_CHECK: 0.20,
}

NEUTRAL_SCORE = 50.0
VERIFIED_THRESHOLD = 80
PARTIAL_THRESHOLD = 60

RISK_MESSAGES = {
    FactorName.SIMILARITY: "High similarity with existing content",
    FactorName.SOURCE_CREDIBILITY: "Low-credibility sources",
    FactorName.PLAGIARISM: "Possible plagiarism detected",
    FactorName.FACT_CHECK: "Unverified facts",
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _factor(name: FactorName, score: Optional[float], raw: Optional[float]) -> VerificationFactor:
    if score is None:
        return VerificationFactor(name=name, score=NEUTRAL_SCORE, weight=0.0, raw=None)
    return VerificationFactor(name=name, score=_clamp(score), weight=FACTOR_WEIGHTS[name], raw=raw)


def build_factors(
    avg_similarity: Optional[float],
    credibility_score: Optional[float],
    plagiarism_score: Optional[float],
    fact_check_score: Optional[float],
) -> list[VerificationFactor]:
    """
    Build the factor list from raw measurements.

    `None` marks a sub-step that failed; its factor keeps a neutral score but
    carries zero weight so it does not move the overall figure.
    """
    return [
        _factor(
            FactorName.SIMILARITY,
            None if avg_similarity is None else 100 - avg_similarity * 100,
            avg_similarity,
        ),
        _factor(FactorName.SOURCE_CREDIBILITY, credibility_score, credibility_score),
        _factor(
            FactorName.PLAGIARISM,
            None if plagiarism_score is None else 100 - plagiarism_score,
            plagiarism_score,
        ),
        _factor(FactorName.FACT_CHECK, fact_check_score, fact_check_score),
    ]


def neutral_factors() -> list[VerificationFactor]:
    """Full-weight factors at the neutral score, for content that cannot be searched."""
    return [
        VerificationFactor(name=name, score=NEUTRAL_SCORE, weight=weight, raw=None)
        for name, weight in FACTOR_WEIGHTS.items()
    ]


def overall_score(factors: Sequence[VerificationFactor]) -> int:
    total_weight = sum(f.weight for f in factors)
    if total_weight <= 0:
        return 0
    weighted = sum(f.score * f.weight for f in factors) / total_weight
    return int(round(_clamp(weighted)))


def status_for(score: int) -> VerificationStatus:
    if score >= VERIFIED_THRESHOLD:
        return VerificationStatus.VERIFIED
    if score >= PARTIAL_THRESHOLD:
        return VerificationStatus.PARTIALLY_VERIFIED
    return VerificationStatus.NOT_VERIFIED


def _is_risky(factor: VerificationFactor) -> bool:
    if factor.weight <= 0 or factor.raw is None:
        return False
    if factor.name == FactorName.SIMILARITY:
        return factor.raw > 0.5
    if factor.name == FactorName.SOURCE_CREDIBILITY:
        return factor.raw < 50
    if factor.name == FactorName.PLAGIARISM:
        return factor.raw > 40
    return factor.raw < 50


def risk_factors(factors: Sequence[VerificationFactor]) -> list[str]:
    return [RISK_MESSAGES[f.name] for f in factors if _is_risky(f)]


def recommendations(
    score: int,
    plagiarism_tier: Optional[RiskTier] = None,
    fact_check_score: Optional[float] = None,
    contradictory_claims: int = 0,
) -> list[str]:
    recs = []
    if plagiarism_tier == RiskTier.HIGH:
        recs.append("Review the content immediately")
    elif plagiarism_tier == RiskTier.MEDIUM:
        recs.append("Check sources and citations")

    if fact_check_score is not None and fact_check_score < 50:
        recs.append("Verify the information sources")
    if contradictory_claims:
        recs.append("Investigate the contradicting sources found")

    if score < VERIFIED_THRESHOLD:
        for rec in ("Review information sources", "Verify facts and statements", "Consider citing original sources"):
            if rec not in recs:
                recs.append(rec)
    return recs


def summarize(score: int, status: VerificationStatus) -> str:
    text = f"Content {status.value.replace('_', ' ')} with a score of {score}/100. "
    if score >= VERIFIED_THRESHOLD:
        return text + "The content shows high originality and credibility."
    if score >= PARTIAL_THRESHOLD:
        return text + "Some sources need additional verification."
    return text + "Multiple risk factors need immediate attention."


def score_factors(
    factors: Sequence[VerificationFactor],
    *,
    plagiarism_tier: Optional[RiskTier] = None,
    contradictory_claims: int = 0,
) -> VerificationReport:
    score = overall_score(factors)
    status = status_for(score)

    fact = next((f for f in factors if f.name == FactorName.FACT_CHECK and f.weight > 0), None)
    recs = recommendations(
        score,
        plagiarism_tier=plagiarism_tier,
        fact_check_score=fact.raw if fact else None,
        contradictory_claims=contradictory_claims,
    )

    risks = risk_factors(factors)
    logger.info(f"[VERIFY] overall={score} status={status.value} risks={len(risks)}")

    return VerificationReport(
        overall_score=score,
        status=status,
        risk_factors=risks,
        recommendations=recs,
        factors=list(factors),
        summary=summarize(score, status),
        plagiarism_risk=plagiarism_tier,
    )
