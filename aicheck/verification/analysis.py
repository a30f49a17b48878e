"""
Per-factor verification analysis over a set of search hits.

All functions are pure; the orchestrator feeds them whatever hits the search
stage managed to collect (possibly none).
"""

import logging
from typing import NamedTuple, Sequence
from urllib.parse import urlparse

from aicheck.config import settings
from aicheck.schemas.verification import ClaimCheck, RiskTier, SearchHit, SimilarSource
from aicheck.verification.constants import CREDIBLE_DOMAINS, CREDIBLE_TLDS, DEBUNK_MARKERS
from aicheck.verification.fragments import extract_claims, keywords

logger = logging.getLogger(__name__)


class SimilarityAnalysis(NamedTuple):
    average: float
    maximum: float
    similar_sources: list[SimilarSource]
    risk: RiskTier


class SourceAnalysis(NamedTuple):
    total: int
    credible: int
    questionable: int
    credibility_score: float


class PlagiarismAnalysis(NamedTuple):
    score: float
    matches: list[SimilarSource]
    risk: RiskTier


class FactCheckAnalysis(NamedTuple):
    score: float
    claims: list[ClaimCheck]

    @property
    def contradictory(self) -> int:
        return sum(1 for c in self.claims if c.outcome == "contradictory")


def text_similarity(a: str, b: str) -> float:
    """Intersection-over-union of lowercase word sets."""
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def hit_relevance(text: str, hit: SearchHit) -> float:
    """
    Keyword coverage of a hit, title weighted over snippet.

    Used for the classification web signal, where a short snippet is compared
    against a long text and plain IoU would always read as "novel".
    """
    important = keywords(text)
    if not important:
        return 0.0

    title = hit.title.lower()
    snippet = hit.snippet.lower()
    title_matches = sum(1 for w in important if w in title)
    snippet_matches = sum(1 for w in important if w in snippet)
    full_matches = sum(1 for w in important if w in title or w in snippet)

    base = (title_matches / len(important)) * 0.6 + (snippet_matches / len(important)) * 0.4
    bonus = 0.1 if full_matches / len(important) > 0.3 else 0.0
    penalty = -0.2 if full_matches < 2 else 0.0
    return round(max(0.0, min(1.0, base + bonus + penalty)), 2)


def _domain(hit: SearchHit) -> str:
    if hit.display_link:
        return hit.display_link.lower().split("/")[0]
    return (urlparse(hit.link).hostname or hit.link).lower()


def is_credible_domain(domain: str) -> bool:
    domain = domain.lower().strip(".")
    if any(domain == d or domain.endswith("." + d) for d in CREDIBLE_DOMAINS):
        return True
    return any(domain.endswith(tld) for tld in CREDIBLE_TLDS)


def _as_source(hit: SearchHit, similarity: float) -> SimilarSource:
    return SimilarSource(
        source=_domain(hit),
        title=hit.title,
        link=hit.link,
        similarity=round(similarity, 4),
    )


def similarity_risk(average: float, maximum: float) -> RiskTier:
    if maximum > 0.8 or average > 0.6:
        return RiskTier.HIGH
    if maximum > 0.6 or average > 0.4:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def analyze_similarity(
    text: str,
    hits: Sequence[SearchHit],
    threshold: float = settings.similar_source_threshold,
) -> SimilarityAnalysis:
    if not hits:
        return SimilarityAnalysis(0.0, 0.0, [], RiskTier.LOW)

    scores = [text_similarity(text, hit.snippet) for hit in hits]
    similar = [_as_source(hit, s) for hit, s in zip(hits, scores) if s > threshold]
    similar.sort(key=lambda s: s.similarity, reverse=True)

    average = sum(scores) / len(scores)
    maximum = max(scores)
    return SimilarityAnalysis(average, maximum, similar, similarity_risk(average, maximum))


def verify_sources(hits: Sequence[SearchHit]) -> SourceAnalysis:
    total = len(hits)
    credible = sum(1 for hit in hits if is_credible_domain(_domain(hit)))
    score = credible / total * 100 if total else 0.0
    return SourceAnalysis(total, credible, total - credible, score)


def plagiarism_risk(score: float) -> RiskTier:
    if score > 70:
        return RiskTier.HIGH
    if score > 40:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def check_plagiarism(
    text: str,
    hits: Sequence[SearchHit],
    threshold: float = settings.plagiarism_match_threshold,
) -> PlagiarismAnalysis:
    matches = []
    for hit in hits:
        similarity = text_similarity(text, hit.snippet)
        if similarity > threshold:
            matches.append(_as_source(hit, similarity))

    score = sum(m.similarity for m in matches) / len(matches) * 100 if matches else 0.0
    return PlagiarismAnalysis(score, matches, plagiarism_risk(score))


def check_claim(
    claim: str,
    hits: Sequence[SearchHit],
    support_threshold: float = settings.claim_support_threshold,
) -> ClaimCheck:
    claim_words = set(keywords(claim))
    if not claim_words:
        return ClaimCheck(claim=claim, outcome="unverified")

    supporting, disputing = [], []
    for hit in hits:
        body = f"{hit.title} {hit.snippet}".lower()
        coverage = sum(1 for w in claim_words if w in body) / len(claim_words)
        if coverage < support_threshold:
            continue
        if any(marker in body for marker in DEBUNK_MARKERS):
            disputing.append(_domain(hit))
        else:
            supporting.append(_domain(hit))

    if disputing:
        return ClaimCheck(claim=claim, outcome="contradictory", sources=disputing)
    if supporting:
        return ClaimCheck(claim=claim, outcome="verified", sources=supporting)
    return ClaimCheck(claim=claim, outcome="unverified")


def fact_check(
    text: str,
    hits: Sequence[SearchHit],
    max_claims: int = settings.max_claims,
) -> FactCheckAnalysis:
    claims = [check_claim(c, hits) for c in extract_claims(text, limit=max_claims)]
    if not claims:
        return FactCheckAnalysis(0.0, [])
    verified = sum(1 for c in claims if c.outcome == "verified")
    return FactCheckAnalysis(verified / len(claims) * 100, claims)
