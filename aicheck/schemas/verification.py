from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from aicheck.schemas.analysis import ContentKind, PipelineStage


class FactorName(str, Enum):
    SIMILARITY = "similarity"
    SOURCE_CREDIBILITY = "source_credibility"
    PLAGIARISM = "plagiarism"
    FACT_CHECK = "fact_check"


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    PARTIALLY_VERIFIED = "partially_verified"
    NOT_VERIFIED = "not_verified"


class RiskTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class VerificationFactor(BaseModel):
    """
    score is oriented so that higher is better (100 = fully original / credible).
    raw keeps the measured value (similarity ratio, plagiarism %, ...).
    weight 0 marks a factor whose sub-step failed.
    """
    model_config = ConfigDict(frozen=True)

    name: FactorName
    score: float = Field(ge=0.0, le=100.0)
    weight: float = Field(ge=0.0)
    raw: Optional[float] = None


class SearchHit(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    snippet: str = ""
    link: str = ""
    display_link: str = ""


class SearchResponse(BaseModel):
    items: List[SearchHit] = Field(default_factory=list)
    total_results_estimate: int = 0


class SimilarSource(BaseModel):
    source: str
    title: str
    link: str
    similarity: float


class ClaimCheck(BaseModel):
    claim: str
    outcome: str   # "verified" | "contradictory" | "unverified"
    sources: List[str] = Field(default_factory=list)


class VerificationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=100)
    status: VerificationStatus
    risk_factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    factors: List[VerificationFactor] = Field(default_factory=list)
    summary: str = ""
    plagiarism_risk: Optional[RiskTier] = None
    similar_sources: List[SimilarSource] = Field(default_factory=list)
    potential_matches: List[SimilarSource] = Field(default_factory=list)
    claims: List[ClaimCheck] = Field(default_factory=list)
    stages: List[PipelineStage] = Field(default_factory=list)
    kind: ContentKind = ContentKind.TEXT
    fingerprint: Optional[str] = None
    is_cached: bool = False
