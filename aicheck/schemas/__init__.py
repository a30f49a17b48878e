from aicheck.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    BinaryBlob,
    ClassifyRequest,
    ContentKind,
    ErrorInfo,
    EvidenceItem,
    Label,
    PipelineStage,
    StageStatus,
)
from aicheck.schemas.verification import (
    ClaimCheck,
    FactorName,
    RiskTier,
    SearchHit,
    SearchResponse,
    SimilarSource,
    VerificationFactor,
    VerificationReport,
    VerificationStatus,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "BinaryBlob",
    "ClassifyRequest",
    "ContentKind",
    "ErrorInfo",
    "EvidenceItem",
    "Label",
    "PipelineStage",
    "StageStatus",
    "ClaimCheck",
    "FactorName",
    "RiskTier",
    "SearchHit",
    "SearchResponse",
    "SimilarSource",
    "VerificationFactor",
    "VerificationReport",
    "VerificationStatus",
]
