from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"


class Label(str, Enum):
    AI = "AI"
    HUMAN = "Human"
    SUSPICIOUS = "Suspicious"
    UNKNOWN = "Unknown"


class StageStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BinaryBlob(BaseModel):
    """Uploaded media. Only filename + size feed the fingerprint."""
    model_config = ConfigDict(frozen=True)

    filename: str
    data: bytes = Field(repr=False)
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: Union[str, BinaryBlob]
    kind: ContentKind = ContentKind.TEXT
    options: dict = Field(default_factory=dict)


class ErrorInfo(BaseModel):
    kind: Literal["timeout", "unavailable", "provider", "cancelled", "internal"]
    message: str


class PipelineStage(BaseModel):
    index: int
    name: str
    status: StageStatus = StageStatus.PENDING
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    result: Optional[dict[str, Any]] = None
    error: Optional[ErrorInfo] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (StageStatus.COMPLETED, StageStatus.FAILED)


class EvidenceItem(BaseModel):
    """One classifier's opinion. `signal` carries the raw web similarity."""
    model_config = ConfigDict(frozen=True)

    source_id: str
    label: Label
    confidence: float = Field(ge=0.0, le=1.0)
    weight: float = Field(1.0, ge=0.0)
    rationale: str = ""
    signal: Optional[float] = None
    indicators: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: Label
    confidence: float = Field(ge=0.0, le=0.95)
    ai_probability_pct: int = Field(ge=0, le=100)
    human_probability_pct: int = Field(ge=0, le=100)
    explanation: str
    stages: List[PipelineStage] = Field(default_factory=list)
    evidence: List[EvidenceItem] = Field(default_factory=list)
    kind: ContentKind = ContentKind.TEXT
    fingerprint: Optional[str] = None
    latency_ms: int = 0
    is_cached: bool = False


class ClassifyRequest(BaseModel):
    """JSON body for POST /classify and POST /verify."""
    content: str
    kind: ContentKind = ContentKind.TEXT
    options: dict = Field(default_factory=dict)
