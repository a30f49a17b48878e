"""
Error taxonomy for the analysis core.

Only `ValidationError` ever reaches a caller. Everything a collaborator raises
is absorbed by the orchestrator and recorded on the stage that made the call.
"""


class ValidationError(Exception):
    """Request rejected before any stage runs (content too short, too large, ...)."""

    def __init__(self, message: str, field: str = "content"):
        super().__init__(message)
        self.message = message
        self.field = field


class ProviderError(Exception):
    """A collaborator answered, but not usefully (bad status, malformed body)."""

    def __init__(self, provider: str, message: str, status: int | None = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status = status


class ProviderUnavailableError(ProviderError):
    """The collaborator cannot serve requests right now (no credentials, quota, model loading)."""


class StageError(Exception):
    """Non-fatal wrapper recorded on a failed PipelineStage."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
        self.message = message


class StageTimeoutError(StageError):
    def __init__(self, stage: str, timeout_sec: float):
        super().__init__(stage, f"timed out after {timeout_sec:.1f}s")
        self.timeout_sec = timeout_sec
