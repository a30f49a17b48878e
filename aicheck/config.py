"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    AI_LABEL_THRESHOLD=0.7 uvicorn aicheck.main:app     # stricter AI label
    export CLASSIFICATION_CACHE_TTL_SEC=60              # staging override

A `.env` file at the project root is loaded automatically.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # AI_LABEL_THRESHOLD == ai_label_threshold
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Input validation                                                    #
    # ------------------------------------------------------------------ #
    text_min_length: int = Field(
        50, description="Shortest text accepted for analysis (characters)"
    )
    text_max_length: int = Field(
        50_000, description="Longest text accepted for analysis (characters)"
    )
    max_image_mb: int = Field(
        10, description="Max MB for image content"
    )
    max_video_mb: int = Field(
        100, description="Max MB for video content"
    )
    max_document_mb: int = Field(
        50, description="Max MB for binary document content"
    )

    # ------------------------------------------------------------------ #
    # Stage timeouts (seconds)                                            #
    # ------------------------------------------------------------------ #
    reasoning_timeout_sec: float = Field(
        30.0, description="Per-call timeout for the reasoning (LLM) service"
    )
    classifier_timeout_sec: float = Field(
        15.0, description="Per-call timeout for the pattern-classification service"
    )
    search_timeout_sec: float = Field(
        10.0, description="Per-call timeout for the web-search service"
    )

    # ------------------------------------------------------------------ #
    # Orchestration                                                       #
    # ------------------------------------------------------------------ #
    parallel_stages: bool = Field(
        False, description="Run independent stages concurrently; fusion stays serial"
    )
    dedupe_inflight: bool = Field(
        True, description="Concurrent runs for one fingerprint share a single computation"
    )
    heuristic_fallback_enabled: bool = Field(
        True, description="Use the local heuristic classifier when the classifier is unavailable"
    )

    # ------------------------------------------------------------------ #
    # Fingerprint cache                                                   #
    # ------------------------------------------------------------------ #
    classification_cache_ttl_sec: int = Field(
        300, description="5 min: classification result lifetime"
    )
    verification_cache_ttl_sec: int = Field(
        86_400, description="24 h: verification report lifetime"
    )
    local_cache_max_size: int = Field(
        500, description="Max entries per in-memory cache namespace"
    )
    cache_cleanup_interval_sec: float = Field(
        60, description="How often the background task purges expired memory entries"
    )
    fingerprint_prefix_chars: int = Field(
        1_000, description="Characters of text fed to the rolling fingerprint hash"
    )

    # ------------------------------------------------------------------ #
    # Evidence fusion                                                     #
    # ------------------------------------------------------------------ #
    ai_label_threshold: float = Field(
        0.6, description="final_ratio above this → labelled AI"
    )
    suspicious_confidence: float = Field(
        0.5, description="AI-leaning result below this confidence → Suspicious"
    )
    max_confidence: float = Field(
        0.95, description="Confidence ceiling; the system never claims certainty"
    )
    no_evidence_confidence: float = Field(
        0.2, description="Confidence reported when no stage produced evidence"
    )
    web_evidence_weight: float = Field(
        1.0, description="Weight of the web-similarity signal (0 disables it)"
    )
    web_evidence_confidence: float = Field(
        0.6, description="Confidence the web-similarity source contributes"
    )
    web_high_similarity: float = Field(
        0.7, description="Similarity above this → strong human signal"
    )
    web_low_similarity: float = Field(
        0.3, description="Similarity below this → strong AI signal"
    )

    # ------------------------------------------------------------------ #
    # Verification                                                        #
    # ------------------------------------------------------------------ #
    search_results_per_query: int = Field(
        5, description="Results requested per fragment search"
    )
    max_search_fragments: int = Field(
        3, description="Upper bound on outbound search calls per verification"
    )
    max_claims: int = Field(
        3, description="Declarative sentences fact-checked per verification"
    )
    similar_source_threshold: float = Field(
        0.3, description="Hit similarity above this → 'similar source'"
    )
    plagiarism_match_threshold: float = Field(
        0.5, description="Hit similarity above this → potential plagiarism match"
    )
    claim_support_threshold: float = Field(
        0.5, description="Share of claim keywords a hit must cover to support it"
    )

    # ------------------------------------------------------------------ #
    # Gemini reasoning service                                            #
    # ------------------------------------------------------------------ #
    gemini_model: str = Field(
        "gemini-2.0-flash", description="Model used for reasoning calls"
    )
    gemini_http_timeout_ms: int = Field(
        30_000, description="HTTP client total timeout (ms)"
    )
    gemini_max_retries: int = Field(
        2, description="Max retry attempts on transient errors"
    )
    gemini_retry_initial_delay: float = Field(
        1.0, description="First retry delay (seconds)"
    )
    gemini_retry_max_delay: float = Field(
        5.0, description="Max retry back-off delay (seconds)"
    )
    gemini_retry_exp_base: float = Field(
        2.0, description="Exponential back-off multiplier"
    )
    gemini_temperature: float = Field(
        0.1, description="Sampling temperature for Gemini model"
    )
    gemini_max_output_tokens: int = Field(
        8_192, description="Response token cap"
    )
    gemini_max_pixels: int = Field(
        4_194_304, description="2048×2048: resize cap before image upload"
    )
    gemini_jpeg_quality: int = Field(
        90, description="JPEG quality for image upload"
    )
    reasoning_prompt_chars: int = Field(
        8_000, description="Characters of text embedded in the reasoning prompt"
    )

    # ------------------------------------------------------------------ #
    # Hugging Face pattern classifier                                     #
    # ------------------------------------------------------------------ #
    hf_base_url: str = Field(
        "https://api-inference.huggingface.co/models", description="Inference API root"
    )
    hf_zero_shot_model: str = Field(
        "facebook/bart-large-mnli", description="Zero-shot classification model"
    )
    hf_input_chars: int = Field(
        2_000, description="Characters of text sent to the classifier"
    )

    # ------------------------------------------------------------------ #
    # Google Custom Search                                                #
    # ------------------------------------------------------------------ #
    search_base_url: str = Field(
        "https://www.googleapis.com/customsearch/v1", description="Custom Search JSON API"
    )

    # ------------------------------------------------------------------ #
    # Monitoring                                                          #
    # ------------------------------------------------------------------ #
    monitoring_history_size: int = Field(
        100, description="Recent analyses kept in memory for /stats"
    )
    persist_results: bool = Field(
        False, description="Write every fresh result to Firestore"
    )

    # ------------------------------------------------------------------ #
    # Derived byte-level properties (computed from MB fields)             #
    # ------------------------------------------------------------------ #
    @property
    def max_image_bytes(self) -> int:
        return self.max_image_mb * 1024 * 1024

    @property
    def max_video_bytes(self) -> int:
        return self.max_video_mb * 1024 * 1024

    @property
    def max_document_bytes(self) -> int:
        return self.max_document_mb * 1024 * 1024


# Single shared instance, import this everywhere.
settings = Settings()
