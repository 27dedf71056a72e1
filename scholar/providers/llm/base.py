"""LLM data models, provider protocol and error taxonomy.

This module provides the core types shared by every provider and by the
AI service:
- GenerationOptions: Per-call generation parameters
- GenerationResult: Output of one generation call
- ContentAnalysis / ValidationResult: Analysis pipeline outputs
- GenerationError: Typed failure with code, retryability and retry-after
- AIProvider: The capability set every provider implements
"""

from enum import Enum
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from scholar.exceptions import ScholarError

ResponseFormat = Literal["text", "json"]
FinishReason = Literal["stop", "length", "content_filter", "error"]
Difficulty = Literal["beginner", "intermediate", "advanced"]
ContentType = Literal["theoretical", "practical", "mixed"]
ContentAnalysisType = Literal[
    "assessment_generation",
    "roadmap_creation",
    "content_analysis",
    "difficulty_assessment",
]


class GenerationOptions(BaseModel):
    """Parameters for a single generation call."""

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=2000, gt=0, description="Maximum tokens to generate")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    model: str | None = Field(default=None, description="Model override for this call")
    system_prompt: str | None = Field(default=None, description="Optional system message")
    response_format: ResponseFormat = Field(default="text", description="text or json")


class TokenUsage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = Field(default=0, description="Tokens in prompt")
    completion_tokens: int = Field(default=0, description="Tokens in completion")
    total_tokens: int = Field(default=0, description="Total tokens used")


class GenerationResult(BaseModel):
    """Response from a provider."""

    content: str = Field(..., description="Generated text")
    model: str = Field(..., description="Model used")
    finish_reason: FinishReason = Field(default="stop", description="Why generation stopped")
    usage: TokenUsage | None = Field(default=None, description="Token usage, when reported")
    provider: str = Field(default="", description="Provider that produced the result")


class ContentAnalysis(BaseModel):
    """Structured analysis of a piece of educational content.

    Always fully populated: parsers default fields instead of leaving them out.
    """

    key_topics: list[str] = Field(default_factory=list)
    difficulty: Difficulty = "intermediate"
    learning_objectives: list[str] = Field(default_factory=list)
    concepts: list[str] = Field(default_factory=list)
    estimated_reading_time: int = Field(default=5, description="Minutes")
    content_type: ContentType = "mixed"


class ValidationResult(BaseModel):
    """Outcome of validating raw response text."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    sanitized_content: str | None = None


# ============================================================================
# Error Types
# ============================================================================


class ErrorCode(str, Enum):
    """Provider failure categories.

    - RATE_LIMIT: HTTP 429 or local admission deny
    - INVALID_API_KEY: Rejected credentials
    - MODEL_UNAVAILABLE: Backend temporarily unable to serve the model
    - CONTENT_FILTER: Backend content-policy rejection
    - NETWORK_ERROR: DNS, connection or timeout failure
    - UNKNOWN: Anything else
    """

    RATE_LIMIT = "RATE_LIMIT"
    INVALID_API_KEY = "INVALID_API_KEY"
    MODEL_UNAVAILABLE = "MODEL_UNAVAILABLE"
    CONTENT_FILTER = "CONTENT_FILTER"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN = "UNKNOWN"


RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMIT,
    ErrorCode.MODEL_UNAVAILABLE,
    ErrorCode.NETWORK_ERROR,
})

FALLBACK_ELIGIBLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMIT,
    ErrorCode.INVALID_API_KEY,
    ErrorCode.MODEL_UNAVAILABLE,
    ErrorCode.NETWORK_ERROR,
})


class GenerationError(ScholarError):
    """A classified generation failure.

    Created once at the provider boundary (or by local admission control)
    and never mutated afterwards.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        provider: str,
        retryable: bool | None = None,
        retry_after: float | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.provider = provider
        self.retryable = code in RETRYABLE_CODES if retryable is None else retryable
        self.retry_after = retry_after
        self.status_code = status_code

    @property
    def fallback_eligible(self) -> bool:
        """Whether the AI service may substitute a local result."""
        return self.code in FALLBACK_ELIGIBLE_CODES

    def wrap(self, message: str) -> "GenerationError":
        """Return a copy of this error with a new message."""
        return GenerationError(
            message,
            code=self.code,
            provider=self.provider,
            retryable=self.retryable,
            retry_after=self.retry_after,
            status_code=self.status_code,
        )

    def __repr__(self) -> str:
        return (
            f"GenerationError(code={self.code.value}, provider={self.provider!r}, "
            f"retryable={self.retryable}, message={self.message!r})"
        )


# ============================================================================
# Provider protocol
# ============================================================================


@runtime_checkable
class AIProvider(Protocol):
    """Capability set implemented by every provider."""

    @property
    def name(self) -> str: ...

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult: ...

    async def analyze_content(
        self, content: str, analysis_type: ContentAnalysisType
    ) -> ContentAnalysis: ...

    async def validate_response(self, response: str) -> ValidationResult: ...

    async def aclose(self) -> None: ...
