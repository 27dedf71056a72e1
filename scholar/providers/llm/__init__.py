"""LLM providers for text generation.

Every provider implements the AIProvider protocol:
- OpenAIProvider: OpenAI-compatible chat-completions backend over HTTPS
- FallbackProvider: local, deterministic, always available
- MockAIProvider: scripted outcomes for tests

Shared analysis behaviour lives in free functions (see analysis.py) that
providers compose rather than inherit.
"""

from scholar.providers.llm.analysis import (
    analyze_with,
    build_content_analysis_prompt,
    default_content_analysis,
    parse_content_analysis,
    sanitize_response,
    validate_response_text,
)
from scholar.providers.llm.base import (
    FALLBACK_ELIGIBLE_CODES,
    RETRYABLE_CODES,
    AIProvider,
    ContentAnalysis,
    ContentAnalysisType,
    ErrorCode,
    GenerationError,
    GenerationOptions,
    GenerationResult,
    TokenUsage,
    ValidationResult,
)
from scholar.providers.llm.factory import create_provider
from scholar.providers.llm.fallback import FallbackProvider, analyze_locally
from scholar.providers.llm.mock import MockAIProvider
from scholar.providers.llm.openai import OpenAIProvider, backoff_delay_ms

__all__ = [
    # Data models
    "GenerationOptions",
    "GenerationResult",
    "TokenUsage",
    "ContentAnalysis",
    "ContentAnalysisType",
    "ValidationResult",
    # Errors
    "ErrorCode",
    "GenerationError",
    "RETRYABLE_CODES",
    "FALLBACK_ELIGIBLE_CODES",
    # Providers
    "AIProvider",
    "OpenAIProvider",
    "FallbackProvider",
    "MockAIProvider",
    "create_provider",
    "backoff_delay_ms",
    # Analysis pipeline
    "analyze_with",
    "analyze_locally",
    "build_content_analysis_prompt",
    "default_content_analysis",
    "parse_content_analysis",
    "sanitize_response",
    "validate_response_text",
]
