"""Scripted provider for testing."""

from typing import Any

from scholar.providers.llm.analysis import analyze_with, validate_response_text
from scholar.providers.llm.base import (
    ContentAnalysis,
    ContentAnalysisType,
    GenerationError,
    GenerationOptions,
    GenerationResult,
    TokenUsage,
    ValidationResult,
)


class MockAIProvider:
    """Provider that replays scripted outcomes without network access.

    Each call to generate_text consumes the next scripted item: a string is
    returned as content, a GenerationError is raised. Once the script is
    exhausted the default response is returned.
    """

    def __init__(
        self,
        script: list[str | GenerationError] | None = None,
        default_response: str = "Mock response",
        model: str = "mock-model",
        usage: TokenUsage | None = None,
        name: str = "mock",
    ) -> None:
        """Initialize mock provider.

        Args:
            script: Outcomes to replay in order
            default_response: Content once the script is exhausted
            model: Model name to report
            usage: Usage to report (None to report no usage)
            name: Provider name to report
        """
        self._script = list(script or [])
        self._default_response = default_response
        self._model = model
        self._usage = usage
        self._name = name
        self._call_history: list[dict[str, Any]] = []
        self.closed = False

    @property
    def name(self) -> str:
        """Return the provider name."""
        return self._name

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def queue(self, *outcomes: str | GenerationError) -> None:
        """Append outcomes to the script."""
        self._script.extend(outcomes)

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Replay the next scripted outcome."""
        self._call_history.append({"prompt": prompt, "options": options})

        outcome: str | GenerationError = (
            self._script.pop(0) if self._script else self._default_response
        )
        if isinstance(outcome, GenerationError):
            raise outcome

        return GenerationResult(
            content=outcome,
            model=self._model,
            finish_reason="stop",
            usage=self._usage,
            provider=self._name,
        )

    async def analyze_content(
        self, content: str, analysis_type: ContentAnalysisType
    ) -> ContentAnalysis:
        """Analyze content through the scripted generate_text."""
        return await analyze_with(self, content, analysis_type)

    async def validate_response(self, response: str) -> ValidationResult:
        """Validate raw response text."""
        return validate_response_text(response)

    async def aclose(self) -> None:
        """Mark the provider closed."""
        self.closed = True
