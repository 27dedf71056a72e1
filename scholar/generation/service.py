"""AI service - orchestrates admission, provider calls and fallbacks.

Per call:
1. Admission - estimate tokens, ask the rate limiter
2. Provider call - the remote provider retries retryable failures itself
3. Accounting - record actual usage (or the estimate) right after success
4. Fallback - fallback-eligible failures are re-served locally

Structured operations (roadmap, assessment, question regeneration) add a
parse-and-validate step and never raise: any failure yields the
deterministic local artifact.
"""

import math
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from scholar.config.models.providers import AIServiceConfig, ProviderName
from scholar.config.settings import Settings
from scholar.exceptions import ConfigurationError
from scholar.generation.fallback import (
    generate_fallback_assessment,
    generate_fallback_question,
    generate_fallback_roadmap,
)
from scholar.generation.models import (
    AssessmentGenerationInput,
    GeneratedAssessment,
    GeneratedQuestion,
    GeneratedRoadmap,
    ParseFailure,
    QuestionRegenerationInput,
    RoadmapGenerationInput,
    ServiceStatus,
)
from scholar.generation.prompts import (
    ASSESSMENT_SYSTEM_PROMPT,
    QUESTION_SYSTEM_PROMPT,
    ROADMAP_SYSTEM_PROMPT,
    build_assessment_prompt,
    build_question_prompt,
    build_roadmap_prompt,
)
from scholar.generation.rate_limit import WINDOW_SECONDS, RateLimiter, RateLimitStats
from scholar.generation.validation import parse_assessment, parse_question, parse_roadmap
from scholar.observability.logging import get_logger, setup_logging
from scholar.observability.metrics import FALLBACKS, GENERATION_REQUESTS, RATE_LIMIT_DENIALS
from scholar.providers.llm.analysis import build_content_analysis_prompt
from scholar.providers.llm.base import (
    AIProvider,
    ContentAnalysis,
    ContentAnalysisType,
    ErrorCode,
    GenerationError,
    GenerationOptions,
    GenerationResult,
    ValidationResult,
)
from scholar.providers.llm.factory import create_provider
from scholar.providers.llm.fallback import FallbackProvider

logger = get_logger(__name__)

CHARS_PER_TOKEN = 4

# Completion budgets for structured operations
ROADMAP_MAX_TOKENS = 3000
ASSESSMENT_MAX_TOKENS = 4000
QUESTION_MAX_TOKENS = 1000
ANALYSIS_MAX_TOKENS = 2000


def estimate_tokens(prompt: str, options: GenerationOptions) -> int:
    """Admission estimate: prompt characters / 4 (rounded up) plus max_tokens."""
    return math.ceil(len(prompt) / CHARS_PER_TOKEN) + options.max_tokens


class AIService:
    """Orchestrate AI generation for the learning platform.

    Owns one rate limiter (its window lives as long as the service), one
    fallback provider and the active provider. The active provider is the
    remote backend when configured with credentials, otherwise the
    fallback provider.

    Example:
        async with AIService(AIServiceConfig(api_key="sk-...")) as service:
            assessment = await service.generate_assessment(data)
    """

    def __init__(
        self,
        config: AIServiceConfig | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        fallback: FallbackProvider | None = None,
        provider: AIProvider | None = None,
        clock: Callable[[], float] = time.time,
        **remote_options: Any,
    ) -> None:
        """Initialize the AI service.

        Args:
            config: Service configuration (defaults apply when omitted)
            rate_limiter: Limiter to use; pass a shared instance to share a budget
            fallback: Local provider (a new FallbackProvider by default)
            provider: Pre-built active provider (for testing)
            clock: Time source for status timestamps
            **remote_options: Passed to the remote provider (client, sleep, jitter)
        """
        self._config = config or AIServiceConfig()
        self._clock = clock
        self._rate_limiter = rate_limiter or RateLimiter.from_config(
            self._config.rate_limiting, clock=clock
        )
        self._fallback = fallback or FallbackProvider()
        self._remote_options = remote_options
        self._provider = provider or create_provider(
            self._config, self._fallback, **remote_options
        )

        logger.info(
            "ai_service_initialized",
            provider=self._provider.name,
            model=self._config.model,
            using_fallback=self.is_using_fallback(),
        )

    @property
    def config(self) -> AIServiceConfig:
        """Current configuration."""
        return self._config

    @property
    def provider(self) -> AIProvider:
        """The active provider."""
        return self._provider

    # ========================================================================
    # Core operations
    # ========================================================================

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Generate text through the active provider.

        Raises:
            GenerationError: RATE_LIMIT when admission is denied (no provider
                call is made), or a non-fallback-eligible provider failure
        """
        options = options or GenerationOptions()
        estimate = estimate_tokens(prompt, options)
        self._admit(estimate)

        try:
            result = await self._provider.generate_text(prompt, options)
        except GenerationError as e:
            if not self._can_fall_back(e):
                GENERATION_REQUESTS.labels(self._provider.name, "error").inc()
                raise
            self._note_fallback("generate_text", e)
            GENERATION_REQUESTS.labels(self._fallback.name, "fallback").inc()
            return await self._fallback.generate_text(prompt, options)

        self._record(result, estimate)
        GENERATION_REQUESTS.labels(self._provider.name, "success").inc()
        return result

    async def analyze_content(
        self,
        content: str,
        analysis_type: ContentAnalysisType = "content_analysis",
    ) -> ContentAnalysis:
        """Analyze content with the active provider.

        Admission is checked against the analysis prompt; fallback-eligible
        failures (a denied admission included) use the local analysis.

        Raises:
            GenerationError: Non-fallback-eligible provider failure
        """
        if self.is_using_fallback():
            return await self._fallback.analyze_content(content, analysis_type)

        estimate = estimate_tokens(
            build_content_analysis_prompt(content, analysis_type),
            GenerationOptions(max_tokens=ANALYSIS_MAX_TOKENS),
        )
        try:
            self._admit(estimate)
            analysis = await self._provider.analyze_content(content, analysis_type)
        except GenerationError as e:
            if not self._can_fall_back(e):
                raise
            self._note_fallback("analyze_content", e)
            return await self._fallback.analyze_content(content, analysis_type)

        self._rate_limiter.record_request(estimate)
        return analysis

    async def validate_response(self, response: str) -> ValidationResult:
        """Validate raw response text with the active provider."""
        return await self._provider.validate_response(response)

    # ========================================================================
    # Structured generation
    # ========================================================================

    async def generate_personalized_roadmap(
        self, data: RoadmapGenerationInput
    ) -> GeneratedRoadmap:
        """Generate a learning roadmap; falls back to catalog order on any failure."""
        prompt = build_roadmap_prompt(data)
        options = GenerationOptions(
            max_tokens=ROADMAP_MAX_TOKENS,
            response_format="json",
            system_prompt=ROADMAP_SYSTEM_PROMPT,
        )

        outcome = await self._generate_structured("roadmap", prompt, options, parse_roadmap)
        if outcome is None:
            FALLBACKS.labels("roadmap", "generation_failed").inc()
            return generate_fallback_roadmap(data)
        return outcome

    async def generate_assessment(
        self, data: AssessmentGenerationInput
    ) -> GeneratedAssessment:
        """Generate an assessment; falls back to template questions on any failure."""
        prompt = build_assessment_prompt(data)
        options = GenerationOptions(
            max_tokens=ASSESSMENT_MAX_TOKENS,
            response_format="json",
            system_prompt=ASSESSMENT_SYSTEM_PROMPT,
        )

        outcome = await self._generate_structured(
            "assessment", prompt, options, parse_assessment
        )
        if outcome is None:
            FALLBACKS.labels("assessment", "generation_failed").inc()
            return generate_fallback_assessment(data)
        return outcome

    async def regenerate_question(
        self, data: QuestionRegenerationInput
    ) -> GeneratedQuestion:
        """Generate a replacement for one question, keeping its type.

        A replacement of a different type counts as a failure and yields the
        local question.
        """
        prompt = build_question_prompt(data)
        options = GenerationOptions(
            max_tokens=QUESTION_MAX_TOKENS,
            response_format="json",
            system_prompt=QUESTION_SYSTEM_PROMPT,
        )

        question = await self._generate_structured("question", prompt, options, parse_question)
        if question is not None and question.type != data.question.type:
            logger.warning(
                "ai_question_type_mismatch",
                expected=data.question.type,
                received=question.type,
            )
            question = None

        if question is None:
            FALLBACKS.labels("question", "generation_failed").inc()
            return generate_fallback_question(data)

        # The replacement takes over the slot of the original
        question.id = data.question.id
        return question

    # ========================================================================
    # Administration
    # ========================================================================

    async def switch_provider(self, provider: ProviderName, **overrides: Any) -> None:
        """Rebuild the active provider from updated configuration.

        Args:
            provider: Provider to activate
            **overrides: AIServiceConfig fields to change (api_key, model, ...)

        Raises:
            ConfigurationError: The overrides do not form a valid configuration
        """
        try:
            config = AIServiceConfig.model_validate({
                **self._config.model_dump(),
                **overrides,
                "provider": provider,
            })
        except ValidationError as e:
            raise ConfigurationError(f"Invalid AI service configuration: {e}") from e

        previous = self._provider
        self._config = config
        self._provider = create_provider(config, self._fallback, **self._remote_options)
        if previous is not self._fallback and previous is not self._provider:
            await previous.aclose()

        logger.info(
            "ai_provider_switched",
            previous=previous.name,
            provider=self._provider.name,
            using_fallback=self.is_using_fallback(),
        )

    def get_rate_limit_stats(self) -> RateLimitStats:
        """Usage within the current rate-limit window."""
        return self._rate_limiter.get_stats()

    def reset_rate_limiter(self) -> None:
        """Forget all recorded usage."""
        self._rate_limiter.reset()
        logger.info("ai_rate_limiter_reset")

    def is_using_fallback(self) -> bool:
        """Whether the fallback provider is the active provider."""
        return self._provider is self._fallback

    def get_status(self) -> ServiceStatus:
        """Snapshot of provider, budget and capabilities for operators."""
        now = datetime.fromtimestamp(self._clock(), tz=UTC)
        using_fallback = self.is_using_fallback()
        return ServiceStatus(
            provider=self._provider.name,
            using_fallback=using_fallback,
            is_available=True,
            rate_limiting=self.get_rate_limit_stats(),
            reset_at=now + timedelta(seconds=WINDOW_SECONDS),
            capabilities={
                "text_generation": True,
                "content_analysis": True,
                "assessment_generation": True,
                "roadmap_generation": True,
                "question_regeneration": True,
                "remote_generation": not using_fallback,
            },
            checked_at=now,
        )

    async def aclose(self) -> None:
        """Release provider resources."""
        await self._provider.aclose()
        if self._provider is not self._fallback:
            await self._fallback.aclose()

    async def __aenter__(self) -> "AIService":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # ========================================================================
    # Internal
    # ========================================================================

    def _admit(self, estimate: int) -> None:
        decision = self._rate_limiter.check_limit(estimate)
        if decision.allowed:
            return

        RATE_LIMIT_DENIALS.labels(self._provider.name).inc()
        GENERATION_REQUESTS.labels(self._provider.name, "rate_limited").inc()
        logger.warning(
            "ai_rate_limit_exceeded",
            provider=self._provider.name,
            estimated_tokens=estimate,
            retry_after=decision.retry_after,
        )
        raise GenerationError(
            f"Rate limit exceeded. Try again in {decision.retry_after} seconds.",
            code=ErrorCode.RATE_LIMIT,
            provider=self._provider.name,
            retry_after=decision.retry_after,
        )

    def _record(self, result: GenerationResult, estimate: int) -> None:
        if self.is_using_fallback():
            return
        if result.usage is not None and result.usage.total_tokens:
            self._rate_limiter.record_request(result.usage.total_tokens)
        else:
            self._rate_limiter.record_request(estimate)

    def _can_fall_back(self, error: GenerationError) -> bool:
        return not self.is_using_fallback() and error.fallback_eligible

    def _note_fallback(self, operation: str, error: GenerationError) -> None:
        FALLBACKS.labels(operation, error.code.value).inc()
        logger.warning(
            "ai_fallback_used",
            operation=operation,
            provider=self._provider.name,
            code=error.code.value,
            error=error.message,
        )

    async def _generate_structured(
        self,
        operation: str,
        prompt: str,
        options: GenerationOptions,
        parse: Callable[[str], Any],
    ) -> Any | None:
        """Run generate_text and parse; None means use the local generator."""
        try:
            result = await self.generate_text(prompt, options)
        except Exception as e:
            logger.warning(
                "ai_structured_generation_failed",
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        if result.provider == self._fallback.name:
            # The fallback notice carries no artifact
            return None

        try:
            outcome = parse(result.content)
        except Exception as e:
            outcome = ParseFailure(stage="schema", reason=f"{type(e).__name__}: {e}")
        if isinstance(outcome, ParseFailure):
            logger.warning(
                "ai_structured_output_invalid",
                operation=operation,
                provider=result.provider,
                stage=outcome.stage,
                reason=outcome.reason,
                index=outcome.index,
            )
            return None
        return outcome.value


def create_ai_service(settings: Settings, **kwargs: Any) -> AIService:
    """Build an AI service from application settings.

    Configures logging from the observability settings first.

    Args:
        settings: Loaded settings (see scholar.config.get_settings)
        **kwargs: Passed to AIService (rate_limiter, fallback, client, ...)
    """
    log_config = settings.observability.logging
    setup_logging(level=log_config.level, format=log_config.format, redact=log_config.redact)
    return AIService(settings.ai, **kwargs)
