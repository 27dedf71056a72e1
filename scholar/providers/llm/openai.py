"""OpenAI-compatible chat-completions provider.

One HTTPS POST per attempt, bounded by a per-attempt timeout. Failures are
classified into ErrorCode once, here; retryable ones are retried with
exponential backoff and jitter before surfacing.
"""

import asyncio
import os
import random
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from scholar.observability.logging import get_logger
from scholar.observability.metrics import (
    LLM_TOKENS,
    PROVIDER_ERRORS,
    PROVIDER_LATENCY,
    PROVIDER_RETRIES,
)
from scholar.providers.llm.analysis import analyze_with, validate_response_text
from scholar.providers.llm.base import (
    ContentAnalysis,
    ContentAnalysisType,
    ErrorCode,
    FinishReason,
    GenerationError,
    GenerationOptions,
    GenerationResult,
    TokenUsage,
    ValidationResult,
)

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_RETRY_AFTER = 60.0
BASE_DELAY_MS = 1000
MAX_DELAY_MS = 30_000

_CONTENT_FILTER_MARKERS = ("content_filter", "content_policy")
_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": "stop",
    "length": "length",
    "content_filter": "content_filter",
}


def backoff_delay_ms(attempt: int, jitter: Callable[[], float] = random.random) -> float:
    """Delay before the retry that follows `attempt` (0-based), in milliseconds.

    min(1000 * 2**attempt + U(0, 1000), 30000)
    """
    return min(BASE_DELAY_MS * 2**attempt + jitter() * 1000, MAX_DELAY_MS)


def _parse_retry_after(value: str | None) -> float:
    if not value:
        return DEFAULT_RETRY_AFTER
    try:
        return max(0.0, float(value))
    except ValueError:
        return DEFAULT_RETRY_AFTER


def _token_count(value: Any) -> int:
    # Malformed counts are treated as unreported
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"HTTP {response.status_code}"


def classify_http_error(response: httpx.Response, provider: str) -> GenerationError:
    """Map a non-2xx response onto the error taxonomy."""
    status = response.status_code
    message = _error_message(response)
    lowered = message.lower()

    if status == 429:
        return GenerationError(
            message,
            code=ErrorCode.RATE_LIMIT,
            provider=provider,
            retry_after=_parse_retry_after(response.headers.get("retry-after")),
            status_code=status,
        )
    if status in (401, 403):
        code = ErrorCode.INVALID_API_KEY
    elif any(marker in lowered for marker in _CONTENT_FILTER_MARKERS):
        code = ErrorCode.CONTENT_FILTER
    elif status in (502, 503, 504):
        code = ErrorCode.MODEL_UNAVAILABLE
    else:
        code = ErrorCode.UNKNOWN

    return GenerationError(message, code=code, provider=provider, status_code=status)


def classify_transport_error(exc: httpx.HTTPError, provider: str) -> GenerationError:
    """Map an httpx transport failure onto the error taxonomy."""
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        code = ErrorCode.NETWORK_ERROR
    else:
        code = ErrorCode.UNKNOWN
    return GenerationError(
        f"{type(exc).__name__}: {exc}",
        code=code,
        provider=provider,
    )


class OpenAIProvider:
    """Remote provider for OpenAI-compatible chat-completions backends.

    Example:
        provider = OpenAIProvider(api_key="sk-...", model="gpt-4")
        result = await provider.generate_text(
            "Summarise photosynthesis",
            GenerationOptions(max_tokens=200),
        )
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4",
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = 3,
        timeout: float = 30.0,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        jitter: Callable[[], float] = random.random,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: API key (defaults to OPENAI_API_KEY env var)
            model: Default model identifier
            base_url: API base URL
            max_retries: Total attempts per call
            timeout: Per-attempt timeout in seconds
            client: Pre-built HTTP client, left open by aclose
            sleep: Coroutine used to wait between attempts
            jitter: Source of uniform [0, 1) jitter
        """
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._max_retries = max(1, max_retries)
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._sleep = sleep
        self._jitter = jitter

    @property
    def name(self) -> str:
        """Return the provider name."""
        return "openai"

    @property
    def model(self) -> str:
        """Default model for this provider."""
        return self._model

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Generate text, retrying retryable failures.

        Raises:
            GenerationError: Non-retryable failure, or the last failure once
                all attempts are used
        """
        options = options or GenerationOptions()
        body = self._build_request_body(prompt, options)
        last_error: GenerationError | None = None

        for attempt in range(self._max_retries):
            try:
                data = await self._post("/chat/completions", body)
                return self._parse_response(data, body["model"])
            except GenerationError as e:
                PROVIDER_ERRORS.labels(self.name, e.code.value).inc()
                last_error = e
                if not e.retryable:
                    logger.warning(
                        "remote_provider_failed",
                        provider=self.name,
                        code=e.code.value,
                        attempts=attempt + 1,
                        error=e.message,
                    )
                    raise e.wrap(
                        f"{self.name} request failed after {attempt + 1} attempt(s): "
                        f"{e.message}"
                    ) from e
                if attempt == self._max_retries - 1:
                    break

                delay_ms = backoff_delay_ms(attempt, self._jitter)
                PROVIDER_RETRIES.labels(self.name, e.code.value).inc()
                logger.info(
                    "remote_provider_retry",
                    provider=self.name,
                    code=e.code.value,
                    attempt=attempt + 1,
                    delay_ms=round(delay_ms),
                )
                await self._sleep(delay_ms / 1000)

        if last_error is None:
            raise GenerationError(
                "No attempts were made", code=ErrorCode.UNKNOWN, provider=self.name
            )
        logger.warning(
            "remote_provider_retries_exhausted",
            provider=self.name,
            code=last_error.code.value,
            attempts=self._max_retries,
            error=last_error.message,
        )
        raise last_error.wrap(
            f"{self.name} request failed after {self._max_retries} attempt(s): "
            f"{last_error.message}"
        ) from last_error

    async def analyze_content(
        self, content: str, analysis_type: ContentAnalysisType
    ) -> ContentAnalysis:
        """Analyze content through this provider."""
        return await analyze_with(self, content, analysis_type)

    async def validate_response(self, response: str) -> ValidationResult:
        """Validate raw response text."""
        return validate_response_text(response)

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "OpenAIProvider":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # ========================================================================
    # Internal
    # ========================================================================

    def _build_request_body(self, prompt: str, options: GenerationOptions) -> dict[str, Any]:
        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        body: dict[str, Any] = {
            "model": options.model or self._model,
            "messages": messages,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        if options.response_format == "json":
            body["response_format"] = {"type": "json_object"}
        return body

    async def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "User-Agent": "scholar/0.1",
        }

        start = time.perf_counter()
        try:
            response = await self._client.post(
                f"{self._base_url}{endpoint}",
                headers=headers,
                json=body,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise classify_transport_error(e, self.name) from e
        finally:
            PROVIDER_LATENCY.labels(self.name).observe(time.perf_counter() - start)

        if response.is_error:
            raise classify_http_error(response, self.name)

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(
                "Response body is not valid JSON",
                code=ErrorCode.UNKNOWN,
                provider=self.name,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise GenerationError(
                "Response body is not a JSON object",
                code=ErrorCode.UNKNOWN,
                provider=self.name,
                status_code=response.status_code,
            )
        return data

    def _parse_response(self, data: dict[str, Any], requested_model: str) -> GenerationResult:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise GenerationError(
                "No choices in response",
                code=ErrorCode.UNKNOWN,
                provider=self.name,
            )

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise GenerationError(
                "Malformed choice in response",
                code=ErrorCode.UNKNOWN,
                provider=self.name,
            )
        content = message.get("content") or ""
        if not isinstance(content, str):
            raise GenerationError(
                "Response content is not text",
                code=ErrorCode.UNKNOWN,
                provider=self.name,
            )
        model = str(data.get("model") or requested_model)

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict):
            usage = TokenUsage(
                prompt_tokens=_token_count(raw_usage.get("prompt_tokens")),
                completion_tokens=_token_count(raw_usage.get("completion_tokens")),
                total_tokens=_token_count(raw_usage.get("total_tokens")),
            )
            LLM_TOKENS.labels(self.name, model, "input").inc(usage.prompt_tokens)
            LLM_TOKENS.labels(self.name, model, "output").inc(usage.completion_tokens)

        result = GenerationResult(
            content=content,
            model=model,
            finish_reason=_FINISH_REASONS.get(str(choice.get("finish_reason") or "stop"), "error"),
            usage=usage,
            provider=self.name,
        )

        logger.debug(
            "remote_provider_complete",
            provider=self.name,
            model=model,
            finish_reason=result.finish_reason,
            content_length=len(result.content),
        )
        return result
