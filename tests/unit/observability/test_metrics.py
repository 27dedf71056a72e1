"""Tests for Prometheus metrics."""

import pytest
from prometheus_client import REGISTRY

from scholar.generation.rate_limit import RateLimiter
from scholar.generation.service import AIService
from scholar.providers.llm import ErrorCode, GenerationError, MockAIProvider
from tests.factories.llm import FakeClock


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestServiceMetrics:
    """Counters updated by the AI service."""

    @pytest.mark.asyncio
    async def test_fallback_counter(self) -> None:
        """Fallback-served calls are counted by operation and reason."""
        labels = {"operation": "generate_text", "reason": "MODEL_UNAVAILABLE"}
        before = _sample("scholar_fallbacks_total", labels)

        error = GenerationError("down", code=ErrorCode.MODEL_UNAVAILABLE, provider="mock")
        await AIService(provider=MockAIProvider(script=[error])).generate_text("Hi")

        assert _sample("scholar_fallbacks_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_rate_limit_denial_counter(self, clock: FakeClock) -> None:
        """Denied admissions are counted per provider."""
        labels = {"provider": "metrics-mock"}
        before = _sample("scholar_rate_limit_denials_total", labels)

        limiter = RateLimiter(tokens_per_minute=10, clock=clock)
        service = AIService(provider=MockAIProvider(name="metrics-mock"), rate_limiter=limiter)
        with pytest.raises(GenerationError):
            await service.generate_text("Hi")

        assert _sample("scholar_rate_limit_denials_total", labels) == before + 1
