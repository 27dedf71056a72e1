"""Unit tests for the local fallback provider."""

import json

import pytest

from scholar.providers.llm import AIProvider, FallbackProvider, GenerationOptions, analyze_locally
from scholar.providers.llm.fallback import FALLBACK_NOTICE


class TestFallbackProvider:
    """FallbackProvider."""

    @pytest.fixture
    def provider(self) -> FallbackProvider:
        return FallbackProvider()

    def test_implements_protocol(self, provider: FallbackProvider) -> None:
        """FallbackProvider satisfies AIProvider."""
        assert isinstance(provider, AIProvider)
        assert provider.name == "fallback"

    @pytest.mark.asyncio
    async def test_text_notice(self, provider: FallbackProvider) -> None:
        """Text requests get the fixed notice."""
        result = await provider.generate_text("anything")
        assert result.content == FALLBACK_NOTICE
        assert result.model == "fallback"
        assert result.usage is None
        assert result.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_json_notice(self, provider: FallbackProvider) -> None:
        """JSON requests get the notice as a JSON object."""
        result = await provider.generate_text(
            "anything", GenerationOptions(response_format="json")
        )
        assert json.loads(result.content) == {"fallback": True, "message": FALLBACK_NOTICE}

    @pytest.mark.asyncio
    async def test_deterministic(self, provider: FallbackProvider) -> None:
        """The same call yields the same result."""
        first = await provider.generate_text("a")
        second = await provider.generate_text("b")
        assert first == second


class TestLocalAnalysis:
    """analyze_locally heuristics."""

    def test_topics_by_frequency(self) -> None:
        """The most frequent content words become topics."""
        text = "Photosynthesis uses light. Photosynthesis makes glucose. Glucose feeds cells."
        analysis = analyze_locally(text)
        assert analysis.key_topics[:2] == ["Photosynthesis", "Glucose"]
        assert analysis.learning_objectives[0] == "Understand Photosynthesis"

    def test_reading_time_at_two_hundred_wpm(self) -> None:
        """Reading time is words / 200, rounded up, at least one minute."""
        assert analyze_locally("tiny words here").estimated_reading_time == 1
        assert analyze_locally("biology " * 401).estimated_reading_time == 3

    def test_practical_content(self) -> None:
        """Exercise-heavy content is practical."""
        text = "Try this exercise. Build the project step by step, then practice."
        assert analyze_locally(text).content_type == "practical"

    def test_theoretical_content(self) -> None:
        """Principle-heavy content is theoretical."""
        text = "The theory rests on a principle and a definition from the framework."
        assert analyze_locally(text).content_type == "theoretical"

    def test_difficulty_from_word_length(self) -> None:
        """Longer words suggest harder material."""
        assert analyze_locally("the cat sat on the warm mat").difficulty == "beginner"
        long_words = "thermodynamics electromagnetism crystallography biochemistry"
        assert analyze_locally(long_words).difficulty == "advanced"

    def test_empty_content_gets_default(self) -> None:
        """No usable words yields the default analysis."""
        assert analyze_locally("").key_topics == ["General Topic"]

    @pytest.mark.asyncio
    async def test_provider_uses_local_analysis(self) -> None:
        """FallbackProvider.analyze_content never calls a model."""
        analysis = await FallbackProvider().analyze_content(
            "Enzymes catalyse reactions. Enzymes are proteins.", "content_analysis"
        )
        assert analysis.key_topics[0] == "Enzymes"
