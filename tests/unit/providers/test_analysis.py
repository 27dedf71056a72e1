"""Unit tests for the content analysis pipeline."""

import json

import pytest

from scholar.providers.llm import (
    MockAIProvider,
    build_content_analysis_prompt,
    default_content_analysis,
    parse_content_analysis,
    validate_response_text,
)
from scholar.providers.llm.analysis import ANALYST_SYSTEM_PROMPT, sanitize_response

VALID_ANALYSIS = {
    "keyTopics": ["Photosynthesis", "Chlorophyll"],
    "difficulty": "advanced",
    "learningObjectives": ["Explain the light reactions"],
    "concepts": ["ATP"],
    "estimatedReadingTime": 12,
    "contentType": "theoretical",
}


class TestBuildPrompt:
    """build_content_analysis_prompt."""

    def test_base_prompt_contains_content(self) -> None:
        """The content and JSON template are always present."""
        prompt = build_content_analysis_prompt("Leaves are green.", "content_analysis")
        assert "Leaves are green." in prompt
        assert '"keyTopics"' in prompt
        assert "Focus on" not in prompt

    @pytest.mark.parametrize(
        ("analysis_type", "marker"),
        [
            ("assessment_generation", "tested in an assessment"),
            ("roadmap_creation", "prerequisite knowledge"),
            ("difficulty_assessment", "difficulty level"),
        ],
    )
    def test_focus_line_per_type(self, analysis_type: str, marker: str) -> None:
        """Specialised analysis types append a focus line."""
        prompt = build_content_analysis_prompt("x", analysis_type)
        assert marker in prompt


class TestParseContentAnalysis:
    """parse_content_analysis never raises."""

    def test_valid_response(self) -> None:
        """A complete response is parsed field by field."""
        analysis = parse_content_analysis(json.dumps(VALID_ANALYSIS))
        assert analysis.key_topics == ["Photosynthesis", "Chlorophyll"]
        assert analysis.difficulty == "advanced"
        assert analysis.estimated_reading_time == 12
        assert analysis.content_type == "theoretical"

    def test_fenced_response(self) -> None:
        """Markdown code fences are stripped."""
        analysis = parse_content_analysis("```json\n" + json.dumps(VALID_ANALYSIS) + "\n```")
        assert analysis.concepts == ["ATP"]

    @pytest.mark.parametrize("text", ["", "not json", "[1, 2]", '{"keyTopics": []}'])
    def test_invalid_returns_default(self, text: str) -> None:
        """Undecodable or incomplete responses yield the default analysis."""
        assert parse_content_analysis(text) == default_content_analysis()

    def test_repairs_invalid_values(self) -> None:
        """Bad enum, list and number values are repaired."""
        raw = {
            **VALID_ANALYSIS,
            "difficulty": "expert",
            "contentType": "fun",
            "keyTopics": "Photosynthesis",
            "estimatedReadingTime": "ten",
        }
        analysis = parse_content_analysis(json.dumps(raw))
        assert analysis.difficulty == "intermediate"
        assert analysis.content_type == "mixed"
        assert analysis.key_topics == []
        assert analysis.estimated_reading_time == 5

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_reading_time(self, value: str) -> None:
        """Non-finite reading times fall back to five minutes."""
        text = json.dumps(VALID_ANALYSIS).replace('"estimatedReadingTime": 12',
                                                  f'"estimatedReadingTime": {value}')
        analysis = parse_content_analysis(text)
        assert analysis.estimated_reading_time == 5
        assert analysis.key_topics == ["Photosynthesis", "Chlorophyll"]

    def test_default_analysis_values(self) -> None:
        """The default analysis is fully populated."""
        analysis = default_content_analysis()
        assert analysis.key_topics == ["General Topic"]
        assert analysis.learning_objectives == ["Learn the content"]
        assert analysis.concepts == ["Basic Concepts"]
        assert analysis.estimated_reading_time == 5
        assert (analysis.difficulty, analysis.content_type) == ("intermediate", "mixed")


class TestAnalyzeWith:
    """analyze_with composes prompt, provider call and parse."""

    @pytest.mark.asyncio
    async def test_requests_json_with_analyst_prompt(self) -> None:
        """The provider is called in JSON mode with the analyst system prompt."""
        provider = MockAIProvider(script=[json.dumps(VALID_ANALYSIS)])
        analysis = await provider.analyze_content("Plants make sugar.", "roadmap_creation")

        assert analysis.key_topics == ["Photosynthesis", "Chlorophyll"]
        options = provider.call_history[0]["options"]
        assert options.response_format == "json"
        assert options.system_prompt == ANALYST_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_unparseable_reply_gives_default(self) -> None:
        """A prose reply yields the default analysis."""
        provider = MockAIProvider(default_response="Sure! Here is my analysis...")
        analysis = await provider.analyze_content("Plants make sugar.", "content_analysis")
        assert analysis == default_content_analysis()


class TestValidateResponse:
    """validate_response_text and sanitize_response."""

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_empty_is_invalid(self, text: str) -> None:
        """Empty responses are invalid."""
        result = validate_response_text(text)
        assert result.is_valid is False
        assert result.errors == ["Empty response"]
        assert result.sanitized_content is None

    def test_refusal_warns(self) -> None:
        """Refusals are valid but flagged."""
        result = validate_response_text("I cannot help with that.")
        assert result.is_valid is True
        assert result.warnings == ["Response indicates AI limitations"]

    def test_sanitizes_markup(self) -> None:
        """Script and iframe blocks and javascript: URLs are removed."""
        text = (
            'Hello <script>alert("x")</script>'
            '<iframe src="https://evil.test"></iframe> '
            '<a href="javascript:run()">link</a>'
        )
        result = validate_response_text(text)
        assert result.is_valid is True
        assert "<script" not in result.sanitized_content
        assert "<iframe" not in result.sanitized_content
        assert "javascript:" not in result.sanitized_content
        assert result.sanitized_content.startswith("Hello")

    def test_sanitize_plain_text_unchanged(self) -> None:
        """Plain text passes through."""
        assert sanitize_response("  The answer is 4.  ") == "The answer is 4."
