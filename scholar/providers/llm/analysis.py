"""Content analysis pipeline shared by every provider.

Free functions composed into each provider:
- build_content_analysis_prompt: type-specific analysis prompt
- parse_content_analysis: tolerant JSON parser that never raises
- analyze_with: prompt -> provider.generate_text -> tolerant parse
- validate_response_text / sanitize_response: raw response checks
"""

from __future__ import annotations

import json
import math
import re
from typing import TYPE_CHECKING, Any

from scholar.observability.logging import get_logger
from scholar.providers.llm.base import (
    ContentAnalysis,
    ContentAnalysisType,
    GenerationOptions,
    ValidationResult,
)

if TYPE_CHECKING:
    from scholar.providers.llm.base import AIProvider

logger = get_logger(__name__)

ANALYST_SYSTEM_PROMPT = (
    "You are an educational content analyst. Respond only with valid JSON."
)

REQUIRED_ANALYSIS_FIELDS = (
    "keyTopics",
    "difficulty",
    "learningObjectives",
    "concepts",
    "estimatedReadingTime",
    "contentType",
)

_ANALYSIS_FOCUS: dict[str, str] = {
    "assessment_generation": (
        "Focus on identifying key concepts that should be tested in an assessment."
    ),
    "roadmap_creation": "Focus on prerequisite knowledge and learning progression.",
    "difficulty_assessment": (
        "Focus on accurately determining the difficulty level and required "
        "background knowledge."
    ),
}

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_BLOCK = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)

_REFUSAL_MARKERS = ("I cannot", "I am unable")


def default_content_analysis() -> ContentAnalysis:
    """The analysis returned when a response cannot be parsed."""
    return ContentAnalysis(
        key_topics=["General Topic"],
        difficulty="intermediate",
        learning_objectives=["Learn the content"],
        concepts=["Basic Concepts"],
        estimated_reading_time=5,
        content_type="mixed",
    )


def build_content_analysis_prompt(content: str, analysis_type: ContentAnalysisType) -> str:
    """Build the analysis prompt for the given analysis type."""
    prompt = f"""Analyze the following educational content and provide a structured analysis:

Content:
{content}

Please provide your analysis in the following JSON format:
{{
  "keyTopics": ["topic1", "topic2", "topic3"],
  "difficulty": "beginner|intermediate|advanced",
  "learningObjectives": ["objective1", "objective2"],
  "concepts": ["concept1", "concept2"],
  "estimatedReadingTime": 10,
  "contentType": "theoretical|practical|mixed"
}}"""

    focus = _ANALYSIS_FOCUS.get(analysis_type)
    if focus:
        return f"{prompt}\n\n{focus}"
    return prompt


def extract_json_text(content: str) -> str:
    """Strip markdown code fences that models wrap around JSON."""
    content = content.strip()
    if "```json" in content:
        start = content.find("```json") + 7
        end = content.find("```", start)
        if end > start:
            return content[start:end].strip()
    elif "```" in content:
        start = content.find("```") + 3
        end = content.find("```", start)
        if end > start:
            return content[start:end].strip()
    return content


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def parse_content_analysis(response: str) -> ContentAnalysis:
    """Parse an analysis response, returning the default analysis on failure.

    Enum fields outside their allowed values are repaired rather than rejected.
    """
    try:
        parsed = json.loads(extract_json_text(response))
    except json.JSONDecodeError as e:
        logger.warning("content_analysis_parse_failed", error=str(e))
        return default_content_analysis()

    if not isinstance(parsed, dict):
        logger.warning("content_analysis_not_object", kind=type(parsed).__name__)
        return default_content_analysis()

    missing = [name for name in REQUIRED_ANALYSIS_FIELDS if name not in parsed]
    if missing:
        logger.warning("content_analysis_missing_fields", missing=missing)
        return default_content_analysis()

    difficulty = parsed["difficulty"]
    if difficulty not in ("beginner", "intermediate", "advanced"):
        difficulty = "intermediate"

    content_type = parsed["contentType"]
    if content_type not in ("theoretical", "practical", "mixed"):
        content_type = "mixed"

    reading_time = parsed["estimatedReadingTime"]
    if (
        isinstance(reading_time, bool)
        or not isinstance(reading_time, (int, float))
        or not math.isfinite(reading_time)
    ):
        reading_time = 5

    return ContentAnalysis(
        key_topics=_string_list(parsed["keyTopics"]),
        difficulty=difficulty,
        learning_objectives=_string_list(parsed["learningObjectives"]),
        concepts=_string_list(parsed["concepts"]),
        estimated_reading_time=max(0, round(reading_time)),
        content_type=content_type,
    )


async def analyze_with(
    provider: AIProvider,
    content: str,
    analysis_type: ContentAnalysisType,
) -> ContentAnalysis:
    """Run a content analysis through a provider's generate_text.

    Provider failures propagate as GenerationError; only the parse step is
    tolerant.
    """
    prompt = build_content_analysis_prompt(content, analysis_type)
    result = await provider.generate_text(
        prompt,
        GenerationOptions(response_format="json", system_prompt=ANALYST_SYSTEM_PROMPT),
    )
    return parse_content_analysis(result.content)


def sanitize_response(response: str) -> str:
    """Remove script/iframe blocks and javascript: URLs."""
    response = _SCRIPT_BLOCK.sub("", response)
    response = _IFRAME_BLOCK.sub("", response)
    response = _JS_SCHEME.sub("", response)
    return response.strip()


def validate_response_text(response: str) -> ValidationResult:
    """Basic validation of raw model output."""
    trimmed = response.strip()
    if not trimmed:
        return ValidationResult(is_valid=False, errors=["Empty response"])

    warnings = []
    if any(marker in trimmed for marker in _REFUSAL_MARKERS):
        warnings.append("Response indicates AI limitations")

    return ValidationResult(
        is_valid=True,
        warnings=warnings,
        sanitized_content=sanitize_response(trimmed),
    )
