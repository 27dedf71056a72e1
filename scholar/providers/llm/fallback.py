"""Local, deterministic provider used when the remote backend is unavailable.

Never touches the network. Text generation returns a fixed notice; content
analysis uses word-frequency heuristics so callers still get a usable,
fully-populated ContentAnalysis.
"""

import json
import math
import re
from collections import Counter

from scholar.providers.llm.analysis import default_content_analysis, validate_response_text
from scholar.providers.llm.base import (
    ContentAnalysis,
    ContentAnalysisType,
    ContentType,
    Difficulty,
    GenerationOptions,
    GenerationResult,
    ValidationResult,
)

FALLBACK_MODEL = "fallback"
FALLBACK_NOTICE = (
    "AI generation is temporarily unavailable. "
    "This response was produced by the local fallback system."
)
WORDS_PER_MINUTE = 200
MAX_TOPICS = 5

_WORD = re.compile(r"[a-z][a-z'\-]+")

_STOPWORDS = frozenset({
    "about", "after", "also", "although", "because", "been", "before", "being",
    "between", "both", "can", "could", "does", "each", "even", "every", "first",
    "from", "have", "here", "into", "just", "like", "made", "make", "many",
    "more", "most", "much", "must", "only", "other", "over", "same", "should",
    "some", "such", "than", "that", "their", "them", "then", "there", "these",
    "they", "this", "those", "through", "under", "used", "using", "very", "what",
    "when", "where", "which", "while", "will", "with", "within", "without",
    "would", "your", "you", "the", "and", "for", "are", "was", "were", "its",
    "our", "has", "had", "how", "why", "who", "not", "all", "any", "may",
})

_PRACTICAL_MARKERS = frozenset({
    "example", "examples", "exercise", "exercises", "practice", "build",
    "implement", "step", "steps", "try", "code", "lab", "project", "hands-on",
})

_THEORETICAL_MARKERS = frozenset({
    "theory", "theories", "concept", "concepts", "principle", "principles",
    "definition", "definitions", "theorem", "framework", "model", "models",
    "hypothesis",
})


def _difficulty_for(words: list[str]) -> Difficulty:
    average = sum(len(word) for word in words) / len(words)
    if average < 5.0:
        return "beginner"
    if average < 6.5:
        return "intermediate"
    return "advanced"


def _content_type_for(words: list[str]) -> ContentType:
    practical = sum(1 for word in words if word in _PRACTICAL_MARKERS)
    theoretical = sum(1 for word in words if word in _THEORETICAL_MARKERS)
    if practical > 2 * theoretical:
        return "practical"
    if theoretical > 2 * practical:
        return "theoretical"
    return "mixed"


def analyze_locally(content: str) -> ContentAnalysis:
    """Heuristic analysis of content without calling a model."""
    words = _WORD.findall(content.lower())
    candidates = [word for word in words if len(word) >= 4 and word not in _STOPWORDS]
    if not candidates:
        return default_content_analysis()

    topics = [word.title() for word, _ in Counter(candidates).most_common(MAX_TOPICS)]

    return ContentAnalysis(
        key_topics=topics,
        difficulty=_difficulty_for(words),
        learning_objectives=[f"Understand {topic}" for topic in topics[:3]],
        concepts=topics,
        estimated_reading_time=max(1, math.ceil(len(words) / WORDS_PER_MINUTE)),
        content_type=_content_type_for(words),
    )


class FallbackProvider:
    """Always-available provider with deterministic output."""

    @property
    def name(self) -> str:
        """Return the provider name."""
        return "fallback"

    async def generate_text(
        self, prompt: str, options: GenerationOptions | None = None  # noqa: ARG002
    ) -> GenerationResult:
        """Return the fallback notice (as a JSON object when JSON is requested)."""
        options = options or GenerationOptions()
        if options.response_format == "json":
            content = json.dumps({"fallback": True, "message": FALLBACK_NOTICE})
        else:
            content = FALLBACK_NOTICE

        return GenerationResult(
            content=content,
            model=FALLBACK_MODEL,
            finish_reason="stop",
            usage=None,
            provider=self.name,
        )

    async def analyze_content(
        self, content: str, analysis_type: ContentAnalysisType  # noqa: ARG002
    ) -> ContentAnalysis:
        """Analyze content with local heuristics."""
        return analyze_locally(content)

    async def validate_response(self, response: str) -> ValidationResult:
        """Validate raw response text."""
        return validate_response_text(response)

    async def aclose(self) -> None:
        """Nothing to release."""
