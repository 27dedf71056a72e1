"""AI generation orchestration.

- AIService: admission, provider calls, fallbacks and structured generation
- RateLimiter: sliding-window request/token budget
- Validation: tolerant parse-and-default of model output
- Fallback generators: deterministic local artifacts
"""

from scholar.generation.fallback import (
    generate_fallback_assessment,
    generate_fallback_question,
    generate_fallback_roadmap,
)
from scholar.generation.models import (
    AssessmentGenerationInput,
    AssessmentMetadata,
    ContentBlock,
    CourseSummary,
    GeneratedAssessment,
    GeneratedQuestion,
    GeneratedRoadmap,
    LearningPathItem,
    ParseFailure,
    Parsed,
    QuestionRegenerationInput,
    RoadmapGenerationInput,
    ServiceStatus,
    StudentProfile,
    TimeConstraints,
)
from scholar.generation.rate_limit import RateLimitDecision, RateLimiter, RateLimitStats
from scholar.generation.service import AIService, create_ai_service, estimate_tokens
from scholar.generation.validation import (
    parse_assessment,
    parse_question,
    parse_roadmap,
    validate_assessment_data,
    validate_roadmap_data,
)

__all__ = [
    # Service
    "AIService",
    "create_ai_service",
    "estimate_tokens",
    # Rate limiting
    "RateLimiter",
    "RateLimitDecision",
    "RateLimitStats",
    # Inputs
    "AssessmentGenerationInput",
    "ContentBlock",
    "CourseSummary",
    "QuestionRegenerationInput",
    "RoadmapGenerationInput",
    "StudentProfile",
    "TimeConstraints",
    # Artifacts
    "AssessmentMetadata",
    "GeneratedAssessment",
    "GeneratedQuestion",
    "GeneratedRoadmap",
    "LearningPathItem",
    "ServiceStatus",
    # Parsing
    "Parsed",
    "ParseFailure",
    "parse_assessment",
    "parse_question",
    "parse_roadmap",
    "validate_assessment_data",
    "validate_roadmap_data",
    # Local generators
    "generate_fallback_assessment",
    "generate_fallback_question",
    "generate_fallback_roadmap",
]
