"""Generation inputs, generated artifacts and parse outcomes.

Inputs arrive already parsed from the web layer. Generated artifacts are
always fully populated: validation assigns a concrete default to every
descriptive field so downstream consumers never branch on "missing".
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from scholar.generation.rate_limit import RateLimitStats
from scholar.providers.llm.base import Difficulty

T = TypeVar("T")

QuestionType = Literal["multiple_choice", "true_false", "short_answer", "essay"]

# Minutes per question used for assessment time estimates
MINUTES_PER_QUESTION = 4


# ============================================================================
# Inputs
# ============================================================================


class StudentProfile(BaseModel):
    """What is known about the student a roadmap is built for."""

    knowledge_profile: dict[str, Any] = Field(default_factory=dict)
    learning_preferences: dict[str, Any] = Field(default_factory=dict)
    completed_content: list[str] = Field(default_factory=list)
    assessment_history: list[dict[str, Any]] = Field(default_factory=list)


class CourseSummary(BaseModel):
    """A catalog entry available for a roadmap."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    description: str = ""
    difficulty_level: Difficulty | None = None
    estimated_duration: int | None = Field(default=None, description="Minutes")
    learning_objectives: list[str] | None = None


class TimeConstraints(BaseModel):
    """Student availability."""

    hours_per_week: float = Field(gt=0)
    target_completion_date: str | None = None


class RoadmapGenerationInput(BaseModel):
    """Input for personalized roadmap generation."""

    student_profile: StudentProfile = Field(default_factory=StudentProfile)
    available_courses: list[CourseSummary] = Field(min_length=1)
    target_skills: list[str] | None = None
    time_constraints: TimeConstraints | None = None


class ContentBlock(BaseModel):
    """A block of lesson content.

    `content` is either plain text or the block's structured payload.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    content: Any = ""

    def as_text(self) -> str:
        """Flatten the block into prompt text."""
        if isinstance(self.content, str):
            return self.content
        if not isinstance(self.content, dict):
            return str(self.content) if self.content is not None else ""

        payload = self.content
        if self.type == "rich_text":
            return str(payload.get("plain_text") or payload.get("html") or "")
        if self.type == "image":
            return f"Image: {payload.get('alt_text') or 'No description'}"
        if self.type == "video":
            return "Video content"
        if self.type == "file":
            return f"File: {payload.get('filename', '')}"
        if self.type == "youtube":
            return f"YouTube video: {payload.get('title', '')}"
        return ""


class AssessmentGenerationInput(BaseModel):
    """Input for assessment generation."""

    content_blocks: list[ContentBlock] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    difficulty: Difficulty = "intermediate"
    question_types: list[QuestionType] = Field(min_length=1)
    question_count: int = Field(ge=1)


# ============================================================================
# Generated artifacts
# ============================================================================


class GeneratedQuestion(BaseModel):
    """One assessment question."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: QuestionType
    question_text: str = Field(min_length=1)
    options: list[str] | None = None
    correct_answer: str = Field(min_length=1)
    explanation: str = "No explanation provided"
    difficulty_level: int = Field(default=3, ge=1, le=5)
    topics: list[str] = Field(default_factory=list)
    points: int = Field(default=10, ge=0)


class QuestionRegenerationInput(BaseModel):
    """Input for regenerating a single question."""

    question: GeneratedQuestion
    reason: str | None = None
    focus_area: str | None = None
    difficulty: Difficulty | None = None


class DifficultyDistribution(BaseModel):
    """Question counts per difficulty band."""

    easy: int = 0
    medium: int = 0
    hard: int = 0


class AssessmentMetadata(BaseModel):
    """Summary of an assessment."""

    model_config = ConfigDict(extra="allow")

    total_points: int
    estimated_time: int = Field(description="Minutes")
    difficulty_distribution: DifficultyDistribution = Field(
        default_factory=DifficultyDistribution
    )
    topic_coverage: list[str] = Field(default_factory=list)

    @classmethod
    def from_questions(cls, questions: list[GeneratedQuestion]) -> "AssessmentMetadata":
        """Derive metadata from a list of questions."""
        topics: list[str] = []
        for question in questions:
            for topic in question.topics:
                if topic not in topics:
                    topics.append(topic)

        return cls(
            total_points=sum(question.points for question in questions),
            estimated_time=len(questions) * MINUTES_PER_QUESTION,
            difficulty_distribution=DifficultyDistribution(
                easy=sum(1 for q in questions if q.difficulty_level <= 2),
                medium=sum(1 for q in questions if q.difficulty_level == 3),
                hard=sum(1 for q in questions if q.difficulty_level >= 4),
            ),
            topic_coverage=topics,
        )


class GeneratedAssessment(BaseModel):
    """A validated assessment."""

    questions: list[GeneratedQuestion] = Field(min_length=1)
    assessment_metadata: AssessmentMetadata


class LearningPathItem(BaseModel):
    """One step of a learning roadmap."""

    model_config = ConfigDict(extra="allow")

    content_id: str = Field(min_length=1)
    content_type: str = Field(min_length=1)
    title: str = Field(min_length=1)
    order_index: int
    estimated_time: int = Field(default=60, description="Minutes")
    prerequisites: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    personalization_notes: str = ""
    difficulty_level: Difficulty = "intermediate"


class GeneratedRoadmap(BaseModel):
    """A validated learning roadmap."""

    model_config = ConfigDict(extra="allow")

    learning_path: list[LearningPathItem] = Field(min_length=1)
    total_estimated_time: int = Field(description="Minutes")
    personalization_reasoning: str = ""
    alternative_paths: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)


# ============================================================================
# Parse outcomes
# ============================================================================


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Model output that parsed and validated."""

    value: T


@dataclass(frozen=True)
class ParseFailure:
    """Model output that failed to parse (`json`) or validate (`schema`)."""

    stage: Literal["json", "schema"]
    reason: str
    index: int | None = None


# ============================================================================
# Service status
# ============================================================================


class ServiceStatus(BaseModel):
    """Operator-facing snapshot of the AI service."""

    provider: str
    using_fallback: bool
    is_available: bool = True
    rate_limiting: RateLimitStats
    reset_at: datetime
    capabilities: dict[str, bool] = Field(default_factory=dict)
    checked_at: datetime
