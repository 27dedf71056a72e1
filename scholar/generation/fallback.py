"""Deterministic local generators.

Used when the remote model is unavailable or returns something unusable.
Output is a pure function of the input: no randomness, no clock, so the
same input always yields the same artifact (ids included).
"""

import uuid

from scholar.generation.models import (
    AssessmentGenerationInput,
    AssessmentMetadata,
    GeneratedAssessment,
    GeneratedQuestion,
    GeneratedRoadmap,
    LearningPathItem,
    QuestionRegenerationInput,
    QuestionType,
    RoadmapGenerationInput,
)
from scholar.providers.llm.base import Difficulty

MAX_FALLBACK_QUESTIONS = 10
FALLBACK_QUESTION_POINTS = 10
DEFAULT_COURSE_MINUTES = 120
DEFAULT_TOPIC = "the course material"
FALLBACK_NOTES = "Generated by fallback system"

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "scholar/fallback-questions")

_DIFFICULTY_LEVELS: dict[Difficulty, int] = {
    "beginner": 2,
    "intermediate": 3,
    "advanced": 4,
}

# Generic templates per question type; {topic} is substituted.
_QUESTION_BANK: dict[QuestionType, list[dict]] = {
    "multiple_choice": [
        {
            "question_text": "Which of the following best shows an understanding of {topic}?",
            "options": [
                "Memorizing facts about {topic} without context",
                "Explaining {topic} and applying it to new situations",
                "Reading about {topic} once and moving on",
                "Studying {topic} only right before a test",
            ],
            "correct_answer": "Explaining {topic} and applying it to new situations",
            "explanation": "Understanding is shown by explaining an idea and transferring it "
            "to new contexts, not by recall alone.",
        },
        {
            "question_text": "What is the most effective way to retain what you learn about {topic}?",
            "options": [
                "Repetition without understanding",
                "Active practice with {topic}",
                "Passive rereading",
                "Cramming",
            ],
            "correct_answer": "Active practice with {topic}",
            "explanation": "Active engagement and practice lead to better retention than "
            "passive methods.",
        },
    ],
    "true_false": [
        {
            "question_text": "Applying {topic} to an unfamiliar problem shows deeper understanding "
            "than reciting its definition.",
            "correct_answer": "true",
            "explanation": "Transfer to new problems requires understanding, recitation does not.",
        },
        {
            "question_text": "Reading about {topic} once is enough to master it.",
            "correct_answer": "false",
            "explanation": "Mastery comes from spaced practice and review over time.",
        },
    ],
    "short_answer": [
        {
            "question_text": "Explain the key idea behind {topic} in your own words.",
            "correct_answer": "A clear explanation of {topic} that names its central idea.",
            "explanation": "Answers should restate the central idea of {topic} without "
            "copying the source text.",
        },
        {
            "question_text": "Describe one practical situation where {topic} applies.",
            "correct_answer": "A concrete example that correctly applies {topic}.",
            "explanation": "A good answer links {topic} to a realistic, specific situation.",
        },
    ],
    "essay": [
        {
            "question_text": "Discuss {topic} in depth. Explain how it connects to related "
            "concepts and how you would apply it in practice.",
            "correct_answer": "A structured discussion of {topic} covering its main ideas, "
            "its connections to related concepts and a worked application.",
            "explanation": "Strong essays define {topic}, relate it to other ideas and "
            "support claims with examples.",
        },
    ],
}


def _fill(template: dict, topic: str) -> dict:
    filled = {}
    for key, value in template.items():
        if isinstance(value, list):
            filled[key] = [item.format(topic=topic) for item in value]
        else:
            filled[key] = value.format(topic=topic)
    return filled


def _question_id(*parts: object) -> str:
    return str(uuid.uuid5(_ID_NAMESPACE, "/".join(str(part) for part in parts)))


def _build_question(
    question_type: QuestionType,
    variant: int,
    topic: str,
    difficulty: Difficulty,
    key: str,
) -> GeneratedQuestion:
    templates = _QUESTION_BANK[question_type]
    template = templates[variant % len(templates)]
    return GeneratedQuestion(
        id=_question_id(key, question_type, variant, topic),
        type=question_type,
        difficulty_level=_DIFFICULTY_LEVELS[difficulty],
        topics=[topic],
        points=FALLBACK_QUESTION_POINTS,
        **_fill(template, topic),
    )


def generate_fallback_assessment(data: AssessmentGenerationInput) -> GeneratedAssessment:
    """Build an assessment from the template bank.

    Produces min(question_count, 10) questions, cycling through the requested
    types and the learning objectives as topics.
    """
    count = min(data.question_count, MAX_FALLBACK_QUESTIONS)
    types = data.question_types
    topics = [objective for objective in data.learning_objectives if objective.strip()]
    if not topics:
        topics = [DEFAULT_TOPIC]

    questions = [
        _build_question(
            question_type=types[i % len(types)],
            variant=i // len(types),
            topic=topics[i % len(topics)],
            difficulty=data.difficulty,
            key=str(i),
        )
        for i in range(count)
    ]

    return GeneratedAssessment(
        questions=questions,
        assessment_metadata=AssessmentMetadata.from_questions(questions),
    )


def generate_fallback_question(data: QuestionRegenerationInput) -> GeneratedQuestion:
    """Build a replacement question of the original's type."""
    original = data.question
    topic = data.focus_area or (original.topics[0] if original.topics else DEFAULT_TOPIC)
    templates = _QUESTION_BANK[original.type]

    # Prefer a template whose text differs from the question being replaced
    variant = 0
    for i in range(len(templates)):
        if _fill(templates[i], topic)["question_text"] != original.question_text:
            variant = i
            break

    question = _build_question(
        question_type=original.type,
        variant=variant,
        topic=topic,
        difficulty=data.difficulty or "intermediate",
        key=f"regenerate/{original.id}",
    )
    if data.difficulty is None:
        question.difficulty_level = original.difficulty_level
    question.topics = original.topics or [topic]
    question.points = original.points
    return question


def generate_fallback_roadmap(data: RoadmapGenerationInput) -> GeneratedRoadmap:
    """Build a roadmap that visits every course in catalog order."""
    path = [
        LearningPathItem(
            content_id=course.id,
            content_type="course",
            title=course.title,
            order_index=index,
            estimated_time=course.estimated_duration or DEFAULT_COURSE_MINUTES,
            prerequisites=[],
            learning_objectives=course.learning_objectives or ["Complete the course"],
            personalization_notes=FALLBACK_NOTES,
            difficulty_level=course.difficulty_level or "intermediate",
        )
        for index, course in enumerate(data.available_courses)
    ]

    return GeneratedRoadmap(
        learning_path=path,
        total_estimated_time=sum(item.estimated_time for item in path),
        personalization_reasoning="Fallback roadmap based on available courses",
        alternative_paths=["Consider reviewing prerequisites if difficulty is too high"],
        success_metrics=["Course completion", "Assessment scores above 70%"],
    )
