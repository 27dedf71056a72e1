"""Validation and defaulting of model-generated assessments and roadmaps.

Identity fields (question type/text/answer, learning-path id/type/title) are
required: a missing one raises SchemaValidationError naming the item index.
Descriptive fields are repaired or defaulted, never rejected.

The parse_* functions wrap JSON decoding plus validation into a
Parsed | ParseFailure outcome and never raise.
"""

import json
import math
from typing import Any

from pydantic import ValidationError

from scholar.exceptions import SchemaValidationError
from scholar.generation.models import (
    AssessmentMetadata,
    GeneratedAssessment,
    GeneratedQuestion,
    GeneratedRoadmap,
    LearningPathItem,
    ParseFailure,
    Parsed,
)
from scholar.providers.llm.analysis import extract_json_text

QUESTION_REQUIRED_FIELDS = ("type", "question_text", "correct_answer")
PATH_ITEM_REQUIRED_FIELDS = ("content_id", "content_type", "title")

DEFAULT_EXPLANATION = "No explanation provided"
DEFAULT_QUESTION_DIFFICULTY = 3
DEFAULT_POINTS = 10
DEFAULT_STEP_MINUTES = 60
DEFAULT_STEP_DIFFICULTY = "intermediate"

_DIFFICULTIES = ("beginner", "intermediate", "advanced")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_number(value: Any) -> bool:
    """Finite int or float; NaN and Infinity count as missing."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value if not _is_blank(item)]


def _first_error(error: ValidationError) -> str:
    details = error.errors()[0]
    location = ".".join(str(part) for part in details.get("loc", ()))
    return f"{location}: {details.get('msg', 'invalid value')}"


# ============================================================================
# Assessments
# ============================================================================


def validate_question(raw: Any, index: int) -> GeneratedQuestion:
    """Validate one raw question, defaulting descriptive fields.

    Raises:
        SchemaValidationError: Missing identity field, multiple-choice
            question without options, or unknown question type
    """
    if not isinstance(raw, dict):
        raise SchemaValidationError(
            f"Invalid question at index {index}: expected an object", index=index
        )

    missing = [name for name in QUESTION_REQUIRED_FIELDS if _is_blank(raw.get(name))]
    if missing:
        raise SchemaValidationError(
            f"Invalid question at index {index}: missing required fields {missing}",
            index=index,
        )

    options = _string_list(raw["options"]) if isinstance(raw.get("options"), list) else None
    if raw["type"] == "multiple_choice" and not options:
        raise SchemaValidationError(
            f"Multiple choice question at index {index} missing options", index=index
        )

    difficulty = raw.get("difficulty_level")
    points = raw.get("points")
    explanation = raw.get("explanation")

    question = {
        **raw,
        "correct_answer": _as_text(raw["correct_answer"]),
        "options": options,
        "explanation": explanation if isinstance(explanation, str) and explanation
        else DEFAULT_EXPLANATION,
        "difficulty_level": min(5, max(1, round(difficulty))) if _is_number(difficulty)
        else DEFAULT_QUESTION_DIFFICULTY,
        "topics": _string_list(raw.get("topics")),
        "points": max(0, round(points)) if _is_number(points) else DEFAULT_POINTS,
    }
    if _is_blank(question.get("id")):
        question.pop("id", None)
    else:
        question["id"] = _as_text(question["id"])

    try:
        return GeneratedQuestion.model_validate(question)
    except ValidationError as e:
        raise SchemaValidationError(
            f"Invalid question at index {index}: {_first_error(e)}", index=index
        ) from e


def validate_assessment_data(data: Any) -> GeneratedAssessment:
    """Validate a raw assessment payload.

    `assessment_metadata` is derived from the questions when absent; fields
    present in the payload override the derived values when they validate.

    Raises:
        SchemaValidationError: See validate_question, or no questions
    """
    if not isinstance(data, dict):
        raise SchemaValidationError("Invalid assessment data: expected a JSON object")

    raw_questions = data.get("questions")
    if not isinstance(raw_questions, list) or not raw_questions:
        raise SchemaValidationError("Invalid assessment data: missing or invalid questions")

    questions = [validate_question(raw, index) for index, raw in enumerate(raw_questions)]
    metadata = AssessmentMetadata.from_questions(questions)

    raw_metadata = data.get("assessment_metadata")
    if isinstance(raw_metadata, dict):
        try:
            metadata = AssessmentMetadata.model_validate(
                {**metadata.model_dump(), **raw_metadata}
            )
        except ValidationError:
            pass  # keep the derived metadata

    return GeneratedAssessment(questions=questions, assessment_metadata=metadata)


# ============================================================================
# Roadmaps
# ============================================================================


def validate_path_item(raw: Any, index: int) -> LearningPathItem:
    """Validate one raw learning-path step, defaulting descriptive fields.

    Raises:
        SchemaValidationError: Missing content_id, content_type or title
    """
    if not isinstance(raw, dict):
        raise SchemaValidationError(
            f"Invalid learning path item at index {index}: expected an object",
            index=index,
        )

    missing = [name for name in PATH_ITEM_REQUIRED_FIELDS if _is_blank(raw.get(name))]
    if missing:
        raise SchemaValidationError(
            f"Invalid learning path item at index {index}: missing required fields {missing}",
            index=index,
        )

    order_index = raw.get("order_index")
    estimated_time = raw.get("estimated_time")
    notes = raw.get("personalization_notes")
    difficulty = raw.get("difficulty_level")

    item = {
        **raw,
        "content_id": _as_text(raw["content_id"]),
        "content_type": _as_text(raw["content_type"]),
        "title": _as_text(raw["title"]),
        "order_index": int(order_index) if _is_number(order_index) else index,
        "estimated_time": max(0, round(estimated_time)) if _is_number(estimated_time)
        else DEFAULT_STEP_MINUTES,
        "prerequisites": _string_list(raw.get("prerequisites")),
        "learning_objectives": _string_list(raw.get("learning_objectives")),
        "personalization_notes": notes if isinstance(notes, str) else "",
        "difficulty_level": difficulty if difficulty in _DIFFICULTIES
        else DEFAULT_STEP_DIFFICULTY,
    }

    try:
        return LearningPathItem.model_validate(item)
    except ValidationError as e:
        raise SchemaValidationError(
            f"Invalid learning path item at index {index}: {_first_error(e)}", index=index
        ) from e


def validate_roadmap_data(data: Any) -> GeneratedRoadmap:
    """Validate a raw roadmap payload.

    Raises:
        SchemaValidationError: See validate_path_item, or no learning path
    """
    if not isinstance(data, dict):
        raise SchemaValidationError("Invalid roadmap data: expected a JSON object")

    raw_path = data.get("learning_path")
    if not isinstance(raw_path, list) or not raw_path:
        raise SchemaValidationError(
            "Invalid roadmap data: missing or invalid learning_path"
        )

    path = [validate_path_item(raw, index) for index, raw in enumerate(raw_path)]

    total = data.get("total_estimated_time")
    reasoning = data.get("personalization_reasoning")

    try:
        return GeneratedRoadmap.model_validate({
            **data,
            "learning_path": path,
            "total_estimated_time": max(0, round(total)) if _is_number(total)
            else sum(item.estimated_time for item in path),
            "personalization_reasoning": reasoning if isinstance(reasoning, str) else "",
            "alternative_paths": _string_list(data.get("alternative_paths")),
            "success_metrics": _string_list(data.get("success_metrics")),
        })
    except ValidationError as e:
        raise SchemaValidationError(f"Invalid roadmap data: {_first_error(e)}") from e


# ============================================================================
# Parse outcomes
# ============================================================================


def _decode(text: str) -> Any | ParseFailure:
    try:
        return json.loads(extract_json_text(text))
    except json.JSONDecodeError as e:
        return ParseFailure(stage="json", reason=str(e))


def parse_assessment(text: str) -> Parsed[GeneratedAssessment] | ParseFailure:
    """Decode and validate an assessment response."""
    data = _decode(text)
    if isinstance(data, ParseFailure):
        return data
    try:
        return Parsed(validate_assessment_data(data))
    except SchemaValidationError as e:
        return ParseFailure(stage="schema", reason=e.message, index=e.index)


def parse_roadmap(text: str) -> Parsed[GeneratedRoadmap] | ParseFailure:
    """Decode and validate a roadmap response."""
    data = _decode(text)
    if isinstance(data, ParseFailure):
        return data
    try:
        return Parsed(validate_roadmap_data(data))
    except SchemaValidationError as e:
        return ParseFailure(stage="schema", reason=e.message, index=e.index)


def parse_question(text: str) -> Parsed[GeneratedQuestion] | ParseFailure:
    """Decode and validate a single-question response.

    Accepts either {"question": {...}} or the bare question object.
    """
    data = _decode(text)
    if isinstance(data, ParseFailure):
        return data
    if isinstance(data, dict) and isinstance(data.get("question"), dict):
        data = data["question"]
    try:
        return Parsed(validate_question(data, 0))
    except SchemaValidationError as e:
        return ParseFailure(stage="schema", reason=e.message, index=e.index)
