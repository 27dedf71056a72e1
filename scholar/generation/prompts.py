"""Prompt building for structured generation.

Each builder assembles the sections of a user prompt from the generation
input. The system prompts carry the JSON schema the model must answer in;
validation.py is the authority on what is accepted.
"""

import json
from typing import Any

from scholar.generation.models import (
    AssessmentGenerationInput,
    QuestionRegenerationInput,
    RoadmapGenerationInput,
)

ROADMAP_SYSTEM_PROMPT = """You are an expert educational advisor. Create personalized learning roadmaps based on student profiles and available courses.

Respond with valid JSON in this format:
{
  "learning_path": [
    {
      "content_id": "course_or_lesson_id",
      "content_type": "course|lesson",
      "title": "Content Title",
      "order_index": 0,
      "estimated_time": 60,
      "prerequisites": ["id1", "id2"],
      "learning_objectives": ["objective1", "objective2"],
      "personalization_notes": "Why this is recommended for this student",
      "difficulty_level": "beginner|intermediate|advanced"
    }
  ],
  "total_estimated_time": 300,
  "personalization_reasoning": "Explanation of why this path was chosen",
  "alternative_paths": ["Brief description of alternative approaches"],
  "success_metrics": ["How to measure progress"]
}"""

_QUESTION_SCHEMA = """{
  "type": "multiple_choice|true_false|short_answer|essay",
  "question_text": "The question text",
  "options": ["option1", "option2", "option3", "option4"],
  "correct_answer": "correct answer or option",
  "explanation": "Why this is correct and others are wrong",
  "difficulty_level": 3,
  "topics": ["topic1", "topic2"],
  "points": 10
}"""

ASSESSMENT_SYSTEM_PROMPT = f"""You are an expert educational assessment creator. Generate high-quality assessment questions based on learning content.

Respond with valid JSON in this format:
{{
  "questions": [{_QUESTION_SCHEMA}],
  "assessment_metadata": {{
    "total_points": 100,
    "estimated_time": 30,
    "difficulty_distribution": {{"easy": 3, "medium": 4, "hard": 3}},
    "topic_coverage": ["topic1", "topic2", "topic3"]
  }}
}}

Include "options" for multiple_choice questions only. difficulty_level is an integer from 1 to 5."""

QUESTION_SYSTEM_PROMPT = f"""You are an expert educational assessment creator. Rewrite a single assessment question.

Respond with valid JSON in this format:
{{"question": {_QUESTION_SCHEMA}}}"""


def _as_json(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True, default=str)


# ============================================================================
# Roadmap
# ============================================================================


def build_roadmap_prompt(data: RoadmapGenerationInput) -> str:
    """Build the user prompt for a personalized roadmap.

    Args:
        data: Student profile, catalog and optional constraints

    Returns:
        Prompt text
    """
    sections = [
        "Create a personalized learning roadmap for a student with the following profile:",
        _build_profile_section(data),
        _build_catalog_section(data),
        _build_constraints_section(data),
        "\n".join([
            "Please create a personalized learning path that:",
            "1. Builds on the student's existing knowledge",
            "2. Addresses identified knowledge gaps",
            "3. Follows a logical progression from basic to advanced concepts",
            "4. Considers the student's learning preferences",
            "5. Provides realistic time estimates",
            "6. Includes clear learning objectives for each step",
            "Use the course ids above as content_id values.",
        ]),
    ]
    return "\n\n".join(section for section in sections if section)


def _build_profile_section(data: RoadmapGenerationInput) -> str:
    profile = data.student_profile
    completed = ", ".join(profile.completed_content) or "None"
    return "\n".join([
        "Student Profile:",
        f"- Knowledge Profile: {_as_json(profile.knowledge_profile)}",
        f"- Learning Preferences: {_as_json(profile.learning_preferences)}",
        f"- Completed Content: {completed}",
        f"- Assessment History: {len(profile.assessment_history)} previous assessments",
    ])


def _build_catalog_section(data: RoadmapGenerationInput) -> str:
    lines = ["Available Courses:"]
    for course in data.available_courses:
        level = course.difficulty_level or "unspecified"
        line = f"- [{course.id}] {course.title}: {course.description} ({level})"
        if course.estimated_duration:
            line += f", about {course.estimated_duration} minutes"
        lines.append(line)
    return "\n".join(lines)


def _build_constraints_section(data: RoadmapGenerationInput) -> str:
    lines = []
    if data.target_skills:
        lines.append(f"Target Skills: {', '.join(data.target_skills)}")
    if data.time_constraints:
        lines.append(f"Time Constraints: {data.time_constraints.hours_per_week:g} hours/week")
        if data.time_constraints.target_completion_date:
            lines.append(
                f"Target Completion Date: {data.time_constraints.target_completion_date}"
            )
    return "\n".join(lines)


# ============================================================================
# Assessment
# ============================================================================


def build_assessment_prompt(data: AssessmentGenerationInput) -> str:
    """Build the user prompt for an assessment.

    Args:
        data: Content blocks, objectives and question requirements

    Returns:
        Prompt text
    """
    content = "\n\n".join(
        f"{block.type}: {text}" for block in data.content_blocks if (text := block.as_text())
    )
    objectives = "\n".join(f"- {objective}" for objective in data.learning_objectives)

    sections = [
        "Generate an assessment based on the following learning content:",
        f"Content to Assess:\n{content or 'No content provided'}",
        f"Learning Objectives:\n{objectives}" if objectives else "",
        "\n".join([
            "Assessment Requirements:",
            f"- Difficulty Level: {data.difficulty}",
            f"- Question Types: {', '.join(data.question_types)}",
            f"- Number of Questions: {data.question_count}",
        ]),
        "\n".join([
            "Please create questions that:",
            "1. Test understanding of key concepts from the content",
            f"2. Include a mix of difficulty levels appropriate for {data.difficulty} level",
            "3. Cover all major learning objectives",
            "4. Provide clear explanations for correct answers",
            "5. Are free from bias and culturally sensitive",
        ]),
    ]
    return "\n\n".join(section for section in sections if section)


def build_question_prompt(data: QuestionRegenerationInput) -> str:
    """Build the user prompt for regenerating one question."""
    original = data.question
    lines = [
        "Rewrite the following assessment question.",
        "",
        "Original Question:",
        _as_json(original.model_dump(exclude={"id"})),
        "",
        f"Keep the question type: {original.type}",
    ]
    if data.reason:
        lines.append(f"Reason for regeneration: {data.reason}")
    if data.focus_area:
        lines.append(f"Focus area: {data.focus_area}")
    if data.difficulty:
        lines.append(f"Target difficulty: {data.difficulty}")
    return "\n".join(lines)
