"""Unit tests for structured-generation prompts."""

from scholar.generation.models import (
    AssessmentGenerationInput,
    GeneratedQuestion,
    QuestionRegenerationInput,
    RoadmapGenerationInput,
)
from scholar.generation.prompts import (
    ASSESSMENT_SYSTEM_PROMPT,
    ROADMAP_SYSTEM_PROMPT,
    build_assessment_prompt,
    build_question_prompt,
    build_roadmap_prompt,
)


class TestRoadmapPrompt:
    """build_roadmap_prompt."""

    def test_includes_profile_catalog_and_constraints(
        self, roadmap_input: RoadmapGenerationInput
    ) -> None:
        """All parts of the input reach the prompt."""
        prompt = build_roadmap_prompt(roadmap_input)
        assert "[alg-201] Algebra II" in prompt
        assert "Completed Content: intro-101" in prompt
        assert "Target Skills: calculus" in prompt
        assert "5 hours/week" in prompt

    def test_optional_sections_omitted(self) -> None:
        """Absent constraints leave no empty headings."""
        data = RoadmapGenerationInput(available_courses=[{"id": "c", "title": "C"}])
        prompt = build_roadmap_prompt(data)
        assert "Target Skills" not in prompt
        assert "Completed Content: None" in prompt

    def test_system_prompt_carries_schema(self) -> None:
        """The roadmap system prompt names the required fields."""
        for field in ("learning_path", "content_id", "total_estimated_time"):
            assert field in ROADMAP_SYSTEM_PROMPT


class TestAssessmentPrompt:
    """build_assessment_prompt."""

    def test_includes_requirements(self, assessment_input: AssessmentGenerationInput) -> None:
        """Question types, count and difficulty are stated."""
        prompt = build_assessment_prompt(assessment_input)
        assert "Question Types: multiple_choice, true_false" in prompt
        assert "Number of Questions: 10" in prompt
        assert "- Photosynthesis" in prompt
        assert "text: Photosynthesis converts light" in prompt

    def test_structured_blocks_flattened(self) -> None:
        """Structured content blocks are rendered as text."""
        data = AssessmentGenerationInput(
            content_blocks=[
                {"type": "image", "content": {"alt_text": "A leaf cell"}},
                {"type": "rich_text", "content": {"plain_text": "Chlorophyll absorbs light"}},
            ],
            question_types=["essay"],
            question_count=1,
        )
        prompt = build_assessment_prompt(data)
        assert "Image: A leaf cell" in prompt
        assert "Chlorophyll absorbs light" in prompt

    def test_system_prompt_carries_schema(self) -> None:
        """The assessment system prompt is valid template text."""
        assert '"questions"' in ASSESSMENT_SYSTEM_PROMPT
        assert "{{" not in ASSESSMENT_SYSTEM_PROMPT


class TestQuestionPrompt:
    """build_question_prompt."""

    def test_includes_original_and_guidance(self) -> None:
        """The original question and regeneration hints are included."""
        question = GeneratedQuestion(
            type="essay", question_text="Discuss osmosis.", correct_answer="..."
        )
        prompt = build_question_prompt(
            QuestionRegenerationInput(question=question, reason="Too vague", focus_area="Cells")
        )
        assert "Discuss osmosis." in prompt
        assert "Keep the question type: essay" in prompt
        assert "Too vague" in prompt
        assert "Focus area: Cells" in prompt
