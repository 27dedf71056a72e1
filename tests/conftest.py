"""Shared test fixtures for the Scholar test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from scholar.config.models.providers import AIServiceConfig, RateLimitConfig
from scholar.generation.models import AssessmentGenerationInput, RoadmapGenerationInput
from tests.factories.llm import FakeClock, RecordingSleep


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test.

    This ensures test isolation for configuration tests.
    """
    from scholar.config import get_settings
    from scholar.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo setup_logging after each test.

    setup_logging binds the current stderr, which pytest closes once a
    capturing test ends.
    """
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock() -> FakeClock:
    """A clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def no_sleep() -> RecordingSleep:
    """Zero-duration sleep that records its delays."""
    return RecordingSleep()


@pytest.fixture
def remote_config() -> AIServiceConfig:
    """Remote provider configuration with a test key."""
    return AIServiceConfig(
        provider="openai",
        api_key="sk-test-key-0000",
        base_url="https://llm.test/v1",
        rate_limiting=RateLimitConfig(requests_per_minute=60, tokens_per_minute=90_000),
    )


@pytest.fixture
def assessment_input() -> AssessmentGenerationInput:
    """Ten mixed questions over two objectives."""
    return AssessmentGenerationInput(
        content_blocks=[
            {"type": "text", "content": "Photosynthesis converts light into chemical energy."},
        ],
        learning_objectives=["Photosynthesis", "Cell respiration"],
        difficulty="intermediate",
        question_types=["multiple_choice", "true_false"],
        question_count=10,
    )


@pytest.fixture
def roadmap_input() -> RoadmapGenerationInput:
    """A two-course catalog for a student with some history."""
    return RoadmapGenerationInput(
        student_profile={
            "knowledge_profile": {"algebra": 0.8},
            "learning_preferences": {"pace": "steady"},
            "completed_content": ["intro-101"],
        },
        available_courses=[
            {
                "id": "alg-201",
                "title": "Algebra II",
                "description": "Polynomials and functions",
                "difficulty_level": "intermediate",
                "estimated_duration": 300,
                "learning_objectives": ["Factor polynomials"],
            },
            {"id": "calc-101", "title": "Calculus I", "description": "Limits"},
        ],
        target_skills=["calculus"],
        time_constraints={"hours_per_week": 5},
    )
