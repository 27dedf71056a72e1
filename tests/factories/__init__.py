"""Test factories for creating test data."""

from tests.factories.llm import (
    FakeBackend,
    FakeClock,
    RecordingSleep,
    api_error,
    completion,
)

__all__ = [
    "FakeBackend",
    "FakeClock",
    "RecordingSleep",
    "api_error",
    "completion",
]
