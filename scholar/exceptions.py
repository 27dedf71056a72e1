"""Exception hierarchy for the generation core.

All errors raised by scholar inherit from ScholarError so the web layer can
map them with a single handler.
"""


class ScholarError(Exception):
    """Base exception for all scholar errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ScholarError):
    """Raised when the service cannot be built from its configuration."""


class SchemaValidationError(ScholarError):
    """Raised when model output does not satisfy a generated-artifact schema.

    `index` points at the offending item (question or learning-path step)
    when the failure is item-level.
    """

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index
