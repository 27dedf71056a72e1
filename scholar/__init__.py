"""Scholar - AI generation orchestration for a learning platform."""

__version__ = "0.1.0"
