"""External AI services: language-model providers."""

from scholar.providers.llm import AIProvider, FallbackProvider, OpenAIProvider

__all__ = ["AIProvider", "FallbackProvider", "OpenAIProvider"]
