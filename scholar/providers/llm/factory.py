"""Provider selection from configuration."""

from typing import Any

from scholar.config.models.providers import AIServiceConfig
from scholar.observability.logging import get_logger
from scholar.providers.llm.base import AIProvider
from scholar.providers.llm.fallback import FallbackProvider
from scholar.providers.llm.openai import OpenAIProvider

logger = get_logger(__name__)


def create_provider(
    config: AIServiceConfig,
    fallback: FallbackProvider,
    **remote_options: Any,
) -> AIProvider:
    """Build the active provider for a configuration.

    Returns the given fallback instance when the configuration selects it,
    when no API key is configured (unless allow_missing_key is set), or when
    the provider has no remote implementation.

    Args:
        config: Service configuration
        fallback: The service's fallback provider
        **remote_options: Extra keyword arguments for the remote provider
            (client, sleep, jitter)
    """
    if config.provider in ("fallback", "local"):
        return fallback

    if not config.has_api_key and not config.allow_missing_key:
        logger.warning("ai_api_key_missing_using_fallback", provider=config.provider)
        return fallback

    if config.provider == "openai":
        api_key = config.api_key.get_secret_value() if config.api_key else None
        return OpenAIProvider(
            api_key=api_key,
            model=config.model,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
            **remote_options,
        )

    logger.warning("ai_provider_unsupported_using_fallback", provider=config.provider)
    return fallback
