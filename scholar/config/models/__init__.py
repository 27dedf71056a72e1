"""Configuration model exports.

    from scholar.config.models import AIServiceConfig, RateLimitConfig
"""

from scholar.config.models.observability import LoggingConfig, ObservabilityConfig
from scholar.config.models.providers import (
    AIServiceConfig,
    ProviderName,
    RateLimitConfig,
)

__all__ = [
    "AIServiceConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "ProviderName",
    "RateLimitConfig",
]
