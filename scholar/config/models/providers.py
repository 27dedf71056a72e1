"""AI provider configuration models."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr

ProviderName = Literal["openai", "anthropic", "local", "fallback"]


class RateLimitConfig(BaseModel):
    """Admission-control budget for one AI service."""

    requests_per_minute: int = Field(
        default=60,
        gt=0,
        description="Maximum recorded requests in any 60s window",
    )
    tokens_per_minute: int = Field(
        default=90_000,
        gt=0,
        description="Maximum recorded tokens in any 60s window",
    )
    burst_limit: int | None = Field(
        default=None,
        gt=0,
        description="Maximum requests in any 10s window (default: 10% of RPM)",
    )


class AIServiceConfig(BaseModel):
    """Configuration for the AI generation service."""

    provider: ProviderName = Field(
        default="openai",
        description="Active provider",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key (prefer env var)",
    )
    model: str = Field(
        default="gpt-4",
        description="Model identifier",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Chat-completions API base URL",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Total attempts per remote call",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-attempt request timeout in seconds",
    )
    allow_missing_key: bool = Field(
        default=False,
        description="Build the remote provider even without an API key (development)",
    )
    rate_limiting: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Admission-control budget",
    )

    @property
    def has_api_key(self) -> bool:
        """Whether a non-empty API key is configured."""
        return bool(self.api_key and self.api_key.get_secret_value())
