"""Provider configuration with environment variable loading.

Pydantic-based configuration for the OpenRouter-backed chat agent.
The API key may be absent at startup: a missing credential is reported
per request as an authentication failure, not as a startup crash.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
FALLBACK_MODEL = "openai/gpt-4o-mini"


class ProviderConfig(BaseModel):
    """Configuration for the OpenRouter chat provider.

    Attributes:
        api_key: OpenRouter API key (empty when not configured).
        base_url: OpenAI-compatible API base URL.
        default_model: Model used when a request names none.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response (None for provider default).
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""),
        description="API key for OpenRouter",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_BASE_URL") or OPENROUTER_BASE_URL,
        description="OpenAI-compatible API base URL",
    )
    default_model: str | None = Field(
        default_factory=lambda: os.getenv("OPENROUTER_MODEL") or None,
        description="Default model identifier",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int | None = Field(
        default=None,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip surrounding whitespace so a blank key counts as missing."""
        return v.strip()

    @field_validator("default_model")
    @classmethod
    def blank_model_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    def resolve_model(self, requested: str | None = None) -> str:
        """Resolve the model id: request field, then default, then fallback."""
        if requested and requested.strip():
            return requested.strip()
        return self.default_model or FALLBACK_MODEL


def get_provider_config() -> ProviderConfig:
    """Create provider configuration from environment.

    Returns:
        Configured ProviderConfig instance.
    """
    return ProviderConfig()
