"""OpenRouter provider access through Agno.

Responsibilities:
    - Provider configuration from environment
    - Model id resolution (request, configured default, fallback)
    - Streaming reply text for a conversation

Maintains clean separation from the HTTP layer.
"""

from openrouter_chat.provider.config import ProviderConfig, get_provider_config
from openrouter_chat.provider.service import ProviderService, get_provider_service

__all__ = ["ProviderConfig", "ProviderService", "get_provider_config", "get_provider_service"]
