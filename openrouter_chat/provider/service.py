"""Agno-backed provider service streaming chat replies from OpenRouter.

The server side of the chat endpoint. Wraps Agno's Agent bound to an
OpenRouter model and exposes a plain async stream of text chunks.

Architecture Decisions:

1. **Stateless agents** - Conversation history arrives with every request,
   so agents get no storage and no history settings. The client owns the
   conversation; the server only relays it.

2. **One agent per model id** - Requests may name any model. Agents are
   cached per model id so repeated requests reuse the same OpenRouter client.

3. **No instructions on the agent** - The system instruction travels as the
   first message of the request, so the agent must not add its own.

4. **Errors as TransportError** - Missing credentials, provider failures and
   error events in the stream all surface as TransportError so the HTTP layer
   maps them in one place.
"""

import logging
from collections.abc import AsyncGenerator

from agno.agent import Agent
from agno.exceptions import ModelProviderError
from agno.models.message import Message as AgnoMessage
from agno.models.openrouter import OpenRouter
from agno.run.agent import RunEvent

from openrouter_chat.errors import AuthenticationError, TransportError
from openrouter_chat.models.conversation import WireMessage
from openrouter_chat.provider.config import ProviderConfig, get_provider_config

logger = logging.getLogger(__name__)


class ProviderService:
    """Service streaming chat completions through an Agno agent.

    Wraps Agno's Agent with:
    - Per-model agent caching
    - Clean text-chunk streaming interface for the HTTP layer
    - Centralized error mapping to TransportError
    """

    def __init__(self, config: ProviderConfig | None = None) -> None:
        """Initialize the provider service.

        Args:
            config: Optional provider configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_provider_config()
        self._agents: dict[str, Agent] = {}

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def resolve_model(self, requested: str | None = None) -> str:
        return self._config.resolve_model(requested)

    def _create_agent(self, model_id: str) -> Agent:
        """Create an Agno agent for one model.

        Returns:
            Agent bound to an OpenRouter model, without storage or instructions.
        """
        model = OpenRouter(
            id=model_id,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )
        return Agent(model=model, telemetry=False)

    def _get_agent(self, model_id: str) -> Agent:
        agent = self._agents.get(model_id)
        if agent is None:
            agent = self._create_agent(model_id)
            self._agents[model_id] = agent
        return agent

    async def stream_reply(
        self,
        messages: list[WireMessage],
        model_id: str,
    ) -> AsyncGenerator[str]:
        """Stream reply text chunks for a conversation.

        Args:
            messages: Full conversation in wire format, system entry first.
            model_id: Resolved model identifier.

        Yields:
            Reply text chunks as they arrive.

        Raises:
            AuthenticationError: If no API key is configured.
            TransportError: If the provider fails before or during streaming.
        """
        if not self._config.has_credential:
            raise AuthenticationError()

        agent = self._get_agent(model_id)
        agno_messages = [AgnoMessage(role=m.role.value, content=m.content) for m in messages]

        try:
            async for event in agent.arun(agno_messages, stream=True):
                if event.event == RunEvent.run_error.value:
                    raise TransportError(502, str(event.content or "Provider stream failed"))
                if event.event == RunEvent.run_content.value and event.content:
                    yield str(event.content)
        except ModelProviderError as e:
            logger.error(f"Provider error for model {model_id}: {e}")
            raise TransportError(e.status_code, e.message) from e


# Module-level singleton instance
_provider_service: ProviderService | None = None


def get_provider_service() -> ProviderService:
    """Get or create the global provider service.

    Returns:
        The ProviderService instance.
    """
    global _provider_service
    if _provider_service is None:
        _provider_service = ProviderService()
    return _provider_service
