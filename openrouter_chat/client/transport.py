"""Streaming transport to the chat endpoint.

One ``send`` call is one outbound POST. The response body is exposed as a
lazy, single-pass async iterator of StreamFragment objects. The connection
lives inside an ``async with`` block, so closing the iterator early (or
cancelling the task consuming it) releases the connection right away.

No retries are performed; retrying is a fresh ``send`` by the caller.

Any status outside 2xx is a failure, redirects included. Body text is decoded
leniently: invalid UTF-8 becomes U+FFFD. Only a body whose content-encoding
cannot be decoded, or one cut short by the server, maps to 502.
"""

import logging
import os
from collections.abc import AsyncGenerator, Sequence
from typing import Any

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from openrouter_chat.errors import TransportError, ValidationError
from openrouter_chat.models.conversation import Message, Role, StreamFragment, WireMessage
from openrouter_chat.prompts import SYSTEM_PROMPT
from openrouter_chat.provider.config import FALLBACK_MODEL

load_dotenv()

logger = logging.getLogger(__name__)


def default_endpoint() -> str:
    """Chat endpoint URL: ``CHAT_API_URL``, else /api/chat on the local ``PORT``."""
    explicit = os.getenv("CHAT_API_URL")
    if explicit:
        return explicit
    port = os.getenv("PORT", "8000")
    return f"http://localhost:{port}/api/chat"


class TransportConfig(BaseModel):
    """Configuration for the chat transport.

    Attributes:
        endpoint: Chat endpoint URL.
        default_model: Model id used when the caller does not pick one.
        api_key: Optional bearer credential sent with each request.
        timeout: Seconds to wait for connect and for each read.
        system_prompt: Instruction sent as the first message of every request.
    """

    endpoint: str = Field(default_factory=default_endpoint)
    default_model: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_MODEL") or FALLBACK_MODEL,
        min_length=1,
    )
    api_key: str | None = Field(default=None)
    timeout: float = Field(default=120.0, gt=0)
    system_prompt: str = Field(default=SYSTEM_PROMPT)


def _status_for(exc: httpx.HTTPError) -> int:
    if isinstance(exc, httpx.TimeoutException):
        return 504
    if isinstance(exc, httpx.DecodingError | httpx.RemoteProtocolError):
        return 502
    return 503


class ChatTransport:
    """Streams assistant replies from the chat endpoint.

    Supports async context manager protocol for cleanup of an owned client:
        async with ChatTransport(config) as transport:
            async for fragment in transport.send(history, model_id):
                ...
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Transport configuration. Loads from environment if not provided.
            client: Optional preconfigured HTTP client. When given, the caller
                    owns it and ``aclose`` leaves it open.
        """
        self._config = config or TransportConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    @property
    def config(self) -> TransportConfig:
        return self._config

    def build_payload(self, history: Sequence[Message], model_id: str) -> dict[str, Any]:
        """Serialize history into the endpoint's request body."""
        messages = [WireMessage(role=Role.SYSTEM, content=self._config.system_prompt)]
        messages.extend(WireMessage.from_message(message) for message in history)
        return {
            "model": model_id,
            "messages": [m.model_dump(mode="json") for m in messages],
        }

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "text/plain"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def send(
        self,
        history: Sequence[Message],
        model_id: str,
    ) -> AsyncGenerator[StreamFragment]:
        """Stream the assistant reply for ``history``.

        Args:
            history: Conversation so far; must end with a user message.
            model_id: Model identifier, validated by the endpoint.

        Yields:
            Text fragments in arrival order, then one ``done`` marker.

        Raises:
            ValidationError: If history is empty, does not end with a user
                message, or model_id is blank.
            TransportError: On non-2xx status, network failure, timeout, or a
                malformed or truncated body.
        """
        if not history:
            raise ValidationError("History must not be empty")
        if history[-1].role is not Role.USER:
            raise ValidationError("History must end with a user message")
        if not model_id or not model_id.strip():
            raise ValidationError("Model id must not be empty")

        payload = self.build_payload(history, model_id)
        try:
            async with self._client.stream(
                "POST",
                self._config.endpoint,
                json=payload,
                headers=self._headers(),
            ) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace").strip()
                    raise TransportError(response.status_code, body or response.reason_phrase)
                async for text in response.aiter_text():
                    if text:
                        yield StreamFragment(text=text)
        except httpx.HTTPError as e:
            logger.warning(f"Chat transport failed: {e!r}")
            raise TransportError(_status_for(e), f"Connection failed: {e}") from e
        yield StreamFragment(done=True)

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ChatTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
