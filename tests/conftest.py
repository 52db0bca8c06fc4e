"""Pytest fixtures and shared test configuration.

Fixtures:
    - fake_transport: Scripted transport for the conversation state machine
    - fake_provider: Scripted provider service for the chat endpoint
    - async_client: HTTPX client bound to the app with the fake provider

No fixture touches the network.
"""

import asyncio
from collections.abc import AsyncGenerator, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from openrouter_chat.api.app import create_app
from openrouter_chat.errors import AuthenticationError, TransportError
from openrouter_chat.models.conversation import Message, StreamFragment, WireMessage
from openrouter_chat.provider.config import ProviderConfig
from openrouter_chat.provider.service import ProviderService, get_provider_service


class FakeTransport:
    """Transport that replays scripted fragments.

    Attributes:
        fragments: Text deltas to yield, in order.
        error: Raised after the fragments when set.
        gate: When set, the stream waits on it before each fragment.
        calls: (history, model_id) for every send.
        closed: Number of streams whose cleanup ran.
    """

    def __init__(
        self,
        fragments: Sequence[str] = (),
        error: TransportError | None = None,
    ) -> None:
        self.fragments = list(fragments)
        self.error = error
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[tuple[Message, ...], str]] = []
        self.closed = 0

    async def send(
        self, history: Sequence[Message], model_id: str
    ) -> AsyncGenerator[StreamFragment]:
        self.calls.append((tuple(history), model_id))
        try:
            for text in self.fragments:
                gate = self.gate
                if gate is not None:
                    await gate.wait()
                    gate.clear()
                yield StreamFragment(text=text)
            if self.error is not None:
                raise self.error
            yield StreamFragment(done=True)
        finally:
            self.closed += 1


class FakeProviderService(ProviderService):
    """Provider service that streams scripted chunks instead of calling Agno."""

    def __init__(
        self,
        chunks: Sequence[str] = ("Hello", " there"),
        error: Exception | None = None,
        config: ProviderConfig | None = None,
    ) -> None:
        super().__init__(config or ProviderConfig(api_key="sk-test", default_model=None))
        self.chunks = list(chunks)
        self.error = error
        self.calls: list[tuple[list[WireMessage], str]] = []

    async def stream_reply(
        self, messages: list[WireMessage], model_id: str
    ) -> AsyncGenerator[str]:
        self.calls.append((messages, model_id))
        if not self.config.has_credential:
            raise AuthenticationError()
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Transport replying "Hello there" in two fragments."""
    return FakeTransport(["Hello", " there"])


@pytest.fixture
def fake_provider() -> FakeProviderService:
    return FakeProviderService()


@pytest.fixture
async def async_client(fake_provider: FakeProviderService) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        AsyncClient bound to a fresh app whose provider is the fake.
    """
    app = create_app()
    app.dependency_overrides[get_provider_service] = lambda: fake_provider
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
