"""Conversation state machine folding streamed fragments into messages.

States and transitions:

    ready --submit--> submitted --first fragment--> streaming --done--> ready
      ^                   |                             |
      |                   +------ transport error ------+--> error
      +------------------- acknowledge_error -----------------+

``clear`` is allowed from any state and always lands in ``ready``.

The store is the only writer of the conversation. Every mutation notifies
subscribers with an immutable ChatState snapshot; the view layer re-derives
what it renders from that snapshot.

Cancellation: each submit runs its stream in a task tagged with the current
generation. ``clear`` bumps the generation and cancels the task, so fragments
that race the cancellation are dropped instead of applied. A cancelled
``submit`` caller and ``aclose`` do the same, seal any partial reply and
return to ``ready``.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import aclosing
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from openrouter_chat.errors import TransportError, ValidationError
from openrouter_chat.models.conversation import Message, RequestStatus, StreamFragment

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can stream a reply for a conversation."""

    def send(self, history: Sequence[Message], model_id: str) -> AsyncGenerator[StreamFragment]: ...


class ChatState(BaseModel):
    """Immutable snapshot handed to subscribers.

    Attributes:
        messages: Conversation in insertion order.
        status: Current request status.
        error: Failure surfaced while status is ``error``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    messages: tuple[Message, ...] = ()
    status: RequestStatus = RequestStatus.READY
    error: TransportError | None = None


Listener = Callable[[ChatState], None]


class ConversationStore:
    """Owns one conversation and its request lifecycle."""

    def __init__(self, transport: Transport, model_id: str) -> None:
        self._transport = transport
        self.model_id = model_id
        self._messages: list[Message] = []
        self._status = RequestStatus.READY
        self._error: TransportError | None = None
        self._listeners: list[Listener] = []
        self._generation = 0
        self._stream_task: asyncio.Task[None] | None = None

    # -- read side ---------------------------------------------------------

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def error(self) -> TransportError | None:
        return self._error

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def open_message(self) -> Message | None:
        """The assistant message still receiving fragments, if any."""
        if self._messages and self._messages[-1].is_open:
            return self._messages[-1]
        return None

    def snapshot(self) -> ChatState:
        return ChatState(messages=self.messages, status=self._status, error=self._error)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every mutation.

        Returns:
            A function that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)

    # -- write side --------------------------------------------------------

    async def submit(self, user_text: str) -> None:
        """Send a user message and stream the assistant reply.

        The user message is appended and published before the transport is
        called. Returns once the reply completed, failed, or was cancelled.

        Raises:
            ValidationError: If the text is blank or a request is in flight.
        """
        text = user_text.strip()
        if not text:
            raise ValidationError("Message must not be empty")
        if self._status is not RequestStatus.READY:
            raise ValidationError(f"Cannot submit while status is {self._status.value}")
        if not self.model_id or not self.model_id.strip():
            raise ValidationError("Model id must not be empty")

        self._messages.append(Message.user(text))
        logger.info(f"Submitting turn {len(self._messages)} to {self.model_id}")
        self._status = RequestStatus.SUBMITTED
        self._notify()

        history = tuple(self._messages)
        generation = self._generation
        task = asyncio.create_task(self._stream_reply(history, generation))
        self._stream_task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Caller went away (component teardown): stop the stream too.
            task.cancel()
            if generation == self._generation:
                self._abandon()
            raise
        finally:
            if self._stream_task is task:
                self._stream_task = None
        if not task.cancelled():
            task.result()

    async def _stream_reply(self, history: tuple[Message, ...], generation: int) -> None:
        fragments = self._transport.send(history, self.model_id)
        try:
            async with aclosing(fragments):
                async for fragment in fragments:
                    if generation != self._generation:
                        return
                    if fragment.done:
                        break
                    self._apply_fragment(fragment)
        except TransportError as e:
            if generation == self._generation:
                self._fail(e)
            return
        except Exception as e:
            # Keep the session usable, then let the bug surface to the caller.
            if generation == self._generation:
                self._fail(TransportError(500, f"Unexpected error: {e}"))
            raise
        if generation == self._generation:
            self._complete()

    def _apply_fragment(self, fragment: StreamFragment) -> None:
        if self._status is RequestStatus.SUBMITTED:
            self._messages.append(Message.open_assistant())
            self._status = RequestStatus.STREAMING
        open_message = self.open_message
        if open_message is None:
            raise RuntimeError("Received a fragment with no open assistant message")
        self._messages[-1] = open_message.append_text(fragment.text)
        self._notify()

    def _seal_open_message(self) -> None:
        if self.open_message is not None:
            self._messages[-1] = self._messages[-1].seal()

    def _complete(self) -> None:
        if self._status is RequestStatus.SUBMITTED:
            # Stream closed without any fragment: an empty reply is still a reply.
            self._messages.append(Message.open_assistant())
        self._seal_open_message()
        self._status = RequestStatus.READY
        logger.debug(f"Reply complete ({len(self._messages[-1].text)} chars)")
        self._notify()

    def _fail(self, error: TransportError) -> None:
        self._seal_open_message()
        self._status = RequestStatus.ERROR
        self._error = error
        logger.warning(f"Reply failed: {error}")
        self._notify()

    def acknowledge_error(self) -> None:
        """Return from ``error`` to ``ready`` once the failure was shown."""
        if self._status is not RequestStatus.ERROR:
            return
        self._status = RequestStatus.READY
        self._error = None
        self._notify()

    def clear(self) -> None:
        """Drop all messages and reset to ``ready``, cancelling any stream."""
        self._generation += 1
        if self._stream_task is not None and not self._stream_task.done():
            logger.info("Cancelling in-flight reply")
            self._stream_task.cancel()
        self._stream_task = None
        self._messages.clear()
        self._status = RequestStatus.READY
        self._error = None
        self._notify()

    def _abandon(self) -> None:
        """Drop the in-flight reply, keeping what already arrived."""
        self._generation += 1
        if self._status not in (RequestStatus.SUBMITTED, RequestStatus.STREAMING):
            return
        logger.info("Reply abandoned")
        self._seal_open_message()
        self._status = RequestStatus.READY
        self._notify()

    async def aclose(self) -> None:
        """Cancel and await any in-flight stream (component teardown).

        A partial reply is sealed and kept; status returns to ``ready``.
        """
        task, self._stream_task = self._stream_task, None
        self._abandon()
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
