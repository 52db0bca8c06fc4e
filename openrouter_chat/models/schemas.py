"""Pydantic models for the chat API request and inbound message parsing.

Browser clients post messages in one of two shapes:

    - UI format: ``{"role": "user", "parts": [{"type": "text", "text": "Hi"}]}``
    - Direct format: ``{"role": "user", "content": "Hi"}``, where ``content``
      may also be a list of ``{"type": "text", "text": ...}`` parts.

Both are resolved by a single tagged-union parse step whose discriminator
checks ``parts`` first and ``content`` second. Anything else is a
SerializationError, which ``parse_messages`` degrades to an empty text turn
instead of rejecting the whole request.
"""

import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from openrouter_chat.errors import SerializationError
from openrouter_chat.models.conversation import Role, WireMessage

logger = logging.getLogger(__name__)


class ContentPart(BaseModel):
    """A single part of a UI-format message.

    Non-text parts (reasoning, files, tool calls) are accepted and ignored.
    """

    model_config = ConfigDict(extra="ignore")

    type: str
    text: str | None = None


def _join_text(parts: list[ContentPart]) -> str:
    return "".join(part.text or "" for part in parts if part.type == "text")


class UIMessage(BaseModel):
    """Message carrying structured ``parts``."""

    model_config = ConfigDict(extra="ignore")

    shape: Literal["ui"] = "ui"
    role: Role
    parts: list[ContentPart]

    @property
    def text(self) -> str:
        return _join_text(self.parts)


class DirectMessage(BaseModel):
    """Message carrying a flat ``content`` field."""

    model_config = ConfigDict(extra="ignore")

    shape: Literal["direct"] = "direct"
    role: Role
    content: str | list[ContentPart]

    @property
    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return _join_text(self.content)


def _message_shape(value: Any) -> str | None:
    """Pick the union member for a raw message; ``parts`` wins over ``content``."""
    if isinstance(value, dict):
        if isinstance(value.get("parts"), list):
            return "ui"
        if value.get("content") is not None:
            return "direct"
        return None
    return getattr(value, "shape", None)


InboundMessage = Annotated[
    Annotated[UIMessage, Tag("ui")] | Annotated[DirectMessage, Tag("direct")],
    Discriminator(_message_shape),
]

_inbound_adapter: TypeAdapter[UIMessage | DirectMessage] = TypeAdapter(InboundMessage)


def parse_message(raw: Any) -> WireMessage:
    """Parse one raw inbound message into the wire shape.

    Raises:
        SerializationError: If the message has neither parts nor content,
            or its fields do not validate.
    """
    try:
        message = _inbound_adapter.validate_python(raw)
    except PydanticValidationError as e:
        raise SerializationError(f"Unreadable message: {e.error_count()} error(s)") from e
    return WireMessage(role=message.role, content=message.text)


def _fallback_role(raw: Any) -> Role:
    role = raw.get("role") if isinstance(raw, dict) else None
    try:
        return Role(role)
    except ValueError:
        return Role.USER


def parse_messages(raw_messages: list[Any]) -> list[WireMessage]:
    """Parse inbound messages, degrading malformed ones to empty text turns."""
    wire: list[WireMessage] = []
    for index, raw in enumerate(raw_messages):
        try:
            wire.append(parse_message(raw))
        except SerializationError as e:
            logger.warning(f"Message {index} degraded to empty text: {e}")
            wire.append(WireMessage(role=_fallback_role(raw), content=""))
    return wire


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        messages: Conversation so far, UI-format or direct-format objects.
        model: Optional model identifier overriding the configured default.
    """

    messages: list[Any] = Field(default_factory=list, description="Conversation messages")
    model: str | None = Field(None, description="Model identifier, e.g. 'openai/gpt-4o-mini'")

    def wire_messages(self) -> list[WireMessage]:
        return parse_messages(self.messages)
