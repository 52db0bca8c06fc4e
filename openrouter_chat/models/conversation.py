"""Conversation data model.

Messages are frozen pydantic models. The conversation state machine never
edits a message in place: it swaps the open assistant message for an extended
copy on every fragment and for a sealed copy when the turn ends.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class RequestStatus(str, Enum):
    """Lifecycle of the outstanding request."""

    READY = "ready"
    SUBMITTED = "submitted"
    STREAMING = "streaming"
    ERROR = "error"


def new_message_id() -> str:
    return f"msg_{uuid.uuid4().hex[:16]}"


class TextPart(BaseModel):
    """Plain text content of a message."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str = ""


# Only text today; widen to a discriminated union on ``type`` for new kinds.
Part = TextPart


class Message(BaseModel):
    """One turn of the conversation.

    Attributes:
        id: Unique message identifier.
        role: Who produced the message.
        parts: Ordered content parts.
        created_at: Creation timestamp (UTC).
        sealed: False only while an assistant reply is still streaming.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    parts: tuple[Part, ...] = ()
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sealed: bool = True

    @property
    def text(self) -> str:
        """Ordered concatenation of all text parts."""
        return "".join(part.text for part in self.parts if part.type == "text")

    @property
    def is_open(self) -> bool:
        return not self.sealed

    @classmethod
    def user(cls, text: str) -> "Message":
        """Create a sealed user message."""
        return cls(role=Role.USER, parts=(TextPart(text=text),))

    @classmethod
    def open_assistant(cls) -> "Message":
        """Create an empty assistant message ready to receive fragments."""
        return cls(role=Role.ASSISTANT, sealed=False)

    def append_text(self, text: str) -> "Message":
        """Return a copy with ``text`` appended to the sole text part.

        Raises:
            ValueError: If the message is already sealed.
        """
        if self.sealed:
            raise ValueError(f"Message {self.id} is sealed")
        if not self.parts:
            return self.model_copy(update={"parts": (TextPart(text=text),)})
        head, last = self.parts[:-1], self.parts[-1]
        return self.model_copy(
            update={"parts": (*head, last.model_copy(update={"text": last.text + text}))}
        )

    def seal(self) -> "Message":
        """Return a sealed copy. Sealing a sealed message returns it unchanged."""
        if self.sealed:
            return self
        return self.model_copy(update={"sealed": True})


class StreamFragment(BaseModel):
    """One incremental chunk of assistant text, or the end-of-stream marker.

    Attributes:
        text: Text delta (empty for the end marker).
        done: True only for the final marker of a completed stream.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    done: bool = False


class WireMessage(BaseModel):
    """A message in the ``{role, content}`` shape sent over HTTP."""

    role: Role
    content: str = ""

    @classmethod
    def from_message(cls, message: Message) -> "WireMessage":
        return cls(role=message.role, content=message.text)
