"""Pydantic models for the conversation and the chat API.

Models:
    - Message, TextPart: Conversation turns and their content
    - RequestStatus: Lifecycle of the outstanding request
    - StreamFragment: Incremental assistant text
    - WireMessage: ``{role, content}`` shape sent over HTTP
    - ChatRequest: Inbound chat endpoint payload
"""

from openrouter_chat.models.conversation import (
    Message,
    RequestStatus,
    Role,
    StreamFragment,
    TextPart,
    WireMessage,
)
from openrouter_chat.models.schemas import ChatRequest, parse_message, parse_messages

__all__ = [
    "ChatRequest",
    "Message",
    "RequestStatus",
    "Role",
    "StreamFragment",
    "TextPart",
    "WireMessage",
    "parse_message",
    "parse_messages",
]
