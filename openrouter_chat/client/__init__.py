"""Chat client core: transport, conversation state machine, view binding.

Responsibilities:
    - Streaming the assistant reply from the chat endpoint
    - Assembling streamed fragments into conversation messages
    - Tracking request status (ready, submitted, streaming, error)
    - Deriving renderable turns and the plain transcript

Has no UI dependency; the NiceGUI page subscribes to ConversationStore.
"""

from openrouter_chat.client.conversation import ChatState, ConversationStore
from openrouter_chat.client.transport import ChatTransport, TransportConfig
from openrouter_chat.client.view import (
    RenderableTurn,
    derive_view,
    to_plain_transcript,
    transcript_filename,
)

__all__ = [
    "ChatState",
    "ChatTransport",
    "ConversationStore",
    "RenderableTurn",
    "TransportConfig",
    "derive_view",
    "to_plain_transcript",
    "transcript_filename",
]
