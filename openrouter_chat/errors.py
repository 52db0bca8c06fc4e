"""Error taxonomy shared by the chat client and the chat server.

Errors never crash a session: validation errors are handled where they are
raised, transport errors are folded into the conversation state machine, and
serialization errors degrade a single malformed turn to empty text.
"""


class ChatError(Exception):
    """Base class for all chat errors."""

    pass


class ValidationError(ChatError):
    """Raised when a caller passes bad input or acts in the wrong state."""

    pass


class TransportError(ChatError):
    """Raised when the chat endpoint cannot be reached or fails mid-stream.

    Attributes:
        status_code: HTTP status of the failure (synthesized for network errors).
        message: Human-readable reason, safe to show in the UI.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthenticationError(TransportError):
    """Raised when no API credential is configured."""

    def __init__(self, message: str = "Missing API credential.") -> None:
        super().__init__(401, message)


class SerializationError(ChatError):
    """Raised when an inbound message has no readable shape."""

    pass
