"""Pure mapping from conversation state to what the page renders.

Nothing here mutates the conversation; copy and download only ever read
the transcript produced by ``to_plain_transcript``.
"""

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from openrouter_chat.models.conversation import Message, RequestStatus, Role

ROLE_LABELS = {
    Role.USER: "You",
    Role.ASSISTANT: "Assistant",
    Role.SYSTEM: "System",
}


class RenderableTurn(BaseModel):
    """One turn as the view layer sees it.

    Attributes:
        id: Message id, stable across re-renders.
        role: Speaker of the turn.
        text: Concatenated text of the turn.
        sealed: False while the turn still receives fragments.
        created_at: When the message was created.
        in_progress: True only for the trailing open turn while streaming.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    text: str
    sealed: bool
    created_at: datetime
    in_progress: bool = False

    @property
    def label(self) -> str:
        return ROLE_LABELS[self.role]


def derive_view(messages: Iterable[Message], status: RequestStatus) -> list[RenderableTurn]:
    """Map conversation messages to renderable turns."""
    turns = [
        RenderableTurn(
            id=m.id, role=m.role, text=m.text, sealed=m.sealed, created_at=m.created_at
        )
        for m in messages
    ]
    if turns and status is RequestStatus.STREAMING and not turns[-1].sealed:
        turns[-1] = turns[-1].model_copy(update={"in_progress": True})
    return turns


def to_plain_transcript(messages: Iterable[Message]) -> str:
    """Role-prefixed text of all sealed turns, separated by blank lines."""
    return "\n\n".join(f"{ROLE_LABELS[m.role]}: {m.text}" for m in messages if m.sealed)


def transcript_filename(at: datetime | None = None) -> str:
    """File name offered when downloading the transcript."""
    at = at or datetime.now()
    return f"chat-transcript-{at:%Y%m%d-%H%M%S}.txt"
