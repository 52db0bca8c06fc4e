"""Unit tests for the view binding and the conversation data model."""

from datetime import datetime

import pytest
import pytest_check as check

from openrouter_chat.client.view import derive_view, to_plain_transcript, transcript_filename
from openrouter_chat.models.conversation import Message, RequestStatus, Role, TextPart


def assistant(text: str, sealed: bool = True) -> Message:
    message = Message.open_assistant().append_text(text)
    return message.seal() if sealed else message


class TestMessage:
    """Tests for Message value semantics."""

    def test_text_concatenates_parts_in_order(self) -> None:
        message = Message(role=Role.ASSISTANT, parts=(TextPart(text="a"), TextPart(text="b")))

        assert message.text == "ab"

    def test_append_creates_part_then_extends_it(self) -> None:
        """The first append creates the sole text part; later ones extend it."""
        message = Message.open_assistant().append_text("Hel").append_text("lo")

        assert len(message.parts) == 1
        assert message.text == "Hello"

    def test_append_returns_new_message(self) -> None:
        original = Message.open_assistant()
        extended = original.append_text("x")

        assert original.text == ""
        assert extended.id == original.id

    def test_seal_is_idempotent(self) -> None:
        """Sealing twice returns the same object and never re-appends."""
        sealed = assistant("Hello")

        assert sealed.seal() is sealed
        assert sealed.seal().text == "Hello"

    def test_sealed_message_rejects_append(self) -> None:
        with pytest.raises(ValueError):
            assistant("done").append_text("more")

    def test_ids_are_unique(self) -> None:
        ids = {Message.user("x").id for _ in range(100)}

        assert len(ids) == 100
        assert all(i.startswith("msg_") for i in ids)


class TestDeriveView:
    """Tests for derive_view."""

    def test_maps_role_text_and_seal(self) -> None:
        messages = [Message.user("Hi"), assistant("Hello")]

        turns = derive_view(messages, RequestStatus.READY)

        check.equal([t.role for t in turns], [Role.USER, Role.ASSISTANT])
        check.equal([t.text for t in turns], ["Hi", "Hello"])
        check.equal([t.id for t in turns], [m.id for m in messages])
        check.is_true(all(t.sealed for t in turns))
        check.is_false(any(t.in_progress for t in turns))

    def test_trailing_open_turn_in_progress_while_streaming(self) -> None:
        messages = [Message.user("Hi"), assistant("Hel", sealed=False)]

        turns = derive_view(messages, RequestStatus.STREAMING)

        assert not turns[0].in_progress
        assert turns[1].in_progress
        assert not turns[1].sealed

    def test_no_progress_outside_streaming(self) -> None:
        """Only the streaming status shows the in-progress affordance."""
        messages = [Message.user("Hi"), assistant("Hel", sealed=False)]

        for status in (RequestStatus.READY, RequestStatus.SUBMITTED, RequestStatus.ERROR):
            assert not derive_view(messages, status)[-1].in_progress

    def test_labels(self) -> None:
        turns = derive_view([Message.user("Hi"), assistant("Yo")], RequestStatus.READY)

        assert [t.label for t in turns] == ["You", "Assistant"]

    def test_empty_conversation(self) -> None:
        assert derive_view([], RequestStatus.READY) == []


class TestTranscript:
    """Tests for the plain transcript."""

    def test_exact_format(self) -> None:
        """One user and one assistant turn, blank-line separated."""
        messages = [Message.user("Hi"), assistant("Hello there")]

        assert to_plain_transcript(messages) == "You: Hi\n\nAssistant: Hello there"

    def test_open_turn_excluded(self) -> None:
        messages = [Message.user("Hi"), assistant("Hel", sealed=False)]

        assert to_plain_transcript(messages) == "You: Hi"

    def test_empty_conversation(self) -> None:
        assert to_plain_transcript([]) == ""

    def test_multiline_text_preserved(self) -> None:
        messages = [Message.user("a\nb"), assistant("c")]

        assert to_plain_transcript(messages) == "You: a\nb\n\nAssistant: c"

    def test_filename(self) -> None:
        at = datetime(2024, 3, 9, 14, 5, 7)

        assert transcript_filename(at) == "chat-transcript-20240309-140507.txt"
