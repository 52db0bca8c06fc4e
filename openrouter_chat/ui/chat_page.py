"""NiceGUI chat page bound to the conversation state machine.

The page never edits the conversation. It subscribes to ConversationStore,
re-derives the view from each ChatState snapshot and forwards user actions
(submit, copy, download, clear) to the store or to read-only helpers.

Re-rendering is incremental: while only the trailing turn changes (the
usual case during streaming), just that turn's HTML is replaced.
"""

import logging
import os

from nicegui import ui

from openrouter_chat.client.conversation import ChatState, ConversationStore
from openrouter_chat.client.transport import ChatTransport, TransportConfig
from openrouter_chat.client.view import (
    RenderableTurn,
    derive_view,
    to_plain_transcript,
    transcript_filename,
)
from openrouter_chat.errors import ValidationError
from openrouter_chat.models.conversation import RequestStatus, Role
from openrouter_chat.ui.markdown import markdown_to_html, plain_to_html

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }
    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }
    .header { background: #111827; }

    .message-user {
        background: #111827;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
    .avatar-user { background: #111827; }
    .avatar-assistant { background: #6b7280; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #6b7280;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }
    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .pulse-dot {
        display: inline-block;
        width: 8px; height: 8px;
        margin-left: 4px;
        background: #6b7280;
        border-radius: 50%;
        animation: pulse 1s infinite ease-in-out;
    }
    @keyframes pulse {
        0%, 100% { opacity: 0.2; }
        50% { opacity: 1; }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #111827; }

    .message-assistant strong { font-weight: 600; }
    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-assistant a { color: #4f46e5; }
</style>
"""

PULSE_HTML = '<span class="pulse-dot"></span>'

# Enter sends; Shift+Enter inserts a newline; Enter that confirms an IME
# composition does neither.
SEND_ON_ENTER_JS = "(e) => { if (e.shiftKey || e.isComposing) return; e.preventDefault(); emit(); }"


def turn_html(turn: RenderableTurn) -> str:
    """HTML body of one turn: markdown for the assistant, plain text otherwise."""
    if turn.role is Role.ASSISTANT:
        content = markdown_to_html(turn.text)
    else:
        content = plain_to_html(turn.text)
    if turn.in_progress:
        content += PULSE_HTML
    return content


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    transport = ChatTransport(TransportConfig())
    store = ConversationStore(transport, transport.config.default_model)

    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.textarea
    send_btn: ui.button
    rendered: dict[str, ui.html] = {}
    indicator_shown = False

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        icon = "person" if is_user else "smart_toy"
        avatar_classes = f"w-9 h-9 rounded-full flex items-center justify-center {css}"
        with ui.element("div").classes(avatar_classes):
            ui.icon(icon).classes("text-white text-lg")

    def copy_message(message_id: str) -> None:
        for message in store.messages:
            if message.id == message_id:
                ui.clipboard.write(message.text)
                ui.notify("Response copied to clipboard", type="positive")
                return

    def render_turn(turn: RenderableTurn) -> None:
        is_user = turn.role is Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            if not is_user:
                render_avatar(False)
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    rendered[turn.id] = ui.html(turn_html(turn), sanitize=False).classes(
                        "text-sm leading-relaxed"
                    )
                with ui.row().classes(
                    f"items-center gap-1 {'self-end' if is_user else 'self-start'}"
                ):
                    ui.label(turn.created_at.astimezone().strftime("%I:%M %p")).classes(
                        "text-[10px] text-gray-400"
                    )
                    if not is_user:
                        ui.button(
                            icon="content_copy",
                            on_click=lambda message_id=turn.id: copy_message(message_id),
                        ).props("flat round dense size=xs color=grey")
            if is_user:
                render_avatar(True)

    def render_status_indicator(status_text: str = "Thinking...") -> None:
        """Render the waiting indicator shown before the first fragment."""
        with ui.row().classes("w-full justify-start gap-3 items-end"):
            render_avatar(False)
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("items-center gap-2"):
                    with ui.row().classes("gap-1"):
                        for _ in range(3):
                            ui.element("div").classes("typing-dot")
                    ui.label(status_text).classes("text-sm text-gray-500 italic")

    def rebuild(turns: list[RenderableTurn], status: RequestStatus) -> None:
        nonlocal indicator_shown
        indicator_shown = False
        messages_container.clear()
        rendered.clear()
        with messages_container:
            if not turns:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
                return
            for turn in turns:
                render_turn(turn)
            if status is RequestStatus.SUBMITTED:
                render_status_indicator()
                indicator_shown = True

    def on_state(state: ChatState) -> None:
        turns = derive_view(state.messages, state.status)
        same_turns = list(rendered) == [turn.id for turn in turns]
        if turns and same_turns and not indicator_shown:
            trailing = turns[-1]
            rendered[trailing.id].set_content(turn_html(trailing))
        else:
            rebuild(turns, state.status)

        busy = state.status in (RequestStatus.SUBMITTED, RequestStatus.STREAMING)
        send_btn.set_enabled(not busy)
        input_field.set_enabled(not busy)
        scroll_area.scroll_to(percent=1.0)

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or store.status is not RequestStatus.READY:
            return
        input_field.value = ""

        try:
            await store.submit(text)
        except ValidationError as e:
            ui.notify(str(e), type="warning")
            return

        if store.status is RequestStatus.ERROR and store.error is not None:
            ui.notify(f"Error: {store.error.message}", type="negative")
            store.acknowledge_error()

    def copy_transcript() -> None:
        transcript = to_plain_transcript(store.messages)
        if not transcript:
            ui.notify("Nothing to copy yet", type="info")
            return
        ui.clipboard.write(transcript)
        ui.notify("Conversation copied to clipboard", type="positive")

    def download_transcript() -> None:
        transcript = to_plain_transcript(store.messages)
        if not transcript:
            ui.notify("Nothing to download yet", type="info")
            return
        ui.download.content(transcript, transcript_filename())

    def new_chat() -> None:
        store.clear()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("smart_toy").classes("text-white text-3xl")
                ui.label("OpenRouter Chat").classes("text-lg font-semibold text-white")
            with ui.row().classes("items-center gap-1"):
                ui.label(store.model_id).classes("text-xs text-white/70 font-mono mr-2")
                ui.button(icon="content_copy", on_click=copy_transcript).props(
                    "flat round color=white"
                ).tooltip("Copy conversation")
                ui.button(icon="download", on_click=download_transcript).props(
                    "flat round color=white"
                ).tooltip("Download conversation")
                ui.button(icon="add", on_click=new_chat).props("flat round color=white").tooltip(
                    "New chat"
                )

        # Messages
        scroll_area = ui.scroll_area().classes("flex-grow w-full bg-gray-50")
        with scroll_area, ui.column().classes("w-full p-5"):
            messages_container = ui.column().classes("w-full gap-4")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Ask anything...")
                    .props("autogrow borderless dense rows=1")
                    .classes("w-full")
                    .on("keydown.enter", send_message, js_handler=SEND_ON_ENTER_JS)
                )
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

    unsubscribe = store.subscribe(on_state)
    on_state(store.snapshot())

    async def teardown() -> None:
        unsubscribe()
        await store.aclose()
        await transport.aclose()
        logger.debug("Chat page disconnected")

    ui.context.client.on_disconnect(teardown)


def main() -> None:
    ui.run(title="OpenRouter Chat", port=int(os.getenv("UI_PORT", "8080")), reload=False)


if __name__ == "__main__":
    main()
