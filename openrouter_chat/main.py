"""Entry point for the OpenRouter Chat server and page.

``RUN_MODE=integrated`` (default) serves the API and the NiceGUI page from one
uvicorn process on ``PORT``. ``RUN_MODE=separate`` starts the API on ``PORT``
and the page on ``UI_PORT`` as two processes.

In both modes the page posts to ``CHAT_API_URL`` when set, otherwise to
``/api/chat`` on ``PORT`` (see ``openrouter_chat.client.transport``).
"""

import logging
import os
import subprocess
import sys
import time

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

HOST = os.getenv("HOST", "0.0.0.0")


def api_port() -> int:
    return int(os.getenv("PORT", "8000"))


def ui_port() -> int:
    return int(os.getenv("UI_PORT", "8080"))


def run_integrated() -> None:
    """Serve /api/chat and the chat page from the same uvicorn server."""
    import uvicorn
    from nicegui import ui

    from openrouter_chat.api.app import create_app
    from openrouter_chat.client.transport import default_endpoint
    from openrouter_chat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="OpenRouter Chat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "openrouter-chat-secret"),
    )

    port = api_port()
    logger.info(f"Chat UI on http://localhost:{port}/, posting to {default_endpoint()}")
    uvicorn.run(app, host=HOST, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def run_separate() -> None:
    """Run the API and the page as two child processes until either exits."""
    commands = {
        "api": [
            sys.executable, "-m", "uvicorn", "openrouter_chat.api.app:app",
            "--host", HOST, "--port", str(api_port()),
        ],
        "ui": [sys.executable, "-m", "openrouter_chat.ui.chat_page"],
    }
    logger.info(f"API on port {api_port()}, chat UI on port {ui_port()}")
    procs = {name: subprocess.Popen(cmd) for name, cmd in commands.items()}
    try:
        while all(proc.poll() is None for proc in procs.values()):
            time.sleep(1)
        stopped = [name for name, proc in procs.items() if proc.poll() is not None]
        logger.warning(f"Process exited: {', '.join(stopped)}")
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        for proc in procs.values():
            proc.terminate()
        for proc in procs.values():
            proc.wait()


def main() -> None:
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting OpenRouter Chat in {mode} mode")
    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
