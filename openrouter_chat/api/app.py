"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from openrouter_chat import __version__
from openrouter_chat.api.chat import router as chat_router
from openrouter_chat.provider.service import get_provider_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting OpenRouter Chat API...")
    config = get_provider_service().config
    if not config.has_credential:
        logger.warning("OPENROUTER_API_KEY is not set; chat requests will be rejected with 401")
    logger.info(f"Default model: {config.resolve_model()}")
    yield
    # Shutdown
    logger.info("Shutting down OpenRouter Chat API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="OpenRouter Chat API",
        description=(
            "Streaming chat relay. Accepts a conversation in UI or direct message "
            "format and streams the model's reply back as plain text."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "openrouter-chat"}

    return application


app = create_app()
