"""Chat endpoint streaming plain-text replies.

Accepts the conversation so far, resolves the model id and relays the
provider's reply as a ``text/plain`` stream. The first chunk is fetched
before the response starts so that failures that happen up front
(missing credential, provider rejection) still produce a proper status code.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import aclosing

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from openrouter_chat.errors import AuthenticationError
from openrouter_chat.models.schemas import ChatRequest
from openrouter_chat.provider.service import ProviderService, get_provider_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

FAILURE_BODY = "Failed to generate response."
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"


async def _relay(first: str, stream: AsyncGenerator[str]) -> AsyncIterator[str]:
    """Yield the prefetched chunk, then the rest of the provider stream."""
    async with aclosing(stream):
        if first:
            yield first
        try:
            async for chunk in stream:
                yield chunk
        except Exception as e:
            # Headers are already sent; aborting the body is the only signal left.
            logger.error(f"/api/chat stream aborted: {e}")
            raise


@router.post("")
async def chat(
    body: ChatRequest,
    service: ProviderService = Depends(get_provider_service),
) -> Response:
    """Stream a reply for the posted conversation.

    Returns:
        200 with a plain-text stream of reply chunks.

    Raises:
        401: No API credential configured.
        500: Provider failure before the first chunk.
    """
    messages = body.wire_messages()
    model_id = service.resolve_model(body.model)
    logger.info(f"Chat request: model={model_id} turns={len(messages)}")

    stream = service.stream_reply(messages, model_id)
    try:
        first = await anext(stream, "")
    except AuthenticationError as e:
        await stream.aclose()
        logger.warning(f"/api/chat rejected: {e.message}")
        return PlainTextResponse(e.message, status_code=status.HTTP_401_UNAUTHORIZED)
    except Exception as e:
        await stream.aclose()
        logger.error(f"/api/chat error: {e}")
        return PlainTextResponse(FAILURE_BODY, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return StreamingResponse(_relay(first, stream), media_type=TEXT_MEDIA_TYPE)
