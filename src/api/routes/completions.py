"""Completion API routes - Ollama-compatible endpoints with code context."""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sse_starlette.sse import ServerSentEvent

from src.api.dependencies import get_completion_use_case, limiter, rate_limit
from src.application.completion.dto import (
    ChatRequest,
    ContextRequest,
    ContextResponse,
    EmbeddingRequest,
    GenerateRequest,
)
from src.application.completion.use_case import CompletionUseCase
from src.domain.errors import CodeContextError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["completions"])


def _event_stream(events: AsyncIterator[ServerSentEvent]) -> StreamingResponse:
    """SSE response over transcoder events."""

    async def body():
        async with aclosing(events):
            async for event in events:
                yield event.encode()

    return StreamingResponse(
        body(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


def _server_error(api: str, error: Exception) -> HTTPException:
    logger.exception("%s API error", api)
    return HTTPException(status_code=500, detail={"error": "Server error", "details": str(error)})


@router.post("/chat")
@limiter.limit(rate_limit)
async def chat(
    request: Request,
    body: ChatRequest,
    use_case: CompletionUseCase = Depends(get_completion_use_case),
):
    """Chat with code context. Streams chat.completion.chunk events, else returns Ollama's response."""
    payload = await use_case.prepare_chat(body)
    if body.stream:
        return _event_stream(use_case.stream_chat(payload))
    try:
        return await use_case.chat(payload)
    except Exception as e:
        raise _server_error("Chat", e)


@router.post("/chat/completions")
@limiter.limit(rate_limit)
async def chat_completions(
    request: Request,
    body: ChatRequest,
    use_case: CompletionUseCase = Depends(get_completion_use_case),
):
    """OpenAI-compatible chat completion with code context."""
    payload = await use_case.prepare_chat(body)
    if body.stream:
        return _event_stream(use_case.stream_chat(payload))
    try:
        return await use_case.chat_completion(payload)
    except Exception as e:
        raise _server_error("Chat Completions", e)


@router.post("/generate")
@limiter.limit(rate_limit)
async def generate(
    request: Request,
    body: GenerateRequest,
    use_case: CompletionUseCase = Depends(get_completion_use_case),
):
    """Generate with code context. Streams text_completion.chunk events, else returns Ollama's response."""
    payload = await use_case.prepare_generate(body)
    if body.stream:
        return _event_stream(use_case.stream_generate(payload))
    try:
        return await use_case.generate(payload)
    except Exception as e:
        raise _server_error("Generate", e)


@router.post("/embeddings")
@limiter.limit(rate_limit)
async def embeddings(
    request: Request,
    body: EmbeddingRequest,
    use_case: CompletionUseCase = Depends(get_completion_use_case),
) -> dict:
    """Pass an embedding request through to Ollama."""
    try:
        return await use_case.embeddings(body)
    except CodeContextError:
        raise
    except Exception as e:
        raise _server_error("Embeddings", e)


@router.post("/context", response_model=ContextResponse)
@limiter.limit(rate_limit)
async def context(
    request: Request,
    body: ContextRequest,
    use_case: CompletionUseCase = Depends(get_completion_use_case),
) -> ContextResponse:
    """Preview the code context retrieved for a prompt."""
    return ContextResponse(context=await use_case.context_for(body.prompt))
