"""Completion request DTOs (Ollama-shaped request bodies)."""

from pydantic import BaseModel, Field

from src.domain.ports.llm import LLMMessage


class ChatRequest(BaseModel):
    """Request for /api/chat and /api/chat/completions."""

    messages: list[LLMMessage] = []
    model: str | None = Field(None, max_length=255)
    stream: bool = False
    options: dict | None = None


class GenerateRequest(BaseModel):
    """Request for /api/generate."""

    prompt: str | None = None
    model: str | None = Field(None, max_length=255)
    system: str | None = None
    template: str | None = None
    context: list[int] | None = None  # Ollama conversation context tokens
    options: dict | None = None
    stream: bool = False


class EmbeddingRequest(BaseModel):
    """Request for /api/embeddings."""

    prompt: str | None = None
    model: str | None = Field(None, max_length=255)


class ContextRequest(BaseModel):
    """Request for /api/context (retrieval preview)."""

    prompt: str | None = None


class ContextResponse(BaseModel):
    """Retrieved code context for a prompt."""

    context: str
