"""LLM Port - interface for the inference engine (Ollama)."""

from typing import AsyncIterator, Protocol

from pydantic import BaseModel


class LLMMessage(BaseModel):
    """Single message in a conversation."""

    role: str  # "system" | "user" | "assistant"
    content: str


class ChatLineMessage(BaseModel):
    """message object of a streamed /api/chat line."""

    role: str | None = None
    content: str | None = None


class ChatStreamLine(BaseModel):
    """One NDJSON line of a streamed /api/chat response."""

    message: ChatLineMessage | None = None
    done: bool = False
    error: str | None = None


class GenerateStreamLine(BaseModel):
    """One NDJSON line of a streamed /api/generate response.

    response is treated as the cumulative text generated so far.
    """

    response: str | None = None
    done: bool = False
    error: str | None = None


class LLMPort(Protocol):
    """Interface for the inference engine."""

    def stream_chat(self, payload: dict) -> AsyncIterator[bytes]:
        """Raw NDJSON byte stream of /api/chat. Raises UpstreamTransportError."""
        ...

    def stream_generate(self, payload: dict) -> AsyncIterator[bytes]:
        """Raw NDJSON byte stream of /api/generate. Raises UpstreamTransportError."""
        ...

    async def chat(self, payload: dict) -> dict:
        """Non-streaming /api/chat response."""
        ...

    async def generate(self, payload: dict) -> dict:
        """Non-streaming /api/generate response."""
        ...

    async def embeddings(self, model: str, prompt: str) -> dict:
        """Embedding response for a prompt."""
        ...

    async def is_available(self) -> bool:
        """Check if the inference engine is reachable."""
        ...
