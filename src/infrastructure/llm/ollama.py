"""Ollama adapter - implements LLMPort.

Streaming calls go through httpx so the raw NDJSON bytes reach the
transcoder untouched; non-streaming calls use the ollama client.
"""

import logging
from typing import AsyncIterator

import httpx
from ollama import AsyncClient

from src.domain.errors import UpstreamTransportError
from src.domain.ports.config import OllamaConfig

logger = logging.getLogger(__name__)

# Fail fast when the host is down; generation itself may take long.
DEFAULT_CONNECT_TIMEOUT = 5.0


class OllamaAdapter:
    """Ollama implementation of LLMPort."""

    def __init__(self, config: OllamaConfig) -> None:
        self._config = config
        self._host = config.host.rstrip("/")
        read_timeout = float(config.timeout) if config.timeout else 120.0
        timeout = httpx.Timeout(
            connect=DEFAULT_CONNECT_TIMEOUT,
            read=read_timeout,
            write=read_timeout,
            pool=30.0,
        )
        self._client = AsyncClient(host=self._host, timeout=timeout)
        self._http = httpx.AsyncClient(base_url=self._host, timeout=timeout)

    def stream_chat(self, payload: dict) -> AsyncIterator[bytes]:
        """Stream /api/chat as raw bytes."""
        return self._stream("/api/chat", payload)

    def stream_generate(self, payload: dict) -> AsyncIterator[bytes]:
        """Stream /api/generate as raw bytes."""
        return self._stream("/api/generate", payload)

    async def _stream(self, path: str, payload: dict) -> AsyncIterator[bytes]:
        body = {**payload, "stream": True}
        logger.info("%s request: model=%s, streaming=True", path, body.get("model"))
        try:
            async with self._http.stream("POST", path, json=body) as resp:
                if resp.status_code >= 400:
                    detail = (await resp.aread()).decode("utf-8", errors="replace")
                    raise UpstreamTransportError(f"Ollama returned {resp.status_code}: {detail[:200]}")
                async for chunk in resp.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise UpstreamTransportError(f"Ollama stream failed: {e}") from e

    async def chat(self, payload: dict) -> dict:
        """Non-streaming chat; returns Ollama's JSON body."""
        logger.info("/api/chat request: model=%s, streaming=False", payload.get("model"))
        response = await self._client.chat(**{**payload, "stream": False})
        return response.model_dump(exclude_none=True)

    async def generate(self, payload: dict) -> dict:
        """Non-streaming generate; returns Ollama's JSON body."""
        logger.info("/api/generate request: model=%s, streaming=False", payload.get("model"))
        response = await self._client.generate(**{**payload, "stream": False})
        return response.model_dump(exclude_none=True)

    async def embeddings(self, model: str, prompt: str) -> dict:
        """Embedding for a prompt (legacy /api/embeddings shape)."""
        response = await self._client.embeddings(model=model, prompt=prompt)
        return response.model_dump(exclude_none=True)

    async def is_available(self) -> bool:
        """Check if Ollama server is available. Fail-fast, no stale cache."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"{self._host}/api/tags")
                return resp.status_code == 200
        except Exception as e:
            logger.debug("Ollama availability check failed: %s", e)
        return False

    async def close(self) -> None:
        """Close the streaming HTTP client (call during app shutdown)."""
        await self._http.aclose()
