"""Ollama embeddings adapter - POST /api/embeddings.

Uses the single-prompt endpoint the indexer embeds chunks with, so query
vectors live in the same space as stored ones. Retries network errors with
exponential backoff.
"""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.domain.ports.config import OllamaConfig

logger = logging.getLogger(__name__)


class OllamaEmbeddingsAdapter:
    """Ollama embeddings via POST /api/embeddings."""

    def __init__(self, config: OllamaConfig) -> None:
        """Initialize with Ollama config (host, embedding model, timeout)."""
        self._host = config.host.rstrip("/")
        self._model = config.embedding_model
        self._timeout = config.timeout

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    f"{self._host}/api/embeddings",
                    json={"model": self._model, "prompt": text},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Ollama embedding error %s: %s", e.response.status_code, e.response.text[:200])
            raise
        except httpx.TimeoutException:
            logger.warning("Ollama embedding timed out after %ss", self._timeout)
            raise
        except httpx.NetworkError as e:
            logger.warning("Ollama network error: %s", e)
            raise

        embedding = data.get("embedding") or []
        if not embedding:
            logger.warning("Ollama returned an empty embedding for model %s", self._model)
        return embedding
