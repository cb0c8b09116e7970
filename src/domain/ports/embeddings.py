"""Embeddings Port - interface for embedding providers."""

from typing import Protocol


class EmbeddingsPort(Protocol):
    """Interface for embedding providers used to vectorize search queries."""

    async def embed(self, text: str) -> list[float]:
        """Embed a single text. Returns vector."""
        ...
