"""Embeddings adapters - Ollama."""

from src.infrastructure.embeddings.ollama import OllamaEmbeddingsAdapter

__all__ = ["OllamaEmbeddingsAdapter"]
