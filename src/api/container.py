"""Dependency Injection Container - centralized service management."""

import logging
from functools import cached_property
from typing import TYPE_CHECKING

from src.domain.ports.config import AppConfig
from src.domain.ports.document_store import DocumentStorePort
from src.domain.ports.embeddings import EmbeddingsPort
from src.domain.ports.llm import LLMPort
from src.infrastructure.config import load_config

if TYPE_CHECKING:
    from src.application.completion.use_case import CompletionUseCase
    from src.application.retrieval.engine import RetrievalEngine

logger = logging.getLogger(__name__)


class Container:
    """Dependency Injection Container with lazy initialization.

    All dependencies are created on first access and cached. The document
    store handle is the exception: it is opened explicitly at startup by
    open_document_store() and stays None when that fails.

    Usage:
        container = Container()
        container.open_document_store()
        use_case = container.completion_use_case
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        document_store: DocumentStorePort | None = None,
    ) -> None:
        """Initialize container with optional config and store overrides."""
        self._config_override = config
        self._document_store = document_store

    @cached_property
    def config(self) -> AppConfig:
        """Application configuration."""
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def llm(self) -> LLMPort:
        """Ollama adapter."""
        from src.infrastructure.llm.ollama import OllamaAdapter

        return OllamaAdapter(self.config.ollama)

    @cached_property
    def embeddings(self) -> EmbeddingsPort:
        """Query embeddings adapter."""
        from src.infrastructure.embeddings.ollama import OllamaEmbeddingsAdapter

        return OllamaEmbeddingsAdapter(self.config.ollama)

    @property
    def document_store(self) -> DocumentStorePort | None:
        """Opened document store, or None if not (yet) connected."""
        return self._document_store

    def open_document_store(self) -> DocumentStorePort | None:
        """Connect to ChromaDB. Failures are logged and leave the store unset."""
        from src.infrastructure.rag.chromadb_adapter import open_document_store

        try:
            self._document_store = open_document_store(self.config.chroma, self.embeddings)
        except Exception as e:  # noqa: BLE001
            logger.warning("Vector DB initialization failed: %s", e)
            self._document_store = None
        return self._document_store

    @cached_property
    def retrieval_engine(self) -> "RetrievalEngine":
        """Code context retrieval engine."""
        from src.application.retrieval.engine import RetrievalEngine

        return RetrievalEngine(self.config.retrieval)

    @cached_property
    def completion_use_case(self) -> "CompletionUseCase":
        """Completion use case with all dependencies."""
        from src.application.completion.use_case import CompletionUseCase

        return CompletionUseCase(
            llm=self.llm,
            retrieval=self.retrieval_engine,
            store_getter=lambda: self.document_store,
            default_model=self.config.ollama.model,
            embedding_model=self.config.ollama.embedding_model,
        )

    def reset(self) -> None:
        """Reset all cached instances (useful for testing)."""
        # Clear cached_property values
        for attr in list(self.__dict__.keys()):
            if not attr.startswith("_"):
                delattr(self, attr)


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    if _container:
        _container.reset()
    _container = None
