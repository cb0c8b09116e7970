"""ChromaDB document store adapter - implements DocumentStorePort.

The collection is populated by the external indexer; this adapter only
reads. ChromaDB calls are synchronous and run in a worker thread.
"""

import asyncio
import logging
from pathlib import Path
from urllib.parse import urlparse

import chromadb
from chromadb.config import Settings

from src.domain.ports.config import ChromaConfig
from src.domain.ports.document_store import ChunkMetadata, CodeChunk
from src.domain.ports.embeddings import EmbeddingsPort

logger = logging.getLogger(__name__)

# Metadata keys written by the indexer
PATH_KEY = "filePath"
NAME_KEY = "fileName"


def _to_chunks(documents: list, metadatas: list) -> list[CodeChunk]:
    chunks: list[CodeChunk] = []
    for i, doc in enumerate(documents):
        if not doc:
            continue
        meta = metadatas[i] if i < len(metadatas) else None
        chunks.append(CodeChunk(content=doc, metadata=ChunkMetadata.model_validate(meta or {})))
    return chunks


class ChromaDocumentStore:
    """Read-only view over one ChromaDB collection."""

    def __init__(self, collection, embeddings: EmbeddingsPort) -> None:
        """Wrap an opened collection; embeddings vectorize semantic queries."""
        self._collection = collection
        self._embeddings = embeddings

    async def count(self) -> int:
        """Number of stored chunks."""
        return await asyncio.to_thread(self._collection.count)

    async def exact_match(
        self,
        *,
        path: str | None = None,
        name: str | None = None,
        limit: int = 10,
    ) -> list[CodeChunk]:
        """Chunks whose filePath (or fileName) metadata equals the value."""
        if path is not None:
            where = {PATH_KEY: {"$eq": path}}
        elif name is not None:
            where = {NAME_KEY: {"$eq": name}}
        else:
            raise ValueError("exact_match needs a path or a name")

        result = await asyncio.to_thread(
            self._collection.get,
            where=where,
            limit=limit,
            include=["documents", "metadatas"],
        )
        documents = result.get("documents", []) or []
        metadatas = result.get("metadatas", []) or []
        return _to_chunks(documents, metadatas)

    async def semantic_query(self, text: str, limit: int) -> list[CodeChunk]:
        """Nearest chunks to text by the collection's own distance metric."""
        if not text.strip():
            return []
        count = await self.count()
        if count == 0:
            return []

        query_embedding = await self._embeddings.embed(text)
        if not query_embedding:
            logger.warning("Empty query embedding returned")
            return []

        result = await asyncio.to_thread(
            self._collection.query,
            query_embeddings=[query_embedding],
            n_results=min(limit, count),
            include=["documents", "metadatas"],
        )
        documents = (result.get("documents") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        return _to_chunks(documents, metadatas)


def _create_client(config: ChromaConfig):
    settings = Settings(anonymized_telemetry=False)
    if config.url:
        parsed = urlparse(config.url)
        ssl = parsed.scheme == "https"
        return chromadb.HttpClient(
            host=parsed.hostname or "localhost",
            port=parsed.port or (443 if ssl else 8000),
            ssl=ssl,
            settings=settings,
        )
    chromadb_path = Path(config.path).resolve()
    chromadb_path.mkdir(parents=True, exist_ok=True)
    return chromadb.PersistentClient(path=str(chromadb_path), settings=settings)


def open_document_store(config: ChromaConfig, embeddings: EmbeddingsPort) -> ChromaDocumentStore:
    """Connect to ChromaDB and open the indexed collection.

    Raises when the server is unreachable or the collection does not exist;
    the indexer must have created it.
    """
    logger.info("Connecting to ChromaDB: %s", config.url or config.path)
    client = _create_client(config)
    collection = client.get_collection(name=config.collection_name, embedding_function=None)
    logger.info('Collection "%s" connected', config.collection_name)
    return ChromaDocumentStore(collection, embeddings)
