"""Document Store Port - interface for the indexed code chunk store."""

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class ChunkMetadata(BaseModel):
    """Metadata the indexer attaches to every chunk.

    Stored keys are camelCase (filePath, fileName, ...), as written by the indexer.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    source_path: str = Field("", alias="filePath")
    file_name: str = Field("", alias="fileName")
    file_extension: str = Field("", alias="fileExtension")
    chunk_index: int = Field(0, alias="chunkIndex")
    total_chunks: int = Field(1, alias="totalChunks")


class CodeChunk(BaseModel):
    """A contiguous slice of a source file persisted as a retrievable unit."""

    model_config = ConfigDict(frozen=True)

    content: str
    metadata: ChunkMetadata = ChunkMetadata()


class DocumentStorePort(Protocol):
    """Interface for chunk stores (ChromaDB, etc.)."""

    async def exact_match(
        self,
        *,
        path: str | None = None,
        name: str | None = None,
        limit: int = 10,
    ) -> list[CodeChunk]:
        """Chunks whose stored path (or file name) equals the given value."""
        ...

    async def semantic_query(self, text: str, limit: int) -> list[CodeChunk]:
        """Nearest-neighbour chunks for text, in store order."""
        ...

    async def count(self) -> int:
        """Number of stored chunks."""
        ...
