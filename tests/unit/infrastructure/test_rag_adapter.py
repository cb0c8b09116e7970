"""Tests for the ChromaDB document store adapter."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domain.ports.config import ChromaConfig
from src.infrastructure.rag.chromadb_adapter import ChromaDocumentStore, open_document_store


@pytest.fixture
def collection():
    """Mock ChromaDB collection."""
    coll = MagicMock()
    coll.count.return_value = 3
    coll.get.return_value = {
        "documents": ["class Foo {}"],
        "metadatas": [{"filePath": "src/Foo.kt", "fileName": "Foo.kt", "chunkIndex": 0, "totalChunks": 2}],
    }
    coll.query.return_value = {
        "documents": [["fun a() = 1", "fun b() = 2"]],
        "metadatas": [[{"filePath": "src/A.kt", "fileName": "A.kt"}, None]],
    }
    return coll


@pytest.fixture
def embeddings():
    emb = MagicMock()
    emb.embed = AsyncMock(return_value=[0.1, 0.2])
    return emb


@pytest.fixture
def store(collection, embeddings):
    return ChromaDocumentStore(collection, embeddings)


class TestExactMatch:
    """Tests for metadata equality lookups."""

    @pytest.mark.asyncio
    async def test_by_path(self, store, collection):
        chunks = await store.exact_match(path="src/Foo.kt", limit=10)

        assert collection.get.call_args.kwargs["where"] == {"filePath": {"$eq": "src/Foo.kt"}}
        assert collection.get.call_args.kwargs["limit"] == 10
        assert chunks[0].content == "class Foo {}"
        assert chunks[0].metadata.source_path == "src/Foo.kt"
        assert chunks[0].metadata.file_name == "Foo.kt"
        assert chunks[0].metadata.total_chunks == 2

    @pytest.mark.asyncio
    async def test_by_name(self, store, collection):
        await store.exact_match(name="FooTest.kt", limit=5)
        assert collection.get.call_args.kwargs["where"] == {"fileName": {"$eq": "FooTest.kt"}}

    @pytest.mark.asyncio
    async def test_requires_path_or_name(self, store):
        with pytest.raises(ValueError):
            await store.exact_match(limit=5)


class TestSemanticQuery:
    """Tests for embedding-based queries."""

    @pytest.mark.asyncio
    async def test_query_by_embedding(self, store, collection, embeddings):
        """Queries with the embedded prompt, capped at the collection size."""
        chunks = await store.semantic_query("write a function", limit=100)

        embeddings.embed.assert_awaited_once_with("write a function")
        kwargs = collection.query.call_args.kwargs
        assert kwargs["query_embeddings"] == [[0.1, 0.2]]
        assert kwargs["n_results"] == 3
        assert [c.content for c in chunks] == ["fun a() = 1", "fun b() = 2"]
        assert chunks[1].metadata.file_name == ""

    @pytest.mark.asyncio
    async def test_blank_text(self, store, collection):
        assert await store.semantic_query("   ", limit=10) == []
        collection.query.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_embedding(self, store, collection, embeddings):
        embeddings.embed = AsyncMock(return_value=[])
        assert await store.semantic_query("text", limit=10) == []
        collection.query.assert_not_called()

    @pytest.mark.asyncio
    async def test_count(self, store):
        assert await store.count() == 3


class TestOpenDocumentStore:
    """Tests for connecting to ChromaDB."""

    def test_http_client_from_url(self, embeddings):
        with patch("src.infrastructure.rag.chromadb_adapter.chromadb") as mock_chromadb:
            store = open_document_store(
                ChromaConfig(url="https://chroma.internal:8443", collection_name="code_farm"),
                embeddings,
            )

        kwargs = mock_chromadb.HttpClient.call_args.kwargs
        assert kwargs["host"] == "chroma.internal"
        assert kwargs["port"] == 8443
        assert kwargs["ssl"] is True
        mock_chromadb.HttpClient.return_value.get_collection.assert_called_once_with(
            name="code_farm", embedding_function=None
        )
        assert isinstance(store, ChromaDocumentStore)

    def test_persistent_client_without_url(self, embeddings, tmp_path):
        with patch("src.infrastructure.rag.chromadb_adapter.chromadb") as mock_chromadb:
            open_document_store(ChromaConfig(url="", path=str(tmp_path / "db")), embeddings)

        mock_chromadb.PersistentClient.assert_called_once()
        assert (tmp_path / "db").is_dir()

    def test_missing_collection_raises(self, embeddings):
        with patch("src.infrastructure.rag.chromadb_adapter.chromadb") as mock_chromadb:
            mock_chromadb.HttpClient.return_value.get_collection.side_effect = ValueError("does not exist")
            with pytest.raises(ValueError):
                open_document_store(ChromaConfig(), embeddings)
