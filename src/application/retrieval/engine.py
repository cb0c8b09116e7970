"""Retrieval engine - multi-strategy code context search over the document store.

Strategies run in order, each only when the previous ones found too little:

1. exact path from the prompt's "File Path:" marker (import-only chunks dropped)
2. base file name (import-only chunks dropped)
3. probable test-file names (when the prompt mentions tests or nothing was found)
4. semantic query on the raw prompt

Results are merged without duplicate content, weighted by language and
file-name similarity, and the heaviest chunks are joined into one context
string.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable

from src.domain.errors import StoreUninitializedError
from src.domain.ports.config import RetrievalConfig
from src.domain.ports.document_store import CodeChunk, DocumentStorePort
from src.domain.services.code_paths import (
    extract_file_path,
    file_name,
    file_stem,
    has_test_keywords,
    language_for_path,
    language_from_keywords,
    probable_test_file_names,
    starts_with_import,
)
from src.domain.services.ranking import rank

logger = logging.getLogger(__name__)

STORE_EMPTY_MESSAGE = "No code has been indexed yet. Run the indexer to populate the vector DB."
NO_CONTEXT_MESSAGE = "No relevant code context was found."
CONTEXT_SEPARATOR = "\n\n"


class MergedChunks:
    """Ordered chunk collection that keeps the first chunk for each content."""

    def __init__(self) -> None:
        self._chunks: list[CodeChunk] = []
        self._seen: set[str] = set()

    def extend(self, chunks: Iterable[CodeChunk]) -> int:
        """Add unseen chunks in order. Returns how many were added."""
        added = 0
        for chunk in chunks:
            if chunk.content in self._seen:
                continue
            self._seen.add(chunk.content)
            self._chunks.append(chunk)
            added += 1
        return added

    def __len__(self) -> int:
        return len(self._chunks)

    def to_list(self) -> list[CodeChunk]:
        return list(self._chunks)


class RetrievalEngine:
    """Finds and ranks indexed code relevant to a prompt."""

    def __init__(self, config: RetrievalConfig) -> None:
        self._config = config

    async def retrieve(self, store: DocumentStorePort | None, prompt_text: str) -> str:
        """Return ranked chunk contents joined by a blank line, or a diagnostic.

        Raises StoreUninitializedError when there is no store or it cannot be counted.
        """
        if store is None:
            raise StoreUninitializedError()
        try:
            total = await store.count()
        except Exception as e:
            logger.error("Document store count failed: %s", e)
            raise StoreUninitializedError(f"Vector DB is unavailable: {e}") from e
        if total == 0:
            return STORE_EMPTY_MESSAGE

        target_path = extract_file_path(prompt_text)
        if target_path:
            target_language = language_for_path(target_path)
        else:
            target_language = language_from_keywords(prompt_text)

        chunks = await self.collect(store, prompt_text, target_path)
        if not chunks:
            logger.info("No context found (path=%s, language=%s)", target_path, target_language)
            return NO_CONTEXT_MESSAGE

        target_name = file_stem(target_path) if target_path else None
        ranked = rank(chunks, target_name, target_language, self._config.max_results)
        logger.info(
            "Retrieved %d candidates, returning %d (path=%s, language=%s)",
            len(chunks),
            len(ranked),
            target_path,
            target_language,
        )
        return CONTEXT_SEPARATOR.join(c.chunk.content for c in ranked)

    async def collect(
        self,
        store: DocumentStorePort,
        prompt_text: str,
        target_path: str | None,
    ) -> list[CodeChunk]:
        """Run the search strategies and merge their results, before ranking."""
        limit = self._config.max_results
        merged = MergedChunks()

        if target_path:
            found = await self._query("exact_path", lambda: store.exact_match(path=target_path, limit=limit))
            merged.extend(c for c in found if not starts_with_import(c.content))

            if len(merged) < limit:
                name = file_name(target_path)
                found = await self._query("file_name", lambda: store.exact_match(name=name, limit=limit))
                merged.extend(c for c in found if not starts_with_import(c.content))

            if has_test_keywords(prompt_text) or not merged:
                for test_name in probable_test_file_names(target_path):
                    merged.extend(
                        await self._query(
                            "test_file",
                            lambda test_name=test_name: store.exact_match(name=test_name, limit=limit),
                        )
                    )

        if len(merged) < self._config.general_query_threshold:
            merged.extend(
                await self._query(
                    "general",
                    lambda: store.semantic_query(prompt_text, self._config.general_query_limit),
                )
            )

        return merged.to_list()

    async def _query(
        self,
        strategy: str,
        call: Callable[[], Awaitable[list[CodeChunk]]],
    ) -> list[CodeChunk]:
        """Run one store query; a failure counts as no results."""
        try:
            return list(await call())
        except Exception as e:
            logger.warning("Retrieval strategy %s failed: %s", strategy, e)
            return []
