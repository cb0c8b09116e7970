"""Candidate ranking - language and file-name weighting."""

from dataclasses import dataclass

from src.domain.ports.document_store import CodeChunk
from src.domain.services.code_paths import (
    UNKNOWN_LANGUAGE,
    file_stem,
    language_for_extension,
    language_for_path,
    name_distance,
)

SAME_LANGUAGE_FACTOR = 3
OTHER_LANGUAGE_FACTOR = 1
MAX_SIMILARITY = 5


@dataclass(frozen=True)
class SearchCandidate:
    """A chunk with its relevance weight (higher ranks first)."""

    chunk: CodeChunk
    weight: float


def chunk_language(chunk: CodeChunk) -> str:
    """Language of a stored chunk, from its extension or file name."""
    meta = chunk.metadata
    if meta.file_extension:
        return language_for_extension(meta.file_extension)
    return language_for_path(meta.file_name or meta.source_path)


def language_factor(candidate_language: str, target_language: str) -> int:
    """3 for a known language match, 1 otherwise."""
    if target_language != UNKNOWN_LANGUAGE and candidate_language == target_language:
        return SAME_LANGUAGE_FACTOR
    return OTHER_LANGUAGE_FACTOR


def similarity_factor(distance: int) -> int:
    """max(5 - distance, 1)."""
    return max(MAX_SIMILARITY - distance, 1)


def weigh(chunk: CodeChunk, target_name: str | None, target_language: str) -> float:
    """Relevance weight of a chunk for the requested file."""
    lang = language_factor(chunk_language(chunk), target_language)
    if not target_name:
        return float(lang)
    candidate_name = file_stem(chunk.metadata.file_name or chunk.metadata.source_path)
    return float(lang * similarity_factor(name_distance(candidate_name, target_name)))


def rank(
    chunks: list[CodeChunk],
    target_name: str | None,
    target_language: str,
    limit: int,
) -> list[SearchCandidate]:
    """Weigh chunks and return the top `limit`, heaviest first.

    The sort is stable, so equal weights keep discovery order.
    """
    candidates = [SearchCandidate(chunk, weigh(chunk, target_name, target_language)) for chunk in chunks]
    candidates.sort(key=lambda c: c.weight, reverse=True)
    return candidates[:limit]
