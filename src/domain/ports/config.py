"""Application configuration models."""

from pydantic import BaseModel


class OllamaConfig(BaseModel):
    """Ollama connection configuration."""

    host: str = "http://localhost:11434"
    model: str = "qwen2.5-coder:7b-instruct-q4_K_M"
    # Must be the model the indexer embedded chunks with.
    embedding_model: str = "qwen2.5-coder:7b-instruct-q4_K_M"
    timeout: int = 120


class ChromaConfig(BaseModel):
    """ChromaDB connection settings.

    When url is set the service talks to a ChromaDB server; otherwise it opens
    the persistent collection stored under path.
    """

    url: str = "http://localhost:8000"
    path: str = "output/chromadb"
    collection_name: str = "code_farm"


class RetrievalConfig(BaseModel):
    """Retrieval engine tunables."""

    max_results: int = 10  # Ranked chunks returned, also the exact-match query limit
    general_query_threshold: int = 5  # Below this many candidates, fall back to semantic search
    general_query_limit: int = 100


class SecurityConfig(BaseModel):
    """Security settings."""

    rate_limit_requests_per_minute: int = 100
    cors_origins: list[str] = ["*"]


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 3000


class AppConfig(BaseModel):
    """Full application configuration."""

    server: ServerConfig = ServerConfig()
    ollama: OllamaConfig = OllamaConfig()
    chroma: ChromaConfig = ChromaConfig()
    retrieval: RetrievalConfig = RetrievalConfig()
    security: SecurityConfig = SecurityConfig()
    log_level: str = "INFO"
    # Log file: path relative to cwd or absolute. Empty = only stdout. Rotation when file exceeds max_mb.
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3
