"""Application entry point."""

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.container import get_container
from src.api.dependencies import limiter, rate_limit
from src.api.routes.completions import router as completions_router
from src.domain.errors import (
    CodeContextError,
    MissingRequiredFieldError,
    StoreUninitializedError,
    UpstreamTransportError,
)
from src.shared.logging import setup_logging

log = structlog.get_logger()

_ERROR_STATUS: tuple[tuple[type[CodeContextError], int], ...] = (
    (MissingRequiredFieldError, 400),
    (StoreUninitializedError, 503),
    (UpstreamTransportError, 502),
)


def _apply_logging_config(container):
    """Apply logging from container config (stdout + optional file)."""
    c = container.config
    setup_logging(
        level=c.log_level,
        file_path=c.log_file or "",
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: setup logging, open the vector DB. Shutdown: close the Ollama client."""
    container = get_container()
    _apply_logging_config(container)
    log.info("startup_begin", ollama_host=container.config.ollama.host, model=container.config.ollama.model)
    store = await asyncio.to_thread(container.open_document_store)
    if store is None:
        # Chat requests fail with 503 until restart; generate runs without context
        log.warning("vector_db_unavailable", collection=container.config.chroma.collection_name)
    log.info("startup_complete", endpoints=["/api/chat", "/api/generate", "/api/embeddings"])
    yield
    log.info("shutdown_begin")
    if hasattr(container.llm, "close"):
        try:
            await container.llm.close()
        except Exception:  # noqa: BLE001
            log.debug("llm_close_error", exc_info=True)
    log.info("shutdown_complete")


async def _domain_error_handler(request: Request, exc: CodeContextError) -> JSONResponse:
    """Map domain errors to status codes."""
    status = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
    log.warning("request_failed", path=request.url.path, status=status, error=str(exc))
    return JSONResponse(status_code=status, content={"error": str(exc)})


# Create app
app = FastAPI(
    title="Code Context Proxy",
    version="0.1.0",
    description="Ollama proxy that augments completions with code from a vector DB",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(CodeContextError, _domain_error_handler)

# CORS
container = get_container()
app.add_middleware(
    CORSMiddleware,
    allow_origins=container.config.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(completions_router)


@app.get("/health")
@limiter.limit(rate_limit)
async def health(request: Request) -> dict:
    """Health check with vector DB and Ollama availability."""
    container = get_container()
    store = container.document_store
    total_chunks = None
    if store is not None:
        try:
            total_chunks = await store.count()
        except Exception as e:  # noqa: BLE001
            log.warning("health_count_failed", error=str(e))
    llm_available = await container.llm.is_available()
    return {
        "status": "ok",
        "service": "code-context-proxy",
        "vector_db_initialized": store is not None,
        "total_chunks": total_chunks,
        "llm_available": llm_available,
    }
