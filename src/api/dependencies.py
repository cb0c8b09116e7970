"""FastAPI dependencies - resolved from the DI container."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.api.container import get_container
from src.application.completion.use_case import CompletionUseCase
from src.domain.ports.config import AppConfig

limiter = Limiter(key_func=get_remote_address)


def get_config() -> AppConfig:
    """Configuration of the global container (loaded once)."""
    return get_container().config


def rate_limit() -> str:
    """Per-client request limit from config, e.g. '100/minute'."""
    return f"{get_config().security.rate_limit_requests_per_minute}/minute"


def get_completion_use_case() -> CompletionUseCase:
    """Completion use case from the global container."""
    return get_container().completion_use_case
