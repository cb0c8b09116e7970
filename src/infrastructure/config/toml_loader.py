"""TOML configuration loader.

Sources, later wins: config/default.toml, config/development.toml, then
environment variables (OLLAMA_BASE_URL, CHROMA_URL, COLLECTION_NAME,
PORT, ...).
"""

import logging
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from src.domain.ports.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"


def _origins(value: str) -> list[str]:
    return [o.strip() for o in value.split(",") if o.strip()]


# (env var, section, key, parser). Applied in order, so OLLAMA_BASE_URL beats OLLAMA_HOST.
_ENV_OVERRIDES: tuple[tuple[str, str, str, Callable[[str], Any]], ...] = (
    ("OLLAMA_HOST", "ollama", "host", str.strip),
    ("OLLAMA_BASE_URL", "ollama", "host", str.strip),
    ("OLLAMA_MODEL", "ollama", "model", str.strip),
    ("OLLAMA_EMBEDDING_MODEL", "ollama", "embedding_model", str.strip),
    ("CHROMA_URL", "chroma", "url", str.strip),
    ("CHROMA_PATH", "chroma", "path", str.strip),
    ("COLLECTION_NAME", "chroma", "collection_name", str.strip),
    ("PORT", "server", "port", int),
    ("LOG_LEVEL", "logging", "level", str.upper),
    ("LOG_FILE", "logging", "file", str.strip),
    ("CORS_ORIGINS", "security", "cors_origins", _origins),
    ("RATE_LIMIT_PER_MINUTE", "security", "rate_limit_requests_per_minute", int),
)


def _read_toml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


def _merge_sections(base: dict, override: dict) -> dict:
    """Shallow per-section merge: override's keys replace base's within a table."""
    merged = dict(base)
    for section, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(section), dict):
            merged[section] = {**merged[section], **value}
        else:
            merged[section] = value
    return merged


def _apply_env_overrides(config: dict) -> dict:
    """Overlay environment variables onto raw config sections."""
    for env_var, section, key, parse in _ENV_OVERRIDES:
        raw = os.getenv(env_var)
        if not raw:
            continue
        try:
            value = parse(raw)
        except ValueError:
            logger.warning("Invalid %s env value: %r, ignoring", env_var, raw)
            continue
        config.setdefault(section, {})[key] = value
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Build AppConfig from default.toml, development.toml and the environment."""
    config_dir = config_dir or DEFAULT_CONFIG_DIR
    raw = _merge_sections(
        _read_toml(config_dir / "default.toml"),
        _read_toml(config_dir / "development.toml"),
    )
    raw = _apply_env_overrides(raw)

    log_section = raw.pop("logging", None) or {}
    return AppConfig.model_validate(
        {
            **{name: section for name, section in raw.items() if section},
            "log_level": log_section.get("level", "INFO"),
            "log_file": (log_section.get("file") or "").strip(),
            "log_rotation_max_mb": int(log_section.get("log_rotation_max_mb", 5)),
            "log_rotation_backups": int(log_section.get("log_rotation_backups", 3)),
        }
    )
