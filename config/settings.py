"""Configuration helpers for the Forge Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_TIMEOUT = 120.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(RuntimeError):
    """Raised when the application cannot start with the given settings."""


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    api_base: str = DEFAULT_API_BASE
    request_timeout: float = DEFAULT_TIMEOUT
    assets_dir: Path = Path("assets")
    export_dir: Path = Path("exports")
    export_prefix: str = "forge"
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    default_preset: str = "forge-logo"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"REQUEST_TIMEOUT must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError("REQUEST_TIMEOUT must be positive")
    return value


def _parse_log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def load_config(config_path: Optional[str] = None, require_api_key: bool = True) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings.

    Raises ConfigurationError when no Gemini API key is available and
    ``require_api_key`` is set, so a missing secret stops the app before
    any request is attempted.
    """
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    if require_api_key and not api_key:
        raise ConfigurationError(
            "GEMINI_API_KEY is not set; add it to the environment or the .env file."
        )

    metadata: dict[str, Any] = {}
    if config_path:
        metadata["env_file"] = str(env_path)

    return AppConfig(
        gemini_api_key=api_key or None,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
        api_base=(os.getenv("GEMINI_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        request_timeout=_parse_timeout(os.getenv("REQUEST_TIMEOUT")),
        assets_dir=Path(os.getenv("ASSETS_DIR", "assets")),
        export_dir=Path(os.getenv("EXPORT_DIR", "exports")).expanduser(),
        log_dir=Path(os.getenv("LOG_DIR", "logs")).expanduser(),
        log_level=_parse_log_level(os.getenv("LOG_LEVEL")),
        metadata=metadata,
    )
