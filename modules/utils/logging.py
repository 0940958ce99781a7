"""Logging helpers."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from config.settings import AppConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Gemini authenticates with ``?key=<secret>`` on the request URL.
_API_KEY_RE = re.compile(r"([?&]key=)[^&\s'\"]+")


class ApiKeyRedactingFilter(logging.Filter):
    """Mask API key query parameters before a record reaches any handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _API_KEY_RE.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def setup_logging(config: AppConfig) -> logging.Logger:
    """Configure root handlers at ``config.log_level`` and return the app logger."""
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    redactor = ApiKeyRedactingFilter()
    handlers: list[logging.Handler] = [
        logging.FileHandler(log_dir / "application.log", encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.addFilter(redactor)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    # urllib3 logs the full request URL at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logging.getLogger("forge_studio")
