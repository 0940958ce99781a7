"""Logging setup tests."""

from __future__ import annotations

import logging
from pathlib import Path

from config.settings import AppConfig
from modules.utils.logging import ApiKeyRedactingFilter, setup_logging


def _capture_basic_config(monkeypatch) -> dict:
    captured: dict = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    return captured


def _close(handlers) -> None:
    for handler in handlers:
        handler.close()


def test_setup_logging_writes_to_log_dir(tmp_path, monkeypatch):
    captured = _capture_basic_config(monkeypatch)
    config = AppConfig(log_dir=tmp_path / "logs")

    logger = setup_logging(config)

    assert logger.name == "forge_studio"
    assert captured["level"] == logging.INFO
    file_handlers = [h for h in captured["handlers"] if isinstance(h, logging.FileHandler)]
    assert Path(file_handlers[0].baseFilename) == tmp_path / "logs" / "application.log"
    _close(captured["handlers"])


def test_setup_logging_honours_configured_level(tmp_path, monkeypatch):
    captured = _capture_basic_config(monkeypatch)

    setup_logging(AppConfig(log_dir=tmp_path, log_level="DEBUG"))

    assert captured["level"] == logging.DEBUG
    _close(captured["handlers"])


def test_every_handler_redacts_api_key(tmp_path, monkeypatch):
    captured = _capture_basic_config(monkeypatch)

    setup_logging(AppConfig(log_dir=tmp_path))

    for handler in captured["handlers"]:
        assert any(isinstance(f, ApiKeyRedactingFilter) for f in handler.filters)
    _close(captured["handlers"])


def test_redacting_filter_masks_key_parameter():
    record = logging.LogRecord(
        name="urllib3",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg="POST %s",
        args=("https://example.test/models/m:generateContent?key=secret-123&alt=json",),
        exc_info=None,
    )

    assert ApiKeyRedactingFilter().filter(record)

    message = record.getMessage()
    assert "secret-123" not in message
    assert "?key=***&alt=json" in message


def test_redacting_filter_leaves_other_records_alone():
    record = logging.LogRecord(
        name="forge", level=logging.INFO, pathname=__file__, lineno=1,
        msg="Received %s image", args=("image/png",), exc_info=None,
    )

    ApiKeyRedactingFilter().filter(record)

    assert record.args == ("image/png",)
    assert record.getMessage() == "Received image/png image"
