"""Tests for logging setup."""

import logging
from collections.abc import Iterator

import pytest

from api_dispatcher.adapters.driven.logging.logging_config import (
    configure_logs,
    set_app_log_level,
)

__all__ = []

LOGGER_NAMES = ("", "aiohttp", "asyncio", "api_dispatcher")


@pytest.fixture(autouse=True)
def restore_loggers() -> Iterator[None]:
    """Restore logger levels and root handlers after each test."""
    levels = {name: logging.getLogger(name).level for name in LOGGER_NAMES}
    handlers = list(logging.getLogger().handlers)
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
    logging.getLogger().handlers[:] = handlers


def test_configure_logs_sets_levels() -> None:
    """Application loggers should follow the given level, frameworks stay quiet."""
    configure_logs("debug")

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("api_dispatcher").level == logging.DEBUG
    assert logging.getLogger("aiohttp").level == logging.WARNING
    assert logging.getLogger("asyncio").level == logging.WARNING


def test_configure_logs_writes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """Log records should reach stderr and leave stdout to outcome lines."""
    configure_logs()

    logging.getLogger("api_dispatcher.core.dispatcher").info("Batch finished")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[INFO] api_dispatcher.core.dispatcher" in captured.err
    assert "Batch finished" in captured.err


def test_set_app_log_level() -> None:
    """set_app_log_level should only change the application loggers."""
    configure_logs()

    set_app_log_level("warning")

    assert logging.getLogger("api_dispatcher").level == logging.WARNING
    assert logging.getLogger().level == logging.INFO
