"""Logging setup for the batch dispatcher.

Diagnostics go to stderr through the root logger. Outcome lines are never
logged: the one-shot path prints them on stdout and the server streams them
in the response body, so logs can be raised to DEBUG without corrupting
either output.
"""

import logging

__all__ = ["configure_logs", "set_app_log_level"]


def configure_logs(level: str = "INFO") -> None:
    """Configure console logging on stderr.

    Outcome lines are written to stdout by the one-shot path, so logs stay
    on stderr and never mix with them.

    Sets up:
    - Root logger at INFO level.
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (api_dispatcher) at the given level.

    Args:
        level: Level name for the application loggers.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_format, date_format))

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("api_dispatcher").setLevel(level.upper())


def set_app_log_level(level: str) -> None:
    """Change the level of the application loggers once settings are known."""
    logging.getLogger("api_dispatcher").setLevel(level.upper())
