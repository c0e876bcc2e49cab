"""Configuration loading from environment variables and command-line overrides."""

import logging
import os
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

__all__ = ["Settings", "load_settings", "parse_addr"]

load_dotenv()

logger = logging.getLogger(__name__)

_ENV_VARS = {
    "request_timeout_sec": "DISPATCHER_REQUEST_TIMEOUT",
    "max_concurrency": "DISPATCHER_MAX_CONCURRENCY",
    "host": "DISPATCHER_HOST",
    "port": "DISPATCHER_PORT",
    "batch_file_path": "DISPATCHER_BATCH_FILE",
    "log_level": "DISPATCHER_LOG_LEVEL",
}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    """Runtime configuration for the dispatcher.

    Attributes:
        request_timeout_sec: Total timeout of one request in seconds.
        max_concurrency: Cap on concurrent executions; None means unbounded.
        host: Bind host of the batch server.
        port: Bind port of the batch server.
        batch_file_path: Batch file dispatched in one-shot mode.
        log_level: Level of the application loggers.
    """

    request_timeout_sec: float = Field(30.0, gt=0, description="Per-request timeout in seconds.")
    max_concurrency: int | None = Field(
        default=None,
        gt=0,
        description="Maximum concurrent executions. If not set, every request runs at once.",
    )
    host: str = Field("0.0.0.0", description="Server bind host.")
    port: int = Field(8080, gt=0, lt=65536, description="Server bind port.")
    batch_file_path: str | None = Field(default=None, description="Batch file for one-shot mode.")
    log_level: str = Field("INFO", description="Application log level.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name.

        Args:
            v: Level name, any case.

        Returns:
            Upper-cased level name.

        Raises:
            ValueError: If the level is unknown.
        """
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level {v!r}; expected one of {', '.join(_LOG_LEVELS)}")
        return level


def parse_addr(addr: str) -> tuple[str | None, int]:
    """Split a ``host:port`` listen address.

    An empty host (``":8080"``) means the configured default host.

    Args:
        addr: Address to split.

    Returns:
        Tuple of (host or None, port).

    Raises:
        ValueError: If the port part is missing or not an integer.
    """
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be HOST:PORT (got: {addr})")
    try:
        port_number = int(port)
    except ValueError as e:
        raise ValueError(f"Listen port must be an integer (got: {port})") from e
    return (host.strip("[]") or None), port_number


def load_settings(
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load and validate settings from environment and overrides.

    Optional environment variables:
    - DISPATCHER_REQUEST_TIMEOUT: Positive number of seconds (default 30).
    - DISPATCHER_MAX_CONCURRENCY: Positive integer (default unbounded).
    - DISPATCHER_HOST / DISPATCHER_PORT: Server bind address (0.0.0.0:8080).
    - DISPATCHER_BATCH_FILE: Batch file for one-shot mode.
    - DISPATCHER_LOG_LEVEL: Application log level (INFO).

    Overrides (typically command-line flags) win over the environment;
    None values are ignored.

    Args:
        overrides: Field name to value.
        environ: Environment to read; defaults to os.environ.

    Returns:
        Validated Settings object.

    Raises:
        ValueError: If configuration is invalid.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {
        field: env[var] for field, var in _ENV_VARS.items() if env.get(var, "").strip()
    }
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    settings = Settings(**values)

    logger.info(
        f"Dispatcher configured: timeout={settings.request_timeout_sec}s, "
        f"max_concurrency={settings.max_concurrency or '<unbounded>'}, "
        f"listen={settings.host}:{settings.port}, "
        f"batch_file={settings.batch_file_path or '<none>'}"
    )

    return settings
