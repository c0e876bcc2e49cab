"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["SettingsPort"]


@dataclass
class SettingsPort:
    """Runtime settings for dispatching batches.

    Decouples the driving adapters from concrete configuration sources.

    Attributes:
        request_timeout_sec: Total timeout of one request in seconds.
        max_concurrency: Cap on concurrent executions; None means unbounded.
        host: Bind host of the batch server.
        port: Bind port of the batch server.
    """

    request_timeout_sec: float
    max_concurrency: int | None = None
    host: str = "0.0.0.0"
    port: int = 8080
