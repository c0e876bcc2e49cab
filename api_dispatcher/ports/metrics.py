"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["HttpAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class HttpAttemptDto:
    """Immutable snapshot of a single request execution.

    Attributes:
        started_at_sec: Monotonic seconds when the request left the process.
        finished_at_sec: Monotonic seconds when the outcome was known.
        is_failed: True on a stage failure or a status >= 400.
        status_code: HTTP status code when a response arrived; None otherwise.
    """

    started_at_sec: float
    finished_at_sec: float
    is_failed: bool = False
    status_code: int | None = None


class MetricsPort(Protocol):
    """Interface for recording request execution metrics.

    Implementations must be async-safe and non-blocking.
    The executor calls update() after each execution; callers use
    __str__() to render summaries.
    """

    def update(self, attempt: HttpAttemptDto, /) -> None:
        """Record a finished execution.

        Args:
            attempt: The execution to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
