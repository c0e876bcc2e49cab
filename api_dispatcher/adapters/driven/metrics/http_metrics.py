"""In-memory sliding-window metrics for request executions."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from api_dispatcher.ports.metrics import HttpAttemptDto, MetricsPort

__all__ = ["Metrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one execution."""

    latency_ms: float
    failed: bool
    status_code: int


class Metrics(MetricsPort):
    """Lock-free execution metrics for async context.

    Tracks, over a window of recent executions:
    - Average and slowest latency (send to outcome).
    - Failure rate (stage failures or HTTP errors).
    - Last status code (0 when no response arrived).

    and, since creation, total executions and failures.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent executions to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0
        self._total_failed: int = 0

    @property
    def total_seen(self) -> int:
        return self._total_seen

    @property
    def total_failed(self) -> int:
        return self._total_failed

    def update(self, attempt: HttpAttemptDto) -> None:
        """Record a finished execution.

        Args:
            attempt: Execution with timing and result info.
        """
        self._window.append(
            _Sample(
                latency_ms=(attempt.finished_at_sec - attempt.started_at_sec) * 1_000.0,
                failed=attempt.is_failed,
                status_code=attempt.status_code or 0,
            )
        )
        self._total_seen += 1
        if attempt.is_failed:
            self._total_failed += 1

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        latencies = [s.latency_ms for s in self._window]
        fail_pct = sum(1 for s in self._window if s.failed) / len(self._window) * 100

        return (
            f"latency avg={statistics.fmean(latencies):.1f} ms max={max(latencies):.1f} ms | "
            f"status={self._window[-1].status_code:3d} | "
            f"fail={fail_pct:5.1f}% | "
            f"win={len(self._window)}/{self._window.maxlen} | "
            f"total={self._total_seen} failed={self._total_failed}"
        )
