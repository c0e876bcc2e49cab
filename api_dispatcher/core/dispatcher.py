"""Concurrent dispatch of a request batch into one outcome stream."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence

from api_dispatcher.ports.http import ExecuteFn, RequestDescriptor
from api_dispatcher.ports.outcome import Failure, Outcome, Stage, render_outcome

__all__ = ["dispatch", "relay_outcomes"]

logger = logging.getLogger(__name__)


async def dispatch(
    batch: Sequence[RequestDescriptor],
    execute_fn: ExecuteFn,
    *,
    max_concurrency: int | None = None,
) -> AsyncIterator[Outcome]:
    """Execute every descriptor concurrently and yield outcomes as they arrive.

    Fan-out / fan-in:
    1. Start one asyncio.Task per descriptor right away.
    2. Each task publishes exactly one outcome into a shared queue.
    3. The generator counts outcomes and yields each one as soon as it is
       published, in completion order.
    4. After len(batch) outcomes the stream ends.

    Args:
        batch: Descriptors to execute. Borrowed for the duration of the call.
        execute_fn: Async capability executing one descriptor.
        max_concurrency: Cap on executions running at once; None means one
            concurrent execution per descriptor.

    Yields:
        One outcome per descriptor, in no guaranteed order.

    Notes:
        - Outcomes carry all failure information; dispatch itself never fails.
        - There is no abort: if the consumer stops early, the generator still
          waits for every launched execution before closing.
    """
    descriptors = tuple(batch)
    expected = len(descriptors)
    if max_concurrency is not None and max_concurrency <= 0:
        raise ValueError(f"max_concurrency must be positive (got: {max_concurrency})")
    if expected == 0:
        return

    completed: asyncio.Queue[Outcome] = asyncio.Queue()
    gate = asyncio.Semaphore(max_concurrency) if max_concurrency else contextlib.nullcontext()
    loop = asyncio.get_running_loop()

    async def _run_one(descriptor: RequestDescriptor) -> None:
        """Run one execution and publish exactly one outcome."""
        try:
            async with gate:
                outcome = await execute_fn(descriptor)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Executor raised for {descriptor.target}: {e}", exc_info=True)
            outcome = Failure(
                target=descriptor.target,
                stage=Stage.TRANSMISSION,
                message=str(e) or e.__class__.__name__,
            )
        completed.put_nowait(outcome)

    tasks = [loop.create_task(_run_one(d)) for d in descriptors]
    logger.debug(f"Dispatched {expected} requests (max_concurrency={max_concurrency})")

    try:
        for _ in range(expected):
            yield await completed.get()
    finally:
        await asyncio.gather(*tasks, return_exceptions=True)


async def relay_outcomes(
    batch: Sequence[RequestDescriptor],
    execute_fn: ExecuteFn,
    write_line: Callable[[str], Awaitable[None]],
    *,
    max_concurrency: int | None = None,
) -> int:
    """Dispatch a batch and write each rendered outcome line as it arrives.

    Args:
        batch: Descriptors to execute.
        execute_fn: Async capability executing one descriptor.
        write_line: Async sink receiving one line per outcome (no newline).
        max_concurrency: Optional cap on concurrent executions.

    Returns:
        Number of lines written, always len(batch).
    """
    written = 0
    failed = 0
    async for outcome in dispatch(batch, execute_fn, max_concurrency=max_concurrency):
        if isinstance(outcome, Failure):
            failed += 1
        await write_line(render_outcome(outcome))
        written += 1

    logger.info(f"Batch finished: {written} outcomes, {failed} failed")
    return written
