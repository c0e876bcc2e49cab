"""Signal handling for graceful server shutdown."""

import asyncio
import logging
import signal

__all__ = ["make_stop_event"]

logger = logging.getLogger(__name__)


def make_stop_event() -> asyncio.Event:
    """Create an event set on SIGTERM or SIGINT.

    The server path awaits it and then shuts the listener down. On
    Docker/Kubernetes, SIGTERM is sent 30s before SIGKILL, which leaves
    in-flight batches time to finish.

    Returns:
        Event that becomes set once a termination signal is received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        logger.info("Termination signal received, initiating graceful shutdown...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return stop
