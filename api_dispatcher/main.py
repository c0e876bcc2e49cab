"""Application entrypoint."""

import asyncio
import logging
from collections.abc import Sequence

from api_dispatcher.adapters.driven.batch.decoder import load_batch_file
from api_dispatcher.adapters.driven.config.settings import load_settings
from api_dispatcher.adapters.driven.http.client import HttpRequestExecutor
from api_dispatcher.adapters.driven.logging.logging_config import (
    configure_logs,
    set_app_log_level,
)
from api_dispatcher.adapters.driven.metrics.http_metrics import Metrics
from api_dispatcher.adapters.driving.cli import USAGE, parse_args, settings_overrides
from api_dispatcher.adapters.driving.server import serve
from api_dispatcher.core.dispatcher import relay_outcomes
from api_dispatcher.ports.errors import BatchDecodeError
from api_dispatcher.ports.http import RequestDescriptor
from api_dispatcher.ports.settings import SettingsPort

__all__ = ["main", "run", "run_batch"]

logger = logging.getLogger(__name__)


async def main(argv: Sequence[str] | None = None) -> int:
    """Start the dispatcher in one-shot or server mode.

    Startup sequence:
    1. Parse flags and configure logging.
    2. Load and validate configuration (flags override environment).
    3. Either serve batches until SIGTERM, or dispatch the batch file once
       and print one line per outcome.

    Args:
        argv: Command-line arguments without the program name.

    Returns:
        Process exit status: 0 on success, 1 on a fatal startup error,
        2 when no mode was selected.
    """
    args = parse_args(argv)
    configure_logs()

    try:
        config = load_settings(overrides=settings_overrides(args))
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check DISPATCHER_REQUEST_TIMEOUT, DISPATCHER_MAX_CONCURRENCY, "
            "DISPATCHER_PORT and the --addr/--timeout/--max-concurrency flags.",
            exc,
        )
        return 1
    set_app_log_level(config.log_level)

    # Wrap config into port so adapters depend on the DTO, not on pydantic
    settings_port = SettingsPort(
        request_timeout_sec=config.request_timeout_sec,
        max_concurrency=config.max_concurrency,
        host=config.host,
        port=config.port,
    )

    if args.serve:
        try:
            await serve(settings_port)
        except OSError as exc:
            logger.error(f"Cannot start batch server on {config.host}:{config.port}: {exc}")
            return 1
        return 0

    if not config.batch_file_path:
        logger.error(USAGE)
        return 2

    try:
        batch = load_batch_file(config.batch_file_path)
    except BatchDecodeError as exc:
        logger.error(f"Error loading batch: {exc}")
        return 1

    await run_batch(batch, settings_port)
    return 0


async def _print_line(line: str) -> None:
    print(line, flush=True)


async def run_batch(batch: Sequence[RequestDescriptor], settings: SettingsPort) -> int:
    """Dispatch one batch and print each outcome line as it arrives.

    Args:
        batch: Descriptors to dispatch.
        settings: Runtime settings (timeout, concurrency cap).

    Returns:
        Number of outcome lines printed.
    """
    metrics = Metrics()
    async with HttpRequestExecutor(
        metrics=metrics, timeout_sec=settings.request_timeout_sec
    ) as executor:
        written = await relay_outcomes(
            batch,
            executor.execute,
            _print_line,
            max_concurrency=settings.max_concurrency,
        )

    logger.info(f"HTTP metrics: {metrics}")
    return written


def run() -> None:
    """Console-script entrypoint."""
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")


if __name__ == "__main__":
    run()
