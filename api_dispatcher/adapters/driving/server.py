"""Batch server: accepts a batch over HTTP and streams outcome lines back."""

import logging
from collections.abc import AsyncIterator

from aiohttp import web

from api_dispatcher.adapters.driven.batch.decoder import decode_batch
from api_dispatcher.adapters.driven.http.client import HttpRequestExecutor
from api_dispatcher.adapters.driven.metrics.http_metrics import Metrics
from api_dispatcher.adapters.driving.signals import make_stop_event
from api_dispatcher.core.dispatcher import relay_outcomes
from api_dispatcher.ports.errors import BatchDecodeError
from api_dispatcher.ports.http import ExecuteFn
from api_dispatcher.ports.settings import SettingsPort

__all__ = ["create_app", "serve", "handle_batch"]

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", SettingsPort)
EXECUTE_FN_KEY: web.AppKey[ExecuteFn] = web.AppKey("execute_fn")
METRICS_KEY = web.AppKey("metrics", Metrics)


async def _executor_ctx(app: web.Application) -> AsyncIterator[None]:
    """Own one HTTP executor (and its session) for the app lifetime."""
    settings = app[SETTINGS_KEY]
    metrics = Metrics()
    async with HttpRequestExecutor(
        metrics=metrics, timeout_sec=settings.request_timeout_sec
    ) as executor:
        app[EXECUTE_FN_KEY] = executor.execute
        app[METRICS_KEY] = metrics
        yield


async def handle_batch(request: web.Request) -> web.StreamResponse:
    """Dispatch the batch in the request body and stream one line per outcome.

    Lines are written and flushed as outcomes arrive, so the caller can
    read them before the whole batch is done.

    Args:
        request: Incoming request; only POST is accepted.

    Returns:
        Streamed text/plain response.

    Raises:
        web.HTTPMethodNotAllowed: If the method is not POST.
        web.HTTPBadRequest: If the body cannot be read or decoded.
    """
    if request.method != "POST":
        raise web.HTTPMethodNotAllowed(
            request.method, ["POST"], text="Only POST method is supported"
        )

    try:
        raw = await request.read()
    except OSError as e:
        logger.warning(f"Failed to read batch from {request.remote}: {e}")
        raise web.HTTPBadRequest(text="Failed to read request body") from e

    try:
        batch = decode_batch(raw)
    except BatchDecodeError as e:
        logger.warning(f"Rejected batch from {request.remote}: {e}")
        raise web.HTTPBadRequest(text="Failed to parse request body") from e

    app = request.app
    logger.info(f"Dispatching batch of {len(batch)} requests from {request.remote}")

    response = web.StreamResponse()
    response.content_type = "text/plain"
    response.charset = "utf-8"
    await response.prepare(request)

    async def write_line(line: str) -> None:
        await response.write(f"{line}\n".encode())

    try:
        await relay_outcomes(
            batch,
            app[EXECUTE_FN_KEY],
            write_line,
            max_concurrency=app[SETTINGS_KEY].max_concurrency,
        )
    except ConnectionResetError:
        logger.warning(f"Client {request.remote} disconnected before the batch finished")
        return response

    if METRICS_KEY in app:
        logger.info(f"HTTP metrics: {app[METRICS_KEY]}")

    await response.write_eof()
    return response


def create_app(settings: SettingsPort, execute_fn: ExecuteFn | None = None) -> web.Application:
    """Build the batch server application.

    Args:
        settings: Runtime settings (timeout, concurrency cap).
        execute_fn: Capability executing one request; when omitted the app
            owns an HttpRequestExecutor for its whole lifetime.

    Returns:
        aiohttp application answering on every path.
    """
    app = web.Application()
    app[SETTINGS_KEY] = settings
    if execute_fn is None:
        app.cleanup_ctx.append(_executor_ctx)
    else:
        app[EXECUTE_FN_KEY] = execute_fn
    app.router.add_route("*", "/{tail:.*}", handle_batch)
    return app


async def serve(settings: SettingsPort) -> None:
    """Run the batch server until SIGTERM or SIGINT.

    Args:
        settings: Runtime settings including the bind address.

    Raises:
        OSError: If the listener cannot bind.
    """
    runner = web.AppRunner(create_app(settings))
    await runner.setup()
    try:
        site = web.TCPSite(runner, settings.host, settings.port)
        await site.start()
        logger.info(f"Accepting batches on http://{settings.host}:{settings.port}")
        await make_stop_event().wait()
    finally:
        await runner.cleanup()
    logger.info("Batch server stopped.")
