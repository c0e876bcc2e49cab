"""HTTP request executor adapter with metrics integration."""

import asyncio
import errno
import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientResponse, ClientTimeout

from api_dispatcher.adapters.driven.http.request_builder import (
    OutboundRequest,
    apply_headers,
    build_request,
)
from api_dispatcher.ports.errors import DispatchStageError, ResponseReadError, TransmissionError
from api_dispatcher.ports.http import RequestDescriptor
from api_dispatcher.ports.metrics import HttpAttemptDto, MetricsPort
from api_dispatcher.ports.outcome import Failure, Outcome, Success

__all__ = ["HttpRequestExecutor"]

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0
FIRST_FAILING_HTTP_CODE = 400


def describe_error(exc: BaseException) -> str:
    """Return a readable message for an exception, even an empty one."""
    return str(exc) or exc.__class__.__name__


def _is_refused(os_error: OSError) -> bool:
    return isinstance(os_error, ConnectionRefusedError) or os_error.errno == errno.ECONNREFUSED


class HttpRequestExecutor:
    """Execute request descriptors over one shared aiohttp session.

    Features:
    - Every failure is returned as a Failure outcome, never raised.
    - One network round trip per request, no retries.
    - Metrics collection (latency, failure rate).
    - Context manager for proper resource cleanup.

    The session is shared by all concurrent executions; aiohttp makes this
    safe for tasks running on the loop that created it.
    """

    def __init__(
        self,
        metrics: MetricsPort | None = None,
        *,
        timeout_sec: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the executor.

        Args:
            metrics: Optional metrics collector to track executions.
            timeout_sec: Total timeout of one request in seconds.
        """
        self.metrics = metrics
        self.timeout = ClientTimeout(total=timeout_sec)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpRequestExecutor":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()

    async def _transmit(self, req: OutboundRequest) -> ClientResponse:
        """Send one request and wait for the response headers.

        Args:
            req: Constructed request with headers applied.

        Returns:
            HTTP response whose body has not been read yet.

        Raises:
            TransmissionError: On any transport-level error, or if the session
                is not initialized.
        """
        if self.session is None:
            raise TransmissionError("session not initialized; use 'async with' context manager")
        try:
            return await self.session.request(
                req.method,
                req.url,
                headers=req.headers,
                data=req.payload,
                timeout=self.timeout,
            )
        except aiohttp.ClientConnectorError as e:
            if _is_refused(e.os_error):
                raise TransmissionError("connection refused") from e
            raise TransmissionError(describe_error(e)) from e
        except asyncio.TimeoutError as e:
            raise TransmissionError(f"request timed out after {self.timeout.total}s") from e
        except Exception as e:  # noqa: BLE001
            raise TransmissionError(describe_error(e)) from e

    @staticmethod
    async def _read_body(resp: ClientResponse) -> str:
        """Read the whole response body and release the connection.

        Raises:
            ResponseReadError: If the body cannot be read.
        """
        try:
            raw = await resp.read()
        except Exception as e:  # noqa: BLE001
            raise ResponseReadError(describe_error(e)) from e
        finally:
            resp.release()
        return raw.decode(resp.charset or "utf-8", errors="replace")

    async def execute(self, descriptor: RequestDescriptor) -> Outcome:
        """Execute one descriptor and return its outcome.

        Args:
            descriptor: Request to execute.

        Returns:
            Success with the response body, or Failure tagged with the stage
            at which the request failed. Never raises for a failed request,
            including when called outside the context manager.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        status_code: int | None = None

        try:
            req = build_request(descriptor)
            apply_headers(req, descriptor.headers)
            resp = await self._transmit(req)
            status_code = resp.status
            body = await self._read_body(resp)
        except DispatchStageError as e:
            logger.warning(f"{e.stage} failed for {descriptor.target}: {e.message}")
            self._record(started, is_failed=True, status_code=status_code)
            return Failure(target=descriptor.target, stage=e.stage, message=e.message)

        logger.debug(f"{descriptor.target} answered {status_code}")
        self._record(
            started,
            is_failed=status_code >= FIRST_FAILING_HTTP_CODE,
            status_code=status_code,
        )
        return Success(target=descriptor.target, response_body=body)

    def _record(self, started: float, *, is_failed: bool, status_code: int | None) -> None:
        if not self.metrics:
            return
        self.metrics.update(
            HttpAttemptDto(
                started_at_sec=started,
                finished_at_sec=asyncio.get_running_loop().time(),
                is_failed=is_failed,
                status_code=status_code,
            )
        )
        logger.debug(f"HTTP metrics: {self.metrics}")
