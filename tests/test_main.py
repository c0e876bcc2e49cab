"""Tests for main application entrypoint."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from api_dispatcher.main import main, run_batch
from api_dispatcher.ports.http import RequestDescriptor
from api_dispatcher.ports.outcome import Failure, Outcome, Stage, Success
from api_dispatcher.ports.settings import SettingsPort

__all__ = []


async def fake_execute(descriptor: RequestDescriptor) -> Outcome:
    if descriptor.target.endswith("/down"):
        return Failure(descriptor.target, Stage.TRANSMISSION, "connection refused")
    return Success(descriptor.target, "hello")


@pytest.fixture
def batch_file(tmp_path: Path) -> str:
    """Write a two-request batch file.

    Returns:
        Path of the batch file.
    """
    path = tmp_path / "batch.json"
    path.write_text(
        json.dumps(
            {
                "requests": [
                    {"url": "https://example.test/ok", "method": "GET"},
                    {"url": "https://example.test/down", "method": "GET"},
                ]
            }
        )
    )
    return str(path)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep main() from installing handlers on the root logger."""
    with (
        patch("api_dispatcher.main.configure_logs"),
        patch("api_dispatcher.main.set_app_log_level"),
    ):
        yield


@pytest.mark.asyncio
async def test_run_batch_prints_one_line_per_request(capsys) -> None:
    """run_batch should print every outcome line to stdout."""
    batch = [
        RequestDescriptor(target="https://example.test/ok", method="GET"),
        RequestDescriptor(target="https://example.test/down", method="GET"),
    ]

    with patch("api_dispatcher.main.HttpRequestExecutor") as mock_executor_class:
        executor = mock_executor_class.return_value
        executor.__aenter__ = AsyncMock(return_value=executor)
        executor.__aexit__ = AsyncMock(return_value=None)
        executor.execute = fake_execute

        written = await run_batch(batch, SettingsPort(request_timeout_sec=5))

    assert written == 2
    assert sorted(capsys.readouterr().out.splitlines()) == [
        "Error transmission for https://example.test/down: connection refused",
        "Response from https://example.test/ok: hello",
    ]
    mock_executor_class.assert_called_once()
    assert mock_executor_class.call_args.kwargs["timeout_sec"] == 5


@pytest.mark.asyncio
async def test_main_one_shot_dispatches_batch_file(batch_file: str) -> None:
    """--config should load the file and run the batch once."""
    with patch("api_dispatcher.main.run_batch", new_callable=AsyncMock) as mock_run:
        status = await main(["--config", batch_file, "--max-concurrency", "2"])

    assert status == 0
    batch, settings = mock_run.call_args.args
    assert [d.target for d in batch] == ["https://example.test/ok", "https://example.test/down"]
    assert settings.max_concurrency == 2


@pytest.mark.asyncio
async def test_main_serve_runs_server() -> None:
    """--serve should start the batch server with the requested address."""
    with patch("api_dispatcher.main.serve", new_callable=AsyncMock) as mock_serve:
        status = await main(["--serve", "--addr", "127.0.0.1:9000"])

    assert status == 0
    settings = mock_serve.call_args.args[0]
    assert (settings.host, settings.port) == ("127.0.0.1", 9000)


@pytest.mark.asyncio
async def test_main_serve_bind_failure_is_fatal() -> None:
    """A listener bind failure should exit with status 1."""
    with patch(
        "api_dispatcher.main.serve",
        new_callable=AsyncMock,
        side_effect=OSError("address already in use"),
    ):
        status = await main(["--serve"])

    assert status == 1


@pytest.mark.asyncio
async def test_main_without_mode_returns_usage_error(monkeypatch) -> None:
    """Neither --config nor --serve should be a usage error."""
    monkeypatch.delenv("DISPATCHER_BATCH_FILE", raising=False)

    with patch("api_dispatcher.main.run_batch", new_callable=AsyncMock) as mock_run:
        status = await main([])

    assert status == 2
    mock_run.assert_not_called()


@pytest.mark.asyncio
async def test_main_missing_batch_file_is_fatal(tmp_path: Path) -> None:
    """An unreadable batch file should exit with status 1 without dispatching."""
    with patch("api_dispatcher.main.run_batch", new_callable=AsyncMock) as mock_run:
        status = await main(["--config", str(tmp_path / "missing.json")])

    assert status == 1
    mock_run.assert_not_called()


@pytest.mark.asyncio
async def test_main_invalid_configuration_is_fatal() -> None:
    """Invalid settings should be logged and exit with status 1."""
    with (
        patch("api_dispatcher.main.logger") as mock_logger,
        patch("api_dispatcher.main.run_batch", new_callable=AsyncMock) as mock_run,
    ):
        status = await main(["--config", "batch.json", "--max-concurrency", "0"])

    assert status == 1
    mock_logger.error.assert_called()
    mock_run.assert_not_called()
