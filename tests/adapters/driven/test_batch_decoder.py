"""Tests for batch decoding."""

import json
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from api_dispatcher.adapters.driven.batch.decoder import decode_batch, load_batch_file
from api_dispatcher.ports.errors import BatchDecodeError
from api_dispatcher.ports.http import RequestDescriptor

__all__ = []

BATCH = {
    "requests": [
        {
            "url": "https://jsonplaceholder.typicode.com/posts/1",
            "method": "GET",
            "headers": {"Accept": "application/json"},
        },
        {
            "url": "https://jsonplaceholder.typicode.com/posts",
            "method": "POST",
            "headers": {"Content-Type": "application/json"},
            "body": {"title": "foo", "body": "bar", "userId": 1},
        },
    ]
}


@pytest.fixture
def temp_batch_file() -> Iterator[str]:
    """Create temporary JSON batch file for testing.

    Yields:
        Path of the batch file.
    """
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(BATCH, f)
        filepath = f.name
    yield filepath
    Path(filepath).unlink()


def test_decode_batch_builds_descriptors_in_order() -> None:
    """Each entry should become one descriptor, in submission order."""
    descriptors = decode_batch(json.dumps(BATCH))

    assert descriptors == [
        RequestDescriptor(
            target="https://jsonplaceholder.typicode.com/posts/1",
            method="GET",
            headers={"Accept": "application/json"},
        ),
        RequestDescriptor(
            target="https://jsonplaceholder.typicode.com/posts",
            method="POST",
            headers={"Content-Type": "application/json"},
            body={"title": "foo", "body": "bar", "userId": 1},
        ),
    ]


def test_decode_batch_is_idempotent() -> None:
    """Decoding the same submission twice should give equal descriptors."""
    raw = json.dumps(BATCH).encode()

    assert decode_batch(raw) == decode_batch(raw)


def test_decode_batch_defaults_missing_fields() -> None:
    """Missing headers, body and method should get neutral defaults."""
    [descriptor] = decode_batch('{"requests": [{"url": "http://x", "headers": null}]}')

    assert descriptor.method == ""
    assert descriptor.headers == {}
    assert descriptor.body is None


def test_decode_batch_keeps_entry_without_url() -> None:
    """An entry without URL should reach the engine and fail there, alone."""
    descriptors = decode_batch('{"requests": [{"method": "GET"}, {"url": "http://x"}]}')

    assert [d.target for d in descriptors] == ["", "http://x"]


@pytest.mark.parametrize("raw", ['{"requests": []}', "{}", '{"requests": null}'])
def test_decode_empty_batch(raw: str) -> None:
    """An empty, missing or null request list is an empty batch."""
    assert decode_batch(raw) == []


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "{ invalid json }",
        "[]",
        '{"requests": {"url": "http://x"}}',
        '{"requests": [{"url": "http://x", "headers": {"X": 1}}]}',
    ],
)
def test_decode_batch_rejects_malformed_submissions(raw: str) -> None:
    """Malformed submissions should raise BatchDecodeError."""
    with pytest.raises(BatchDecodeError):
        decode_batch(raw)


def test_load_batch_file(temp_batch_file: str) -> None:
    """load_batch_file should decode the file content."""
    descriptors = load_batch_file(temp_batch_file)

    assert len(descriptors) == 2
    assert descriptors[1].body == {"title": "foo", "body": "bar", "userId": 1}


def test_load_batch_file_rejects_missing_file() -> None:
    """A missing file should raise BatchDecodeError."""
    with pytest.raises(BatchDecodeError, match="Cannot read batch file"):
        load_batch_file("/nonexistent/batch.json")
