"""Batch decoding from JSON submissions."""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from api_dispatcher.ports.errors import BatchDecodeError
from api_dispatcher.ports.http import RequestDescriptor

__all__ = ["BatchModel", "RequestModel", "decode_batch", "load_batch_file"]

logger = logging.getLogger(__name__)


class RequestModel(BaseModel):
    """One entry of the ``requests`` array.

    Attributes:
        url: Target URI, checked only when the request is executed; a
            missing URL fails that request alone, not the batch.
        method: HTTP verb; empty means GET.
        headers: Header name to string value.
        body: Optional JSON object sent by body-bearing methods.
    """

    url: str = ""
    method: str = ""
    headers: dict[str, str] | None = None
    body: dict[str, Any] | None = None

    def to_descriptor(self) -> RequestDescriptor:
        return RequestDescriptor(
            target=self.url,
            method=self.method,
            headers=self.headers or {},
            body=self.body,
        )


class BatchModel(BaseModel):
    """Top-level batch submission: ``{"requests": [...]}``.

    A missing or null ``requests`` is an empty batch.
    """

    requests: list[RequestModel] | None = None


def decode_batch(raw: bytes | str) -> list[RequestDescriptor]:
    """Decode a JSON batch submission into request descriptors.

    Args:
        raw: JSON document.

    Returns:
        Descriptors in submission order.

    Raises:
        BatchDecodeError: If the document is not valid JSON or does not
            match the batch shape.
    """
    try:
        batch = BatchModel.model_validate_json(raw)
    except ValidationError as e:
        raise BatchDecodeError(f"Invalid batch: {e.error_count()} error(s): {e}") from e

    return [entry.to_descriptor() for entry in batch.requests or []]


def load_batch_file(path: str | Path) -> list[RequestDescriptor]:
    """Read and decode a batch file.

    Args:
        path: Path of the JSON batch file.

    Returns:
        Descriptors in file order.

    Raises:
        BatchDecodeError: If the file cannot be read or decoded.
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise BatchDecodeError(f"Cannot read batch file {path}: {e}") from e

    descriptors = decode_batch(raw)
    logger.debug(f"Loaded {len(descriptors)} requests from {path}")
    return descriptors
