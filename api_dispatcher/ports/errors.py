"""Error taxonomy shared by the executor and the batch decoder."""

from __future__ import annotations

from api_dispatcher.ports.outcome import Stage

__all__ = [
    "DispatchStageError",
    "RequestConstructionError",
    "HeaderApplicationError",
    "TransmissionError",
    "ResponseReadError",
    "BatchDecodeError",
]


class DispatchStageError(Exception):
    """Failure of one request at a given execution stage.

    Raised inside the executor and converted into a ``Failure`` outcome
    before it can reach the dispatch engine.
    """

    stage: Stage

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RequestConstructionError(DispatchStageError):
    stage = Stage.REQUEST_CONSTRUCTION


class HeaderApplicationError(DispatchStageError):
    stage = Stage.HEADER_APPLICATION


class TransmissionError(DispatchStageError):
    stage = Stage.TRANSMISSION


class ResponseReadError(DispatchStageError):
    stage = Stage.RESPONSE_READ


class BatchDecodeError(ValueError):
    """Batch submission could not be decoded into request descriptors."""
