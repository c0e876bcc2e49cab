"""Outcome port definition (DTOs and line rendering)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["Stage", "Success", "Failure", "Outcome", "render_outcome"]


class Stage(str, Enum):
    """Execution phase at which a request failed."""

    REQUEST_CONSTRUCTION = "request-construction"
    HEADER_APPLICATION = "header-application"
    TRANSMISSION = "transmission"
    RESPONSE_READ = "response-read"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True, frozen=True)
class Success:
    """A response was received and fully read.

    Attributes:
        target: URI the request was sent to.
        response_body: Whole response body decoded as text.
    """

    target: str
    response_body: str


@dataclass(slots=True, frozen=True)
class Failure:
    """A request failed before a full response could be read.

    Attributes:
        target: URI the request was meant for.
        stage: Phase at which the failure happened.
        message: Human-readable cause.
    """

    target: str
    stage: Stage
    message: str


Outcome = Success | Failure


def render_outcome(outcome: Outcome) -> str:
    """Render an outcome as the single line written to callers.

    Both the console and the server response use this format, so it must
    stay stable.

    Args:
        outcome: Outcome to render.

    Returns:
        One line of text without trailing newline.
    """
    if isinstance(outcome, Success):
        return f"Response from {outcome.target}: {outcome.response_body}"
    return f"Error {outcome.stage} for {outcome.target}: {outcome.message}"
