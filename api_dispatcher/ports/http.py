"""HTTP port definition (DTO and execution capability)."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from api_dispatcher.ports.outcome import Outcome

__all__ = ["RequestDescriptor", "ExecuteFn"]


@dataclass(frozen=True)
class RequestDescriptor:
    """One request awaiting dispatch.

    Decouples the dispatch engine from how batches are read in and from the
    HTTP implementation that executes them.

    Attributes:
        target: URI of the network endpoint (validated only when executed).
        method: HTTP verb, not restricted to a known set.
        headers: Header name to value; read-only once constructed.
        body: Optional JSON object sent by body-bearing methods; read-only.
    """

    target: str
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if self.body is not None:
            object.__setattr__(self, "body", MappingProxyType(dict(self.body)))


ExecuteFn = Callable[[RequestDescriptor], Awaitable[Outcome]]
