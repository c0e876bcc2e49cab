"""Outbound request construction and header application."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from multidict import CIMultiDict
from yarl import URL

from api_dispatcher.ports.errors import HeaderApplicationError, RequestConstructionError
from api_dispatcher.ports.http import RequestDescriptor

__all__ = ["OutboundRequest", "build_request", "apply_headers", "BODY_METHODS"]

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
SUPPORTED_SCHEMES = ("http", "https")

# RFC 9110 token, used for both methods and header names
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_FORBIDDEN_VALUE_CHARS = ("\r", "\n", "\x00")


@dataclass
class OutboundRequest:
    """Request ready to be handed to the transport.

    Attributes:
        method: Upper-cased HTTP verb.
        url: Parsed absolute target URL.
        payload: Serialized body, or None for an empty payload.
        headers: Case-insensitive header map applied before sending.
    """

    method: str
    url: URL
    payload: bytes | None = None
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)


def build_request(descriptor: RequestDescriptor) -> OutboundRequest:
    """Construct the outbound request for a descriptor.

    The body is serialized as JSON only for body-bearing methods; a body
    given with any other method is ignored.

    Args:
        descriptor: Request to construct.

    Returns:
        Request with method, URL and payload set, and no headers yet.

    Raises:
        RequestConstructionError: If the method or target is malformed, or
            the body cannot be serialized.
    """
    method = (descriptor.method or "GET").upper()
    if not _TOKEN_RE.match(method):
        raise RequestConstructionError(f"invalid method {descriptor.method!r}")

    if not descriptor.target:
        raise RequestConstructionError("empty target URL")
    try:
        url = URL(descriptor.target)
    except (TypeError, ValueError) as e:
        raise RequestConstructionError(f"invalid target URL: {e}") from e
    if not url.is_absolute() or not url.host:
        raise RequestConstructionError(f"target URL is not absolute: {descriptor.target}")
    if url.scheme not in SUPPORTED_SCHEMES:
        raise RequestConstructionError(f"unsupported protocol scheme {url.scheme!r}")

    request = OutboundRequest(method=method, url=url)

    if descriptor.body is not None:
        if method not in BODY_METHODS:
            logger.debug(f"Ignoring body for {method} request to {descriptor.target}")
            return request
        try:
            request.payload = json.dumps(dict(descriptor.body)).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RequestConstructionError(f"cannot serialize body: {e}") from e
        request.headers["Content-Type"] = "application/json"

    return request


def apply_headers(request: OutboundRequest, headers: Mapping[str, str]) -> None:
    """Set every header on the request, last write wins.

    Names are compared case-insensitively, so a later value for the same
    name replaces an earlier one, including the default Content-Type.

    Args:
        request: Request to update in place.
        headers: Header name to value.

    Raises:
        HeaderApplicationError: If a name is not a token or a value contains
            CR, LF or NUL.
    """
    for name, value in headers.items():
        if not isinstance(name, str) or not _TOKEN_RE.match(name):
            raise HeaderApplicationError(f"invalid header name {name!r}")
        if not isinstance(value, str) or any(c in value for c in _FORBIDDEN_VALUE_CHARS):
            raise HeaderApplicationError(f"invalid value for header {name!r}")
        request.headers[name] = value
