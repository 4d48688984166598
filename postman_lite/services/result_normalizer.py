"""
Normalization of raw execution outcomes.

Maps an upstream response or a transport failure onto the documented
result shapes, and wraps outcomes with correlation fields for bulk runs.
"""

import asyncio
import errno
import json
import socket
from typing import Any, Callable, Iterator, Literal

import httpx
from fastapi import status
from pydantic import ValidationError

from ..schemas.bulk import BulkExecutionItem, BulkItemFailure, BulkItemSuccess, ExecutionTarget
from ..schemas.execute import ErrorCode, ExecutionError, ExecutionResponse, ExecutionResult


DecodeStrategy = Literal["json", "text"]


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


# Evaluated in order; the first matching predicate picks the strategy
_DECODE_RULES: list[tuple[Callable[[str], bool], DecodeStrategy]] = [
    (lambda media: media in ("application/json", "text/json"), "json"),
    (lambda media: media.endswith("+json"), "json"),
]


def decode_strategy(content_type: str | None) -> DecodeStrategy:
    """
    Pick how a response body should be decoded from its Content-Type.

    Args:
        content_type: Content-Type header value, possibly None

    Returns:
        "json" for JSON media types, "text" for everything else
    """
    if not content_type:
        return "text"
    media = _media_type(content_type)
    for matches, strategy in _DECODE_RULES:
        if matches(media):
            return strategy
    return "text"


def decode_body(text: str, content_type: str | None) -> Any:
    """
    Decode a response body, degrading to raw text when JSON is malformed.
    """
    if decode_strategy(content_type) == "json":
        try:
            return json.loads(text)
        except ValueError:
            return text
    return text


def normalize_response(response: httpx.Response, elapsed_ms: int) -> ExecutionResponse:
    """
    Shape a completed upstream exchange, whatever its status code.

    Args:
        response: The fully-read upstream response
        elapsed_ms: Wall time of the exchange in milliseconds

    Returns:
        ExecutionResponse carrying status, headers and decoded body
    """
    content_type = response.headers.get("content-type")
    return ExecutionResponse(
        status=response.status_code,
        status_text=response.reason_phrase or "",
        headers=dict(response.headers),
        data=decode_body(response.text, content_type),
        response_time_ms=elapsed_ms,
        response_size=len(response.content),
    )


def _iter_causes(exc: BaseException) -> Iterator[BaseException]:
    """
    Yield the exception and everything it wraps.

    Besides ``__cause__``/``__context__`` and exception group members, this
    follows exceptions passed as constructor arguments: httpcore raises
    ``ConnectError(OSError(...))`` with its context suppressed, so the
    socket error is only reachable through ``args``.
    """
    seen: set[int] = set()
    stack = [exc]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.extend(getattr(current, "exceptions", ()) or ())
        stack.extend(arg for arg in current.args if isinstance(arg, BaseException))
        if current.__cause__ is not None:
            stack.append(current.__cause__)
        elif current.__context__ is not None and not current.__suppress_context__:
            stack.append(current.__context__)


def classify_transport_error(exc: BaseException) -> ErrorCode:
    """
    Map a transport-level exception onto the error taxonomy.

    Timeouts win over anything found further down the cause chain; name
    resolution failures are checked before refused connections because
    ``socket.gaierror`` is itself an ``OSError``.
    """
    chain = list(_iter_causes(exc))

    if any(isinstance(e, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)) for e in chain):
        return "TIMEOUT"
    if any(isinstance(e, socket.gaierror) for e in chain):
        return "HOST_NOT_FOUND"
    for e in chain:
        if isinstance(e, ConnectionRefusedError):
            return "CONNECTION_REFUSED"
        if isinstance(e, OSError) and e.errno == errno.ECONNREFUSED:
            return "CONNECTION_REFUSED"
    if any(isinstance(e, (httpx.InvalidURL, httpx.UnsupportedProtocol)) for e in chain):
        return "VALIDATION_FAILED"
    return "UNKNOWN"


_ERROR_SUMMARIES: dict[str, tuple[str, str]] = {
    "CONNECTION_REFUSED": (
        "Connection refused",
        "Unable to connect to the target server. Please check the URL and ensure the server is running.",
    ),
    "TIMEOUT": (
        "Request timeout",
        "The request exceeded its {timeout_ms} ms timeout.",
    ),
    "HOST_NOT_FOUND": (
        "Host not found",
        "The hostname could not be resolved. Please check the URL.",
    ),
    "VALIDATION_FAILED": (
        "Validation failed",
        "The request could not be sent as described: {detail}",
    ),
    "UNKNOWN": (
        "Request failed",
        "{detail}",
    ),
}


HTTP_STATUS_BY_CODE: dict[str, int] = {
    "CONNECTION_REFUSED": status.HTTP_502_BAD_GATEWAY,
    "HOST_NOT_FOUND": status.HTTP_502_BAD_GATEWAY,
    "TIMEOUT": status.HTTP_504_GATEWAY_TIMEOUT,
    "VALIDATION_FAILED": status.HTTP_400_BAD_REQUEST,
    "UNKNOWN": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_status_for(code: ErrorCode) -> int:
    """HTTP status the proxy endpoint answers with for a failed execution."""
    return HTTP_STATUS_BY_CODE[code]


def make_error(code: ErrorCode, detail: str = "", timeout_ms: int | None = None) -> ExecutionError:
    error, template = _ERROR_SUMMARIES[code]
    if code == "TIMEOUT" and timeout_ms is None:
        template = "The request did not complete before its deadline."
    message = template.format(detail=detail, timeout_ms=timeout_ms)
    return ExecutionError(error=error, message=message or error, code=code)


def normalize_failure(exc: BaseException, timeout_ms: int | None = None) -> ExecutionError:
    """
    Shape a transport failure.

    Args:
        exc: The exception raised while sending or receiving
        timeout_ms: Deadline of the failed execution, used in the message

    Returns:
        ExecutionError with a taxonomy code
    """
    code = classify_transport_error(exc)
    detail = str(exc) or type(exc).__name__
    return make_error(code, detail=detail, timeout_ms=timeout_ms)


def validation_failure(exc: ValidationError) -> ExecutionError:
    """Shape a descriptor that failed validation before any network call."""
    problems = []
    for error in exc.errors():
        loc = " -> ".join(str(part) for part in error["loc"])
        problems.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return make_error("VALIDATION_FAILED", detail="; ".join(problems))


def to_bulk_item(target: ExecutionTarget, outcome: ExecutionResult) -> BulkExecutionItem:
    """
    Attach correlation fields to an outcome.

    ``success`` is True exactly when the upstream responded.
    """
    correlation = {
        "request_id": target.request_id,
        "request_name": target.request_name,
        "request_method": target.method,
        "request_url": target.url,
    }
    if isinstance(outcome, ExecutionResponse):
        return BulkItemSuccess(**correlation, **outcome.model_dump())
    return BulkItemFailure(**correlation, **outcome.model_dump())
