"""
HTTP forwarding service.

Executes a single request descriptor against an arbitrary upstream using a
shared httpx connection pool, enforcing the descriptor's deadline and
converting transport failures into the error taxonomy.
"""

import asyncio
import json
import logging
import time
from typing import Any

import httpx

from ..config import Settings
from ..schemas.execute import ExecutionResult, RequestDescriptor, thaw
from .result_normalizer import normalize_failure, normalize_response


logger = logging.getLogger(__name__)

# Sent unless the caller names its own Accept header
DEFAULT_ACCEPT = "application/json, text/plain, */*"


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """
    Build the connection pool shared by all executions.

    Args:
        settings: Application settings (pool size, redirects, TLS verification)

    Returns:
        An AsyncClient safe for concurrent use
    """
    return httpx.AsyncClient(
        follow_redirects=settings.follow_redirects,
        verify=settings.verify_tls,
        limits=httpx.Limits(max_connections=settings.max_connections),
        timeout=settings.default_timeout_ms / 1000,
    )


def _has_header(headers: dict[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)


def build_outbound(descriptor: RequestDescriptor, user_agent: str) -> tuple[dict[str, str], str | None]:
    """
    Prepare headers and body content for the outbound call.

    Args:
        descriptor: The request to send
        user_agent: Default User-Agent, used unless the caller supplied one

    Returns:
        Tuple of (headers, content); content is None when no body is sent
    """
    headers = dict(descriptor.headers)
    if not _has_header(headers, "User-Agent"):
        headers["User-Agent"] = user_agent
    if not _has_header(headers, "Accept"):
        headers["Accept"] = DEFAULT_ACCEPT

    if descriptor.body is None:
        return headers, None

    if not descriptor.carries_body:
        logger.debug("Dropping body on %s request to %s", descriptor.method, descriptor.url)
        return headers, None

    if isinstance(descriptor.body, str):
        return headers, descriptor.body

    if not _has_header(headers, "Content-Type"):
        headers["Content-Type"] = "application/json"
    return headers, json.dumps(thaw(descriptor.body))


class ForwardingExecutor:
    """
    Sends request descriptors upstream and normalizes the outcome.

    Holds no per-request state, so one instance serves any number of
    concurrent executions.
    """

    def __init__(self, client: httpx.AsyncClient, user_agent: str = "Postman-Lite/1.0"):
        self._client = client
        self._user_agent = user_agent

    async def _send(self, descriptor: RequestDescriptor, headers: dict[str, str],
                    content: str | None, timeout: float) -> httpx.Response:
        return await self._client.request(
            method=descriptor.method,
            url=descriptor.url,
            headers=headers,
            content=content,
            timeout=httpx.Timeout(timeout),
        )

    async def execute(self, descriptor: RequestDescriptor) -> ExecutionResult:
        """
        Execute one request.

        Upstream 4xx/5xx responses are successful completions. Only transport
        failures (refused connection, DNS, TLS, timeout) yield an error result.
        Nothing is retried.

        Args:
            descriptor: The validated request to send

        Returns:
            ExecutionResponse if the upstream answered, ExecutionError otherwise
        """
        headers, content = build_outbound(descriptor, self._user_agent)
        timeout = descriptor.timeout_ms / 1000

        logger.info("Forwarding %s request to %s", descriptor.method, descriptor.url)
        start_time = time.perf_counter()
        try:
            # The whole exchange, connect through body read, shares one deadline
            response = await asyncio.wait_for(
                self._send(descriptor, headers, content, timeout),
                timeout=timeout,
            )
        except Exception as exc:
            result = normalize_failure(exc, timeout_ms=descriptor.timeout_ms)
            logger.warning(
                "%s %s failed with %s: %s",
                descriptor.method, descriptor.url, result.code, exc,
            )
            return result

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "%s %s answered %s in %d ms",
            descriptor.method, descriptor.url, response.status_code, elapsed_ms,
        )
        return normalize_response(response, elapsed_ms)

    async def aclose(self) -> None:
        await self._client.aclose()


async def execute_request(descriptor: RequestDescriptor, **client_options: Any) -> ExecutionResult:
    """
    Execute a single descriptor with a short-lived client.

    Convenience for callers that don't hold a shared pool.
    """
    async with httpx.AsyncClient(**client_options) as client:
        return await ForwardingExecutor(client).execute(descriptor)
