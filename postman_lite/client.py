"""
Caller-side request client.

Decides per request whether to call the destination directly or ask the
Postman-Lite relay to forward it: loopback targets are only reachable from
the caller's own machine, everything else goes through the relay.
"""

import logging

import httpx
from pydantic import ValidationError

from .schemas.execute import ExecutionError, ExecutionResponse, ExecutionResult, RequestDescriptor
from .services.destination import is_local_url
from .services.forwarding_executor import ForwardingExecutor
from .services.result_normalizer import make_error, normalize_failure


logger = logging.getLogger(__name__)


def parse_relay_response(response: httpx.Response) -> ExecutionResult:
    """
    Turn the relay's reply back into an execution result.

    Args:
        response: Reply from the relay's proxy endpoint

    Returns:
        ExecutionResponse or ExecutionError; a reply that is neither becomes
        an UNKNOWN error
    """
    try:
        payload = response.json()
    except ValueError:
        return make_error("UNKNOWN", detail=f"Proxy request failed with status {response.status_code}")

    if not isinstance(payload, dict):
        return make_error("UNKNOWN", detail="Proxy returned an unexpected body")

    try:
        if response.status_code == 200:
            return ExecutionResponse.model_validate(payload)
        return ExecutionError.model_validate(payload)
    except ValidationError:
        return make_error("UNKNOWN", detail=f"Proxy request failed with status {response.status_code}")


class RequestClient:
    """
    Sends descriptors either directly or through the relay.

    Args:
        relay_base_url: Base URL of the Postman-Lite service
        http_client: Client used both for direct calls and for talking to the relay
    """

    def __init__(self, relay_base_url: str, http_client: httpx.AsyncClient,
                 user_agent: str = "Postman-Lite/1.0"):
        self.relay_url = relay_base_url.rstrip("/") + "/api/proxy"
        self._http = http_client
        self._direct = ForwardingExecutor(http_client, user_agent=user_agent)

    async def send(self, descriptor: RequestDescriptor) -> ExecutionResult:
        """Execute a descriptor, choosing direct or relayed execution. Never raises."""
        if is_local_url(descriptor.url):
            logger.debug("Calling local destination %s directly", descriptor.url)
            return await self._direct.execute(descriptor)
        return await self.relay(descriptor)

    async def relay(self, descriptor: RequestDescriptor) -> ExecutionResult:
        # Leave the relay a moment beyond the upstream deadline to report its own timeout
        timeout = descriptor.timeout_ms / 1000 + 5
        try:
            response = await self._http.post(self.relay_url, json=descriptor.to_payload(), timeout=timeout)
        except httpx.HTTPError as exc:
            logger.warning("Relay %s unreachable: %s", self.relay_url, exc)
            return normalize_failure(exc, timeout_ms=descriptor.timeout_ms)
        return parse_relay_response(response)
