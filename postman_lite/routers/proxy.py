"""
Proxy API routes.

Forwards a single caller-described request to its upstream on behalf of
callers that cannot reach it directly because of cross-origin restrictions.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_executor
from ..schemas.execute import ExecutionError, ProxyResponse, RequestDescriptor, RequestEcho
from ..services.forwarding_executor import ForwardingExecutor
from ..services.result_normalizer import http_status_for


router = APIRouter(prefix="/api/proxy", tags=["proxy"])


@router.post(
    "",
    response_model=ProxyResponse,
    responses={
        200: {"model": ProxyResponse, "description": "Upstream responded (any status)"},
        400: {"model": ExecutionError, "description": "Malformed request description"},
        502: {"model": ExecutionError, "description": "Connection refused or host not found"},
        504: {"model": ExecutionError, "description": "Upstream timeout"},
    }
)
async def proxy_request(
    descriptor: RequestDescriptor,
    executor: ForwardingExecutor = Depends(get_executor)
):
    """
    Execute one request against its upstream.

    The upstream's status code is carried in the body; this endpoint answers
    200 whenever the upstream responded at all.

    Args:
        descriptor: Method, URL, headers, body and timeout of the call
        executor: Shared forwarding executor

    Returns:
        ProxyResponse on completion, or an ExecutionError body with a
        502/504/400/500 status on transport failure
    """
    result = await executor.execute(descriptor)

    if isinstance(result, ExecutionError):
        return JSONResponse(
            status_code=http_status_for(result.code),
            content=result.model_dump(by_alias=True)
        )

    return ProxyResponse(
        **result.model_dump(),
        config=RequestEcho(url=descriptor.url, method=descriptor.method, timeout=descriptor.timeout_ms),
    )


@router.get("/health")
async def proxy_health():
    """Health check for the proxy service."""
    return {
        "service": "Proxy Service",
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "features": [
            "CORS bypass",
            "Request forwarding",
            "Response formatting",
            "Error handling",
        ],
    }
