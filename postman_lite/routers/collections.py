"""
Collection execution API routes.

Executes requests saved in a collection, one at a time or in bulk.
Caller authentication happens in front of this application.
"""

from fastapi import APIRouter, Depends

from ..config import settings
from ..dependencies import get_executor, get_request_store
from ..exceptions import ResourceNotFoundError
from ..schemas.bulk import BulkExecuteRequest, BulkExecutionItem, BulkExecutionReport
from ..services.bulk_executor import execute_target, run_bulk
from ..services.forwarding_executor import ForwardingExecutor
from ..services.request_store import RequestStore


router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.post("/{collection_id}/requests/bulk-execute", response_model=BulkExecutionReport)
async def bulk_execute_requests(
    collection_id: int,
    body: BulkExecuteRequest,
    store: RequestStore = Depends(get_request_store),
    executor: ForwardingExecutor = Depends(get_executor)
):
    """
    Execute several saved requests concurrently.

    Individual failures are reported per item; the endpoint itself answers
    200 whenever the batch ran.

    Args:
        collection_id: Collection owning the requests
        body: Request IDs in the order results should be reported
        store: Saved-request store
        executor: Shared forwarding executor

    Returns:
        Aggregate report with per-item results

    Raises:
        ResourceNotFoundError: 404 if the collection is missing or no ID resolves
    """
    if store.get_collection(collection_id) is None:
        raise ResourceNotFoundError("Collection", collection_id)

    targets = store.get_targets(collection_id, body.request_ids)
    if not targets:
        raise ResourceNotFoundError("Requests", ", ".join(str(i) for i in body.request_ids))

    return await run_bulk(
        executor,
        targets,
        collection_id=collection_id,
        deadline_ms=settings.bulk_deadline_ms,
    )


@router.post("/{collection_id}/requests/{request_id}/execute", response_model=BulkExecutionItem)
async def execute_saved_request(
    collection_id: int,
    request_id: int,
    store: RequestStore = Depends(get_request_store),
    executor: ForwardingExecutor = Depends(get_executor)
):
    """
    Execute one saved request.

    The outcome, success or failure, is returned inline with the request's
    identifying fields.

    Raises:
        ResourceNotFoundError: 404 if the collection or request is missing
    """
    if store.get_collection(collection_id) is None:
        raise ResourceNotFoundError("Collection", collection_id)

    target = store.get_target(collection_id, request_id)
    if target is None:
        raise ResourceNotFoundError("Request", request_id)

    return await execute_target(executor, target)
