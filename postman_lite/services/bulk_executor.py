"""
Bulk execution of saved requests.

Every target runs as its own task through the forwarding executor. A
failing target only produces a failed item; the batch always completes and
the report lists items in the order they were requested.
"""

import asyncio
import logging
from typing import Sequence

from pydantic import ValidationError

from ..schemas.bulk import BulkExecutionItem, BulkExecutionReport, ExecutionTarget
from ..schemas.execute import RequestDescriptor
from .forwarding_executor import ForwardingExecutor
from .result_normalizer import make_error, normalize_failure, to_bulk_item, validation_failure


logger = logging.getLogger(__name__)


def build_descriptor(target: ExecutionTarget) -> RequestDescriptor:
    """Turn a stored request into a validated descriptor."""
    return RequestDescriptor(
        method=target.method,
        url=target.url,
        headers=target.headers or {},
        body=target.body,
        timeout_ms=target.timeout_ms,
    )


async def execute_target(executor: ForwardingExecutor, target: ExecutionTarget) -> BulkExecutionItem:
    """
    Execute one saved request, converting any failure into a failed item.

    Args:
        executor: Shared forwarding executor
        target: The saved request to run

    Returns:
        A bulk item carrying either the response or the error
    """
    try:
        descriptor = build_descriptor(target)
    except ValidationError as exc:
        logger.warning("Request %s is not executable: %s", target.request_id, exc)
        return to_bulk_item(target, validation_failure(exc))

    outcome = await executor.execute(descriptor)
    return to_bulk_item(target, outcome)


async def execute_all(
    executor: ForwardingExecutor,
    targets: Sequence[ExecutionTarget],
    deadline_ms: int | None = None,
) -> list[BulkExecutionItem]:
    """
    Run all targets concurrently and wait for every one of them.

    Args:
        executor: Shared forwarding executor
        targets: Saved requests in the caller's order
        deadline_ms: Optional overall deadline; items still running when it
            elapses are cancelled and reported as timeouts

    Returns:
        One item per target, in input order
    """
    async def run(target: ExecutionTarget) -> BulkExecutionItem:
        if deadline_ms is None:
            return await execute_target(executor, target)
        try:
            return await asyncio.wait_for(execute_target(executor, target), timeout=deadline_ms / 1000)
        except asyncio.TimeoutError:
            error = make_error("TIMEOUT").model_copy(
                update={"message": f"The batch exceeded its {deadline_ms} ms deadline."}
            )
            return to_bulk_item(target, error)

    outcomes = await asyncio.gather(*(run(target) for target in targets), return_exceptions=True)

    items: list[BulkExecutionItem] = []
    for target, outcome in zip(targets, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.error("Request %s crashed during bulk execution", target.request_id, exc_info=outcome)
            outcome = to_bulk_item(target, normalize_failure(outcome, target.timeout_ms))
        items.append(outcome)
    return items


def build_report(collection_id: int | None, items: list[BulkExecutionItem]) -> BulkExecutionReport:
    """Count outcomes from the finished items."""
    succeeded = sum(1 for item in items if item.success)
    return BulkExecutionReport(
        collection_id=collection_id,
        total=len(items),
        succeeded=succeeded,
        failed=len(items) - succeeded,
        results=items,
    )


async def run_bulk(
    executor: ForwardingExecutor,
    targets: Sequence[ExecutionTarget],
    collection_id: int | None = None,
    deadline_ms: int | None = None,
) -> BulkExecutionReport:
    """Execute all targets and produce the aggregate report."""
    logger.info("Bulk executing %d requests for collection %s", len(targets), collection_id)
    items = await execute_all(executor, targets, deadline_ms=deadline_ms)
    report = build_report(collection_id, items)
    logger.info(
        "Bulk execution for collection %s finished: %d succeeded, %d failed",
        collection_id, report.succeeded, report.failed,
    )
    return report
