"""
Pydantic schemas package.

Exports all schemas for request execution and bulk reporting.
"""

from .execute import (
    HttpMethod,
    BODY_METHODS,
    ErrorCode,
    RequestDescriptor,
    ExecutionResponse,
    ExecutionError,
    ExecutionResult,
    RequestEcho,
    ProxyResponse,
)

from .bulk import (
    ExecutionTarget,
    BulkExecuteRequest,
    BulkItemBase,
    BulkItemSuccess,
    BulkItemFailure,
    BulkExecutionItem,
    BulkExecutionReport,
)

__all__ = [
    # Execute schemas
    "HttpMethod",
    "BODY_METHODS",
    "ErrorCode",
    "RequestDescriptor",
    "ExecutionResponse",
    "ExecutionError",
    "ExecutionResult",
    "RequestEcho",
    "ProxyResponse",
    # Bulk schemas
    "ExecutionTarget",
    "BulkExecuteRequest",
    "BulkItemBase",
    "BulkItemSuccess",
    "BulkItemFailure",
    "BulkExecutionItem",
    "BulkExecutionReport",
]
