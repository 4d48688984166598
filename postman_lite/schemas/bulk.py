"""
Pydantic schemas for executing saved requests, singly or in bulk.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .execute import ExecutionResponse, ExecutionError


class ExecutionTarget(BaseModel):
    """A saved request as handed over by the request store."""
    request_id: int
    request_name: str
    method: str
    url: str
    headers: dict[str, Any] = {}
    body: Any | None = None
    timeout_ms: int | None = None


class BulkExecuteRequest(BaseModel):
    """Schema for the bulk execution body: ``{"requestIds": [...]}``."""
    request_ids: list[int] = Field(min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BulkItemBase(BaseModel):
    """Correlation fields attached to every per-request outcome."""
    request_id: int
    request_name: str
    request_method: str
    request_url: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BulkItemSuccess(BulkItemBase, ExecutionResponse):
    success: Literal[True] = True


class BulkItemFailure(BulkItemBase, ExecutionError):
    success: Literal[False] = False


BulkExecutionItem = Union[BulkItemSuccess, BulkItemFailure]


class BulkExecutionReport(BaseModel):
    """
    Aggregate over a batch.

    ``results`` follows the order the request IDs were given in, and
    ``succeeded + failed == total``.
    """
    collection_id: int | None = None
    total: int
    succeeded: int
    failed: int
    results: list[BulkExecutionItem]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
