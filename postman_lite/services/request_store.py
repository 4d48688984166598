"""
Saved-request lookups for execution.

Only the reads needed to execute stored requests live here; managing
collections and requests is handled elsewhere.
"""

from sqlalchemy.orm import Session

from ..models.collection import Collection
from ..models.request import SavedRequest
from ..schemas.bulk import ExecutionTarget


def to_target(saved: SavedRequest) -> ExecutionTarget:
    return ExecutionTarget(
        request_id=saved.id,
        request_name=saved.name,
        method=saved.method,
        url=saved.url,
        headers=saved.headers or {},
        body=saved.body,
        timeout_ms=saved.timeout_ms,
    )


class RequestStore:
    """Reads collections and saved requests through a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_collection(self, collection_id: int) -> Collection | None:
        return self.db.query(Collection).filter(Collection.id == collection_id).first()

    def get_target(self, collection_id: int, request_id: int) -> ExecutionTarget | None:
        saved = (
            self.db.query(SavedRequest)
            .filter(SavedRequest.id == request_id, SavedRequest.collection_id == collection_id)
            .first()
        )
        return to_target(saved) if saved else None

    def get_targets(self, collection_id: int, request_ids: list[int]) -> list[ExecutionTarget]:
        """
        Resolve request IDs within a collection.

        Args:
            collection_id: Owning collection
            request_ids: IDs in the order the caller wants them executed

        Returns:
            Targets in the same order; unknown IDs are skipped, repeated IDs
            are kept
        """
        rows = (
            self.db.query(SavedRequest)
            .filter(SavedRequest.collection_id == collection_id, SavedRequest.id.in_(sorted(set(request_ids))))
            .all()
        )
        by_id = {row.id: row for row in rows}
        return [to_target(by_id[request_id]) for request_id in request_ids if request_id in by_id]
