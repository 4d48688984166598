"""
Saved request model.

A saved request holds everything needed to build a request descriptor:
method, URL, headers, body and an optional timeout.
"""

from datetime import datetime
from typing import Any, Optional, TYPE_CHECKING

from sqlalchemy import String, Text, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base

if TYPE_CHECKING:
    from .collection import Collection


class SavedRequest(Base):
    """
    SQLAlchemy model for HTTP requests saved in a collection.

    Attributes:
        id: Unique identifier for the request
        collection_id: Owning collection
        name: Human-readable name for the request
        method: HTTP method (GET, POST, PUT, DELETE, PATCH, HEAD, OPTIONS)
        url: Target URL
        headers: Key-value pairs for HTTP headers
        body: Request body, either a JSON value or a plain string
        timeout_ms: Per-request timeout; None means the configured default
        created_at: Timestamp when the request was created
    """
    __tablename__ = "collection_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    collection_id: Mapped[int] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE")
    )
    name: Mapped[str] = mapped_column(String(255))
    method: Mapped[str] = mapped_column(String(10))
    url: Mapped[str] = mapped_column(Text)
    headers: Mapped[dict] = mapped_column(JSON, default=dict)
    body: Mapped[Any] = mapped_column(JSON, nullable=True)
    timeout_ms: Mapped[Optional[int]] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    collection: Mapped["Collection"] = relationship("Collection", back_populates="requests")
