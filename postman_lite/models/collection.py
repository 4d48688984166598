"""
Collection model grouping saved requests.
"""

from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base

if TYPE_CHECKING:
    from .request import SavedRequest


class Collection(Base):
    """
    SQLAlchemy model for collections.

    Deleting a collection cascades to all contained requests.

    Attributes:
        id: Unique identifier for the collection
        name: Human-readable name for the collection
        created_at: Timestamp when the collection was created
        requests: Saved requests in this collection
    """
    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    requests: Mapped[List["SavedRequest"]] = relationship(
        "SavedRequest",
        back_populates="collection",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
