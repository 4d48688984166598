"""
Models package for Postman-Lite.

Exports the SQLAlchemy models backing the saved-request store.
"""

from .collection import Collection
from .request import SavedRequest

__all__ = [
    "Collection",
    "SavedRequest",
]
