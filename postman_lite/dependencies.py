"""
FastAPI dependencies shared by the routers.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .database import get_db
from .services.forwarding_executor import ForwardingExecutor
from .services.request_store import RequestStore


def get_executor(request: Request) -> ForwardingExecutor:
    """The forwarding executor created in the application lifespan."""
    return request.app.state.executor


def get_request_store(db: Session = Depends(get_db)) -> RequestStore:
    return RequestStore(db)
