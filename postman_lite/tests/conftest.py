"""
Shared fixtures: simulated upstreams and an isolated request store.
"""

import asyncio
import json
import socket

import httpcore
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from postman_lite.database import Base, get_db
from postman_lite.dependencies import get_executor
from postman_lite.main import app
from postman_lite.models import Collection, SavedRequest
from postman_lite.services.forwarding_executor import ForwardingExecutor


TEST_DATABASE_URL = "sqlite:///./test_postman_lite.db"
test_engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})


@event.listens_for(test_engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


def wrapped_connect_error(os_error: OSError) -> httpx.ConnectError:
    """
    A ConnectError nested the way httpx and httpcore wrap socket failures.

    httpcore passes the socket error as an argument and suppresses the
    context; httpx then raises its own ConnectError from the httpcore one.
    """
    core_error = httpcore.ConnectError(os_error)
    core_error.__suppress_context__ = True
    error = httpx.ConnectError(str(os_error))
    error.__cause__ = core_error
    return error


def refused_error() -> httpx.ConnectError:
    os_error = OSError("All connection attempts failed")
    os_error.__cause__ = ConnectionRefusedError(111, "Connection refused")
    return wrapped_connect_error(os_error)


def dns_error() -> httpx.ConnectError:
    return wrapped_connect_error(socket.gaierror(-2, "Name or service not known"))


async def upstream(request: httpx.Request) -> httpx.Response:
    """
    Simulated third-party server.

    /echo      returns the request body as JSON
    /slow      answers after half a second
    /text      plain text
    /broken    declares JSON but sends garbage
    /status/N  answers with status N
    /headers   returns the received headers as JSON
    anything else returns a small JSON document
    """
    path = request.url.path
    if path == "/echo":
        return httpx.Response(200, json=json.loads(request.content or b"null"))
    if path == "/slow":
        await asyncio.sleep(0.5)
        return httpx.Response(200, json={"slow": True})
    if path == "/text":
        return httpx.Response(200, text="hello", headers={"Content-Type": "text/plain"})
    if path == "/broken":
        return httpx.Response(200, content=b"{not json", headers={"Content-Type": "application/json"})
    if path.startswith("/status/"):
        return httpx.Response(int(path.rsplit("/", 1)[1]), json={"error": "upstream said no"})
    if path == "/headers":
        return httpx.Response(200, json=dict(request.headers))
    if request.url.host == "refused.test":
        raise refused_error()
    return httpx.Response(200, json={"url": str(request.url), "method": request.method})


def make_executor(handler=upstream) -> ForwardingExecutor:
    return ForwardingExecutor(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def executor():
    return make_executor()


@pytest.fixture
def client(executor):
    """Test client wired to the simulated upstream and a fresh request store."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_executor] = lambda: executor
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        Base.metadata.drop_all(bind=test_engine)
        app.dependency_overrides.clear()


@pytest.fixture
def db_session(client):
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


def add_collection(db, name: str, requests: list[dict]) -> tuple[int, list[int]]:
    """Store a collection with its requests and return their IDs."""
    collection = Collection(name=name)
    db.add(collection)
    db.flush()
    saved = [SavedRequest(collection_id=collection.id, **fields) for fields in requests]
    db.add_all(saved)
    db.commit()
    return collection.id, [request.id for request in saved]
