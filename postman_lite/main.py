"""
Postman-Lite - FastAPI Application Entry Point

Executes caller-described HTTP requests against arbitrary upstreams, relaying
them for callers blocked by cross-origin restrictions, and runs saved
requests in bulk.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db
from .exceptions import register_exception_handlers
from .routers import collections, proxy
from .services.forwarding_executor import ForwardingExecutor, create_http_client


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    init_db()
    app.state.executor = ForwardingExecutor(
        create_http_client(settings),
        user_agent=settings.user_agent,
    )
    logger.info("Postman-Lite started")
    yield
    await app.state.executor.aclose()


app = FastAPI(
    title="Postman-Lite",
    description="Request execution and forwarding engine for a Postman-like API testing tool",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint returning API information."""
    return {
        "name": "Postman-Lite",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


app.include_router(proxy.router)
app.include_router(collections.router)
