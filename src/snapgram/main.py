"""Main FastAPI application for Snapgram - social media REST API.

This module serves as the entry point for the Snapgram application, a
FastAPI-based REST API for users, posts, comments, follow relationships and
image uploads, backed by MongoDB.

Application Architecture:
    - Presentation Layer: FastAPI routers and endpoints
    - Business Logic Layer: Service classes with domain rules
    - Data Access Layer: Repositories over an injected Database
    - Cross-cutting Concerns: Logging, error handling, dependency injection

Middleware Stack:
    1. CORS middleware for cross-origin request handling
    2. Request correlation and logging middleware
    3. Unified error handlers

Environment Configuration:
    - DATABASE_URI / DATABASE_NAME: MongoDB connection
    - ACCESS_TOKEN_SECRET / REFRESH_TOKEN_SECRET: JWT signing secrets
    - PORT or API_PORT: Listening port
    - API_DEBUG: Enable debug mode and verbose logging

Example Usage:
    Start the development server:
        snapgram                      # honours PORT / API_PORT and API_HOST
        uvicorn snapgram.main:app --reload --port 3500

    Health check:
        curl http://localhost:3500/health
"""

import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .core.dependencies import get_service_container
from .core.error_handlers import register_error_handlers
from .core.logging import ContextLogger, correlation_id_var, setup_logging
from .core.settings import settings
from .routers import auth, comments, posts, uploads, users


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database on startup and close it on shutdown.

    Startup Sequence:
        1. Initialize structured logging
        2. Record application start time for uptime tracking
        3. Build the service container and open the database

    Any exception during startup prevents the application from starting.
    """
    setup_logging()
    app.state.logger = ContextLogger(__name__)
    app.state.start_time = time.time()

    container = get_service_container()
    await container.startup()
    app.state.container = container

    app.state.logger.info(
        "Snapgram application started successfully",
        extra={
            "environment": "development" if settings.debug else "production",
            "version": settings.version,
            "debug_mode": settings.debug,
            "database": container.database.name,
            "startup_time": time.time() - app.state.start_time,
        },
    )

    yield

    total_uptime = time.time() - app.state.start_time
    await container.shutdown()
    app.state.logger.info(
        "Snapgram application shutting down gracefully",
        extra={"total_uptime_seconds": round(total_uptime, 2)},
    )


app = FastAPI(
    title=settings.project_name,
    description="""
    Snapgram is a REST API for a photo-sharing social network.

    Features:
    • Users with follow relationships
    • Image posts with likes and comments
    • Image uploads stored per user

    Authentication:
    Log in at POST /auth to receive an access token and a refresh cookie.
    Send the access token as `Authorization: Bearer <token>`; renew it at
    POST /auth/refresh.
    """,
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,  # Refresh cookie is sent cross-site
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
    max_age=3600,
)


@app.middleware("http")
async def request_middleware(request: Request, call_next: Any) -> Any:
    """HTTP request correlation and logging middleware.

    Takes the correlation ID from a valid ``X-Request-ID`` UUID header or
    generates one, exposes it to every ContextLogger for the duration of
    the request, logs request start and completion, and echoes the ID in
    ``X-Correlation-ID``.
    """
    client_request_id = request.headers.get("X-Request-ID")
    request_id_source = "generated"
    if client_request_id:
        try:
            correlation_id = str(uuid.UUID(client_request_id))
            request_id_source = "client"
        except ValueError:
            correlation_id = str(uuid.uuid4())
            request_id_source = "regenerated"
    else:
        correlation_id = str(uuid.uuid4())
    request.state.correlation_id = correlation_id
    token = correlation_id_var.set(correlation_id)

    logger = app.state.logger
    start_time = time.time()

    try:
        logger.info(
            "HTTP request initiated",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent"),
                "request_id_source": request_id_source,
            },
        )

        response = await call_next(request)

        logger.info(
            "HTTP request completed",
            extra={
                "status_code": response.status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
    finally:
        correlation_id_var.reset(token)

    response.headers["X-Correlation-ID"] = correlation_id
    return response


register_error_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(uploads.router)


@app.get("/", summary="API root information", tags=["System"])
async def root() -> dict[str, Any]:
    """Return basic service information and documentation links."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs",
        "redoc": "/redoc",
        "status": "operational",
        "features": ["auth", "users", "posts", "comments", "uploads"],
    }


@app.get(
    "/health",
    summary="Application health check",
    description="Returns uptime, resource usage and database reachability",
    tags=["System"],
)
async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for load balancers and monitoring.

    Returns 200 when the database answers a ping, 503 otherwise.
    """
    import psutil

    process = psutil.Process()
    uptime_seconds = int(time.time() - app.state.start_time)
    hours = uptime_seconds // 3600
    minutes = (uptime_seconds % 3600) // 60

    container = app.state.container
    try:
        database_ok = await container.database.ping()
    except Exception:
        app.state.logger.exception("Database ping failed")
        database_ok = False

    health_status = "healthy" if database_ok else "degraded"

    response_body = {
        "status": health_status,
        "version": settings.version,
        "environment": "development" if settings.debug else "production",
        "uptime_seconds": uptime_seconds,
        "uptime_human": f"{hours} hours, {minutes} minutes",
        "memory_mb": round(process.memory_info().rss / 1024 / 1024, 2),
        "cpu_percent": round(process.cpu_percent(), 2),
        "dependencies": {
            "database": "connected" if database_ok else "unreachable",
            "logging_system": "operational",
        },
        "timestamp": time.time(),
        "correlation_id": getattr(request.state, "correlation_id", None),
    }

    status_code = (
        status.HTTP_200_OK
        if health_status == "healthy"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(status_code=status_code, content=response_body)


@app.get("/metrics", summary="Prometheus metrics", tags=["System"])
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def run() -> None:
    """Serve the application on the configured host and port."""
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,  # setup_logging owns the root logger
    )


if __name__ == "__main__":
    run()
