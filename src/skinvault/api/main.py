"""FastAPI application for the skinvault API."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from skinvault import __version__
from skinvault.api.exception_handlers import register_exception_handlers
from skinvault.api.middleware import RequestIdMiddleware
from skinvault.api.routers import admin, health, renders, textures
from skinvault.config.database import db_manager
from skinvault.config.settings import settings
from skinvault.services.profile_service import TEXTURES_PATH

logger = logging.getLogger(__name__)

# Paths whose request lines are logged at DEBUG (high-volume image traffic)
QUIET_PATH_PREFIXES: tuple[str, ...] = (
    "/api/v1/avatar/",
    "/api/v1/head/",
    TEXTURES_PATH + "/",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings.create_directories()
    logger.info(
        "Storage ready: textures=%s, artifacts=%s",
        settings.textures_dir,
        settings.artifacts_dir,
    )
    yield
    await db_manager.close()


app = FastAPI(
    title="Skinvault API",
    description="Skin and cape storage with cached avatar and head renders",
    version=__version__,
    lifespan=lifespan,
)


def _get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxied requests."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host
    return "unknown"


@app.middleware("http")
async def log_requests(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """
    Middleware to log incoming requests and outgoing responses.

    Logs the response status and timing with a level matching the status:
    INFO for 2xx/3xx, WARNING for 4xx, ERROR for 5xx. Successful image
    requests are logged at DEBUG.
    """
    start_time = time.perf_counter()
    method = request.method
    path = request.url.path
    quiet = path.startswith(QUIET_PATH_PREFIXES)

    logger.log(
        logging.DEBUG if quiet else logging.INFO,
        "Request: %s %s from %s",
        method,
        path,
        _get_client_ip(request),
    )

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    status_code = response.status_code

    if status_code >= 500:
        log_level = logging.ERROR
    elif status_code >= 400:
        log_level = logging.WARNING
    elif quiet:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logger.log(
        log_level,
        "Response: %s %s - %d (%.3fs)",
        method,
        path,
        status_code,
        duration,
    )
    return response


app.add_middleware(RequestIdMiddleware)
register_exception_handlers(app)

# Mount routers under /api/v1 prefix
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(renders.router, prefix="/api/v1")
app.include_router(textures.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")

# Raw texture files referenced by profile payloads
app.mount(
    TEXTURES_PATH,
    StaticFiles(directory=settings.textures_dir, check_dir=False),
    name="textures",
)
