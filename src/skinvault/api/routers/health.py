"""Health check endpoint."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from skinvault import __version__
from skinvault.api.schemas.responses import ApiResponse
from skinvault.config.database import db_manager
from skinvault.config.settings import settings

logger = logging.getLogger(__name__)


class HealthChecks(BaseModel):
    """Individual health check results."""

    model_config = ConfigDict(strict=True)

    database_latency_ms: Optional[int] = None
    storage_writable: bool = False


class HealthStatus(BaseModel):
    """Application health status."""

    model_config = ConfigDict(strict=True)

    status: str  # "healthy", "degraded", "unhealthy"
    version: str
    database: str  # "connected", "disconnected"
    timestamp: datetime
    checks: Optional[HealthChecks] = None


class HealthResponse(ApiResponse[HealthStatus]):
    """Response for health check endpoint."""

    pass


router = APIRouter()


def _storage_writable() -> bool:
    """Whether the texture and artifact directories exist and are writable."""
    return all(
        directory.is_dir() and os.access(directory, os.W_OK)
        for directory in (settings.textures_dir, settings.artifacts_dir)
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Reports database connectivity and whether the storage directories are
    writable. Renders degrade to placeholders without storage, so a
    missing storage directory is "degraded" rather than "unhealthy".
    """
    db_status = "disconnected"
    db_latency_ms: Optional[int] = None
    try:
        start = time.monotonic()
        async for session in db_manager.get_session():
            await session.execute(text("SELECT 1"))
            break
        db_latency_ms = int((time.monotonic() - start) * 1000)
        db_status = "connected"
    except (SQLAlchemyError, OSError):
        logger.warning("Health check: database unreachable", exc_info=True)

    storage_ok = _storage_writable()

    if db_status == "disconnected":
        status = "unhealthy"
    elif not storage_ok:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        data=HealthStatus(
            status=status,
            version=__version__,
            database=db_status,
            timestamp=datetime.now(timezone.utc),
            checks=HealthChecks(
                database_latency_ms=db_latency_ms,
                storage_writable=storage_ok,
            ),
        )
    )
