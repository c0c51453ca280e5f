"""Fixtures for router tests: the real app wired to temporary storage."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from skinvault.api.deps import (
    get_artifact_store,
    get_db,
    get_profile_service,
    get_render_service,
    get_source_registry,
)
from skinvault.api.main import app
from skinvault.container import Container


@pytest.fixture
async def async_client(
    db_session: AsyncSession, test_container: Container
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the database and services overridden."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_render_service] = lambda: test_container.render_service
    app.dependency_overrides[get_source_registry] = lambda: test_container.source_registry
    app.dependency_overrides[get_profile_service] = lambda: test_container.profile_service
    app.dependency_overrides[get_artifact_store] = lambda: test_container.artifact_store

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
