"""Unit tests for the RFC 7807 exception handlers.

Every handler is exercised through a throwaway FastAPI app so the status
code, media type and problem body are checked end to end.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi import FastAPI, Query
from httpx import ASGITransport, AsyncClient

from skinvault.api.exception_handlers import (
    MAX_DETAIL_LENGTH,
    TRUNCATION_SUFFIX,
    _truncate_detail,
    register_exception_handlers,
)
from skinvault.api.middleware import RequestIdMiddleware
from skinvault.exceptions import (
    BadRequestError,
    DecodeError,
    DimensionMismatchError,
    InvalidSizeError,
    NotFoundError,
    PayloadTooLargeError,
    RepositoryError,
    StorageError,
)

pytestmark = pytest.mark.asyncio


def _app_raising(exc_factory: Callable[[], Exception]) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom() -> None:
        raise exc_factory()

    @app.get("/validated")
    async def validated(size: int = Query(...)) -> dict:
        return {"size": size}

    return app


async def _get(app: FastAPI, path: str = "/boom", **kwargs):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path, **kwargs)


class TestProblemResponses:
    """Status codes and error codes per exception type."""

    @pytest.mark.parametrize(
        ("exc_factory", "status", "code"),
        [
            (lambda: NotFoundError("Skin", "abc"), 404, "NOT_FOUND"),
            (lambda: BadRequestError("Invalid UUID format"), 400, "BAD_REQUEST"),
            (lambda: PayloadTooLargeError(size=10, limit=5), 413, "PAYLOAD_TOO_LARGE"),
            (lambda: InvalidSizeError(513, 8, 512), 400, "INVALID_SIZE"),
            (lambda: DecodeError(), 400, "INVALID_TEXTURE"),
            (lambda: DimensionMismatchError(1, 1, ((64, 32),)), 400, "INVALID_TEXTURE"),
            (lambda: StorageError("disk gone", path="/secret/path"), 500, "STORAGE_ERROR"),
            (lambda: RepositoryError("select failed"), 500, "DATABASE_ERROR"),
            (lambda: RuntimeError("unexpected"), 500, "INTERNAL_ERROR"),
        ],
    )
    async def test_status_and_code(self, exc_factory, status: int, code: str) -> None:
        response = await _get(_app_raising(exc_factory))

        assert response.status_code == status
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["status"] == status
        assert body["code"] == code
        assert body["type"] == f"https://api.skinvault.dev/errors/{code}"
        assert body["instance"] == "/boom"

    async def test_client_errors_expose_message(self) -> None:
        response = await _get(_app_raising(lambda: InvalidSizeError(7, 8, 512)))
        assert response.json()["detail"] == "Render size 7 is outside the range 8-512"

    async def test_server_errors_hide_internals(self) -> None:
        response = await _get(
            _app_raising(lambda: StorageError("disk gone", path="/secret/path"))
        )
        detail = response.json()["detail"]
        assert "/secret/path" not in detail
        assert detail == "A storage error occurred"

    async def test_request_id_is_echoed_in_body(self) -> None:
        response = await _get(
            _app_raising(lambda: NotFoundError("Skin", "abc")),
            headers={"X-Request-ID": "trace-123"},
        )

        assert response.json()["request_id"] == "trace-123"
        assert response.headers["X-Request-ID"] == "trace-123"

    async def test_validation_errors_are_listed(self) -> None:
        response = await _get(_app_raising(lambda: RuntimeError()), "/validated?size=abc")

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"][0]["loc"] == ["query", "size"]


class TestTruncateDetail:
    def test_short_detail_unchanged(self) -> None:
        assert _truncate_detail("short") == "short"

    def test_long_detail_truncated(self) -> None:
        result = _truncate_detail("x" * (MAX_DETAIL_LENGTH + 10))
        assert len(result) == MAX_DETAIL_LENGTH
        assert result.endswith(TRUNCATION_SUFFIX)
