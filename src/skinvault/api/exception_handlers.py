"""Centralized exception handlers for FastAPI with RFC 7807 compliance.

Converts API and domain exceptions into RFC 7807 Problem Details
(``application/problem+json``) so every endpoint reports errors with the
same structure.

RFC 7807 Reference: https://tools.ietf.org/html/rfc7807
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from skinvault.api.middleware.request_id import get_request_id
from skinvault.api.schemas.responses import (
    ERROR_TITLES,
    ErrorCode,
    FieldError,
    ProblemDetail,
    ProblemJSONResponse,
    ValidationProblemDetail,
    get_error_type_uri,
)
from skinvault.exceptions import (
    APIError,
    DecodeError,
    DimensionMismatchError,
    InvalidSizeError,
    RepositoryError,
    StorageError,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Constants for Detail Message Truncation
# =============================================================================

MAX_DETAIL_LENGTH = 4096
"""Maximum allowed length for detail messages before truncation."""

TRUNCATION_SUFFIX = "... (truncated)"
"""Suffix appended to truncated detail messages."""


# =============================================================================
# Helper Functions
# =============================================================================


def _truncate_detail(detail: str) -> str:
    """Truncate a detail message to ``MAX_DETAIL_LENGTH`` characters."""
    if len(detail) <= MAX_DETAIL_LENGTH:
        return detail
    return detail[: MAX_DETAIL_LENGTH - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX


def _get_request_id_with_fallback(request: Request | None = None) -> str:
    """Get the request ID from the context variable, then ``request.state``.

    Returns ``"-"`` when neither is available.
    """
    request_id = get_request_id()
    if request_id:
        return request_id

    if request is not None:
        state_request_id = getattr(request.state, "request_id", None)
        if state_request_id:
            return str(state_request_id)

    return "-"


def _safe_problem_response(
    code: ErrorCode,
    status: int,
    detail: str,
    request: Request,
    headers: dict[str, str] | None = None,
) -> ProblemJSONResponse:
    """Build a ProblemJSONResponse, falling back to a minimal 500 body.

    Parameters
    ----------
    code : ErrorCode
        The error code for the problem.
    status : int
        HTTP status code for the response.
    detail : str
        Human-readable explanation of the problem.
    request : Request
        The request being answered (instance path and request ID).
    headers : dict[str, str] | None, optional
        Additional headers to include in the response.

    Returns
    -------
    ProblemJSONResponse
        RFC 7807 compliant JSON response.
    """
    instance = str(request.url.path)
    request_id = _get_request_id_with_fallback(request)
    try:
        problem = ProblemDetail(
            type=get_error_type_uri(code),
            title=ERROR_TITLES.get(code, "Error"),
            status=status,
            detail=_truncate_detail(detail),
            instance=instance,
            code=code.value,
            request_id=request_id,
        )
        return ProblemJSONResponse(
            content=problem.model_dump(),
            status_code=status,
            headers=headers,
        )
    except Exception as e:
        logger.error("Error serializing error response: %s", e, exc_info=True)
        return ProblemJSONResponse(
            content={
                "type": get_error_type_uri(ErrorCode.INTERNAL_ERROR),
                "title": ERROR_TITLES[ErrorCode.INTERNAL_ERROR],
                "status": 500,
                "detail": "An unexpected error occurred",
                "instance": instance,
                "code": ErrorCode.INTERNAL_ERROR.value,
                "request_id": request_id,
            },
            status_code=500,
        )


# =============================================================================
# Exception Handlers
# =============================================================================


async def api_error_handler(request: Request, exc: APIError) -> ProblemJSONResponse:
    """Handle APIError subclasses (NotFoundError, BadRequestError,
    PayloadTooLargeError) using their own status and error code."""
    return _safe_problem_response(
        code=exc.error_code,
        status=exc.status_code,
        detail=exc.message,
        request=request,
    )


async def invalid_size_handler(
    request: Request, exc: InvalidSizeError
) -> ProblemJSONResponse:
    """Handle InvalidSizeError as a 400 ``INVALID_SIZE`` problem."""
    return _safe_problem_response(
        code=ErrorCode.INVALID_SIZE,
        status=400,
        detail=exc.message,
        request=request,
    )


async def invalid_texture_handler(
    request: Request, exc: DecodeError | DimensionMismatchError
) -> ProblemJSONResponse:
    """Handle rejected uploads as a 400 ``INVALID_TEXTURE`` problem.

    Parameters
    ----------
    request : Request
        The incoming FastAPI request.
    exc : DecodeError | DimensionMismatchError
        The upload validation failure.

    Returns
    -------
    ProblemJSONResponse
        RFC 7807 compliant JSON response with 400 status.
    """
    logger.warning("Rejected texture upload on %s: %s", request.url.path, exc.message)
    return _safe_problem_response(
        code=ErrorCode.INVALID_TEXTURE,
        status=400,
        detail=exc.message,
        request=request,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> ProblemJSONResponse:
    """Handle Pydantic RequestValidationError and convert to RFC 7807 format.

    Creates a ValidationProblemDetail with one FieldError per Pydantic error,
    preserving Pydantic's ordering.

    Parameters
    ----------
    request : Request
        The incoming FastAPI request.
    exc : RequestValidationError
        The Pydantic validation error.

    Returns
    -------
    ProblemJSONResponse
        RFC 7807 compliant JSON response with status 422 and errors array.
    """
    instance = str(request.url.path)
    request_id = _get_request_id_with_fallback(request)

    errors = [
        FieldError(
            loc=list(error.get("loc", [])),
            msg=error.get("msg", ""),
            type=error.get("type", ""),
        )
        for error in exc.errors()
    ]

    validation_problem = ValidationProblemDetail(
        type=get_error_type_uri(ErrorCode.VALIDATION_ERROR),
        title=ERROR_TITLES[ErrorCode.VALIDATION_ERROR],
        status=422,
        detail="Request validation failed",
        instance=instance,
        code=ErrorCode.VALIDATION_ERROR.value,
        request_id=request_id,
        errors=errors,
    )

    return ProblemJSONResponse(
        content=validation_problem.model_dump(),
        status_code=422,
    )


async def storage_error_handler(
    request: Request, exc: StorageError
) -> ProblemJSONResponse:
    """Handle StorageError with a generic 500 ``STORAGE_ERROR`` problem.

    The storage path is logged but not exposed to the client.
    """
    logger.error(
        "Storage error: %s (operation=%s, path=%s)",
        exc.message,
        exc.operation,
        exc.path,
        exc_info=exc.original_error,
    )
    return _safe_problem_response(
        code=ErrorCode.STORAGE_ERROR,
        status=500,
        detail="A storage error occurred",
        request=request,
    )


async def repository_error_handler(
    request: Request, exc: RepositoryError
) -> ProblemJSONResponse:
    """Handle RepositoryError and convert to RFC 7807 Problem Detail.

    Uses a generic detail message to avoid exposing database implementation
    details. The internal error is logged for debugging.

    Parameters
    ----------
    request : Request
        The incoming FastAPI request.
    exc : RepositoryError
        The repository/database error.

    Returns
    -------
    ProblemJSONResponse
        RFC 7807 compliant JSON response with 500 status and generic detail.
    """
    logger.error(
        "Repository error: %s (operation=%s, entity=%s)",
        exc.message,
        exc.operation,
        exc.entity_type,
        exc_info=exc.original_error,
    )
    return _safe_problem_response(
        code=ErrorCode.DATABASE_ERROR,
        status=500,
        detail="A database error occurred",
        request=request,
    )


async def generic_error_handler(
    request: Request, exc: Exception
) -> ProblemJSONResponse:
    """Catch-all handler: log the stack trace, return a generic 500."""
    logger.exception("Unhandled exception: %s", exc)
    return _safe_problem_response(
        code=ErrorCode.INTERNAL_ERROR,
        status=500,
        detail="An unexpected error occurred",
        request=request,
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Examples
    --------
    >>> app = FastAPI()
    >>> register_exception_handlers(app)
    """
    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InvalidSizeError, invalid_size_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DecodeError, invalid_texture_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DimensionMismatchError, invalid_texture_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RepositoryError, repository_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_error_handler)
