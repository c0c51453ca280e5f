"""API response envelope schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from starlette.responses import JSONResponse


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    4xx Client Errors:
        NOT_FOUND: Resource does not exist (404)
        BAD_REQUEST: Invalid request parameters (400)
        INVALID_SIZE: Render size outside the supported range (400)
        INVALID_TEXTURE: Uploaded texture is not a valid skin/cape PNG (400)
        PAYLOAD_TOO_LARGE: Uploaded file exceeds the size limit (413)
        VALIDATION_ERROR: Request validation failed (422)

    5xx Server Errors:
        INTERNAL_ERROR: Unexpected server error (500)
        DATABASE_ERROR: Database operation failed (500)
        STORAGE_ERROR: Blob storage operation failed (500)
    """

    # 4xx Client Errors
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_SIZE = "INVALID_SIZE"
    INVALID_TEXTURE = "INVALID_TEXTURE"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 5xx Server Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


# RFC 7807 Constants and Utilities
ERROR_TYPE_BASE: str = "https://api.skinvault.dev/errors"
"""Base URI for constructing RFC 7807 type URIs."""


def get_error_type_uri(code: ErrorCode) -> str:
    """Generate RFC 7807 type URI from error code.

    Parameters
    ----------
    code : ErrorCode
        The error code to generate a URI for.

    Returns
    -------
    str
        The full RFC 7807 type URI for the error code.

    Examples
    --------
    >>> get_error_type_uri(ErrorCode.NOT_FOUND)
    'https://api.skinvault.dev/errors/NOT_FOUND'
    """
    return f"{ERROR_TYPE_BASE}/{code.value}"


# RFC 7807 Error Title Mapping
ERROR_TITLES: dict[ErrorCode, str] = {
    ErrorCode.NOT_FOUND: "Resource Not Found",
    ErrorCode.BAD_REQUEST: "Bad Request",
    ErrorCode.INVALID_SIZE: "Invalid Render Size",
    ErrorCode.INVALID_TEXTURE: "Invalid Texture",
    ErrorCode.PAYLOAD_TOO_LARGE: "Payload Too Large",
    ErrorCode.VALIDATION_ERROR: "Validation Error",
    ErrorCode.INTERNAL_ERROR: "Internal Server Error",
    ErrorCode.DATABASE_ERROR: "Database Error",
    ErrorCode.STORAGE_ERROR: "Storage Error",
}
"""Mapping from ErrorCode to human-readable RFC 7807 title."""

T = TypeVar("T")


class ApiError(BaseModel):
    """Standard error response."""

    model_config = ConfigDict(strict=True)

    code: str  # Machine-readable error code (e.g., NOT_FOUND, INVALID_SIZE)
    message: str  # Human-readable message
    details: dict[str, Any] | None = None


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    model_config = ConfigDict(strict=True)

    data: T


# RFC 7807 Problem Details Models


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response for API errors.

    Attributes
    ----------
    type : str
        URI identifying the problem type.
    title : str
        Short human-readable summary of the problem type.
    status : int
        HTTP status code (4xx or 5xx).
    detail : str
        Human-readable explanation of the specific problem occurrence.
    instance : str
        URI reference of the specific occurrence.
    code : str
        Application-specific error code from ErrorCode enum.
    request_id : str
        Unique request identifier for correlation and debugging.
    """

    type: str = Field(
        ...,
        description="URI identifying the problem type",
        examples=["https://api.skinvault.dev/errors/INVALID_SIZE"],
    )
    title: str = Field(
        ...,
        description="Short human-readable summary",
        examples=["Invalid Render Size"],
    )
    status: int = Field(
        ...,
        ge=400,
        le=599,
        description="HTTP status code",
        examples=[400],
    )
    detail: str = Field(
        ...,
        description="Human-readable explanation of the problem",
        examples=["Render size 513 is outside the range 8-512"],
    )
    instance: str = Field(
        ...,
        description="URI reference of the specific occurrence",
        examples=["/api/v1/avatar/069a79f444e94726a5befca90e38aaf5/513"],
    )
    code: str = Field(
        ...,
        description="Application-specific error code",
        examples=["INVALID_SIZE"],
    )
    request_id: str = Field(
        ...,
        description="Unique request identifier for correlation",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )


class FieldError(BaseModel):
    """Individual field validation error for RFC 7807 validation responses."""

    loc: list[str | int] = Field(
        ...,
        description="Location of the error (field path)",
        examples=[["path", "user_uuid"]],
    )
    msg: str = Field(..., description="Error message")
    type: str = Field(..., description="Error type identifier")


class ValidationProblemDetail(ProblemDetail):
    """RFC 7807 Problem Details with validation errors for 422 responses."""

    errors: list[FieldError] = Field(
        ...,
        description="List of field-level validation errors",
    )


class ProblemJSONResponse(JSONResponse):
    """JSONResponse subclass for RFC 7807 Problem Details.

    Sets the ``application/problem+json`` media type.
    """

    media_type = "application/problem+json"
