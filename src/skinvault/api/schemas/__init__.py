"""Pydantic schemas for API requests and responses."""

from skinvault.api.schemas.responses import (
    ApiError,
    ApiResponse,
    ErrorCode,
    FieldError,
    ProblemDetail,
    ProblemJSONResponse,
    ValidationProblemDetail,
)
from skinvault.api.schemas.textures import (
    MessageResult,
    ServiceStats,
    TexturesResponse,
    TextureUploadResult,
)

__all__ = [
    "ApiError",
    "ApiResponse",
    "ErrorCode",
    "FieldError",
    "MessageResult",
    "ProblemDetail",
    "ProblemJSONResponse",
    "ServiceStats",
    "TextureUploadResult",
    "TexturesResponse",
    "ValidationProblemDetail",
]
