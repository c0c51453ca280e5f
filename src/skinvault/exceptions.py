"""
Custom exceptions for the skinvault application.

This module defines the domain-specific exceptions raised by the texture
codec, the storage layers and the render service, plus the API layer
exceptions that map onto RFC 7807 problem responses.
"""

from __future__ import annotations

from typing import Any

from skinvault.api.schemas.responses import (
    ApiError,
    ERROR_TITLES,
    ErrorCode,
    get_error_type_uri,
)


class SkinVaultError(Exception):
    """Base exception for all skinvault errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize SkinVaultError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class InvalidSizeError(SkinVaultError):
    """
    Exception raised when a render is requested at an unsupported size.

    This is the only render failure surfaced to callers; it is raised
    before any registry or storage I/O takes place.

    Attributes
    ----------
    size : int
        The requested size.
    minimum : int
        Smallest accepted size (inclusive).
    maximum : int
        Largest accepted size (inclusive).

    Examples
    --------
    >>> try:
    ...     await render_service.render(session, identity, RenderKind.AVATAR, 513)
    ... except InvalidSizeError as e:
    ...     print(f"size must be within {e.minimum}..{e.maximum}")
    """

    def __init__(self, size: int, minimum: int, maximum: int) -> None:
        """
        Initialize InvalidSizeError.

        Parameters
        ----------
        size : int
            The requested size.
        minimum : int
            Smallest accepted size (inclusive).
        maximum : int
            Largest accepted size (inclusive).
        """
        self.size = size
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Render size {size} is outside the range {minimum}-{maximum}"
        )


class DecodeError(SkinVaultError):
    """
    Exception raised when texture bytes cannot be decoded as PNG.

    Attributes
    ----------
    message : str
        Human-readable error message.
    original_error : Exception | None
        The decoder exception that caused this error.
    """

    def __init__(
        self,
        message: str = "Invalid PNG image",
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize DecodeError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Invalid PNG image").
        original_error : Exception | None, optional
            The decoder exception (default: None).
        """
        self.original_error = original_error
        super().__init__(message)


class DimensionMismatchError(SkinVaultError):
    """
    Exception raised when a decoded texture violates the expected geometry.

    Skins must be 64x64 or 64x32 and capes exactly 64x32.

    Attributes
    ----------
    width : int
        Width of the decoded bitmap.
    height : int
        Height of the decoded bitmap.
    expected : tuple[tuple[int, int], ...]
        Accepted (width, height) shapes.
    """

    def __init__(
        self,
        width: int,
        height: int,
        expected: tuple[tuple[int, int], ...],
    ) -> None:
        """
        Initialize DimensionMismatchError.

        Parameters
        ----------
        width : int
            Width of the decoded bitmap.
        height : int
            Height of the decoded bitmap.
        expected : tuple[tuple[int, int], ...]
            Accepted (width, height) shapes.
        """
        self.width = width
        self.height = height
        self.expected = expected
        shapes = " or ".join(f"{w}x{h}" for w, h in expected)
        super().__init__(
            f"Texture is {width}x{height} pixels; expected {shapes}"
        )


class StorageError(SkinVaultError):
    """
    Exception raised for blob or artifact storage I/O failures.

    Distinguishes "storage unavailable" from "not present": lookups that
    simply find nothing return ``None`` instead of raising.

    Attributes
    ----------
    operation : str | None
        The storage operation that failed (e.g., "lookup", "put", "delete").
    path : str | None
        The storage location involved.
    original_error : Exception | None
        The underlying I/O exception.
    """

    def __init__(
        self,
        message: str = "Storage operation failed",
        operation: str | None = None,
        path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize StorageError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Storage operation failed").
        operation : str | None, optional
            The storage operation that failed (default: None).
        path : str | None, optional
            The storage location involved (default: None).
        original_error : Exception | None, optional
            The underlying I/O exception (default: None).
        """
        self.operation: str | None = operation
        self.path: str | None = path
        self.original_error: Exception | None = original_error
        super().__init__(message)


class RepositoryError(SkinVaultError):
    """
    Exception raised for repository/database operation failures.

    Attributes
    ----------
    operation : str | None
        The database operation that failed (e.g., "insert", "update", "delete").
    entity_type : str | None
        The type of entity involved (e.g., "UserTexture").
    original_error : Exception | None
        The original database exception that caused this error.
    """

    def __init__(
        self,
        message: str = "Repository operation failed",
        operation: str | None = None,
        entity_type: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize RepositoryError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Repository operation failed").
        operation : str | None, optional
            The database operation that failed (default: None).
        entity_type : str | None, optional
            The type of entity involved (default: None).
        original_error : Exception | None, optional
            The original database exception (default: None).
        """
        self.operation: str | None = operation
        self.entity_type: str | None = entity_type
        self.original_error: Exception | None = original_error
        super().__init__(message)


# =============================================================================
# API Layer Exceptions
# =============================================================================


class APIError(SkinVaultError):
    """Base exception for API layer errors.

    Attributes
    ----------
    status_code : int
        HTTP status code for the error response (default: 500).
    error_code : ErrorCode
        Machine-readable error code for API consumers.
    message : str
        Human-readable error message.
    details : dict[str, Any] | None
        Additional error context (e.g., resource_type, identifier).
    """

    status_code: int = 500
    _error_code_value: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize APIError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        details : dict[str, Any] | None, optional
            Additional error context (default: None).
        """
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def error_code(self) -> ErrorCode:
        """Get the error code as an ErrorCode enum."""
        return ErrorCode(self._error_code_value)

    def to_api_error(self) -> ApiError:
        """Convert to API response schema."""
        return ApiError(
            code=self.error_code.value,
            message=self.message,
            details=self.details,
        )

    def to_problem_detail(self, instance: str, request_id: str) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Detail dictionary.

        Parameters
        ----------
        instance : str
            URI reference of the specific occurrence.
        request_id : str
            Unique request identifier for correlation and debugging.

        Returns
        -------
        dict[str, Any]
            Dictionary with RFC 7807 fields suitable for ProblemDetail model.
        """
        return {
            "type": get_error_type_uri(self.error_code),
            "title": ERROR_TITLES.get(self.error_code, "Error"),
            "status": self.status_code,
            "detail": self.message,
            "instance": instance,
            "code": self.error_code.value,
            "request_id": request_id,
        }


class NotFoundError(APIError):
    """Resource not found (404).

    Examples
    --------
    >>> raise NotFoundError(
    ...     resource_type="Skin",
    ...     identifier="069a79f444e94726a5befca90e38aaf5",
    ... )
    """

    status_code: int = 404
    _error_code_value: str = "NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        identifier: str,
        hint: str | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Parameters
        ----------
        resource_type : str
            The type of resource that was not found (e.g., "Skin", "Cape").
        identifier : str
            The identifier used to look up the resource.
        hint : str | None, optional
            Additional hint for the user (default: None).
        """
        self.resource_type = resource_type
        self.identifier = identifier
        message = f"{resource_type} '{identifier}' not found"
        if hint:
            message += f". {hint}"
        super().__init__(
            message=message,
            details={"resource_type": resource_type, "identifier": identifier},
        )


class BadRequestError(APIError):
    """Invalid request parameters (400)."""

    status_code: int = 400
    _error_code_value: str = "BAD_REQUEST"


class PayloadTooLargeError(APIError):
    """Uploaded payload exceeds the configured limit (413)."""

    status_code: int = 413
    _error_code_value: str = "PAYLOAD_TOO_LARGE"

    def __init__(self, size: int, limit: int) -> None:
        """
        Initialize PayloadTooLargeError.

        Parameters
        ----------
        size : int
            Size of the rejected payload in bytes.
        limit : int
            Maximum accepted size in bytes.
        """
        self.size = size
        self.limit = limit
        super().__init__(
            message=f"Upload of {size} bytes exceeds the {limit} byte limit",
            details={"size": size, "limit": limit},
        )
