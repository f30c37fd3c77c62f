"""Application exception types."""

from typing import Any

from lingodub.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class WorkflowValidationError(ApiError):
    """A workflow prerequisite was not met; nothing was mutated."""

    http_status = 409
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            status_code=self.http_status,
            code=self.error_code,
            message=message,
            details=details,
        )


class NotFoundError(WorkflowValidationError):
    """Parent entity is absent, or does not belong to the referenced parent."""

    http_status = 404
    error_code = "RESOURCE_NOT_FOUND"


class InvalidStateError(WorkflowValidationError):
    """Parent entity exists but its status forbids the requested transition."""

    error_code = "INVALID_STATE"


class ConflictError(WorkflowValidationError):
    """An identical final output already exists."""

    error_code = "FINAL_OUTPUT_CONFLICT"


__all__ = [
    "ApiError",
    "ConflictError",
    "InvalidStateError",
    "NotFoundError",
    "WorkflowValidationError",
]
