"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class NotFoundErrorResponse(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str
    details: dict[str, Any] | None = None


class InvalidStateErrorDetails(BaseModel):
    entity: str
    entity_id: int
    required_status: str | None = None
    current_status: str
    attempted_status: str | None = None


class InvalidStateErrorResponse(BaseModel):
    code: Literal["INVALID_STATE"]
    message: str
    details: InvalidStateErrorDetails


class FinalOutputConflictErrorDetails(BaseModel):
    video_id: int
    translation_job_id: int
    audio_generation_job_id: int


class FinalOutputConflictErrorResponse(BaseModel):
    code: Literal["FINAL_OUTPUT_CONFLICT"]
    message: str
    details: FinalOutputConflictErrorDetails


class RequestValidationErrorResponse(BaseModel):
    code: Literal["VALIDATION_ERROR"]
    message: str
    details: dict[str, Any] | None = None
