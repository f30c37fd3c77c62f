"""Video API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    FAILED = "failed"


class Video(BaseModel):
    id: int
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    duration: float | None = None
    format: str
    upload_status: UploadStatus
    uploaded_at: datetime
    created_at: datetime


class CreateVideoRequest(BaseModel):
    filename: str = Field(min_length=1)
    original_filename: str = Field(min_length=1)
    file_path: str = Field(min_length=1)
    file_size: int = Field(gt=0)
    duration: float | None = Field(default=None, gt=0)
    format: str = Field(min_length=1)


class UpdateVideoStatusRequest(BaseModel):
    upload_status: UploadStatus
    duration: float | None = Field(default=None, gt=0)
    format: str | None = Field(default=None, min_length=1)
