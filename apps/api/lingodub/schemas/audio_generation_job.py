"""Audio generation job API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class AudioGenerationStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class AudioGenerationJob(BaseModel):
    id: int
    translation_job_id: int
    status: AudioGenerationStatus
    generated_audio_path: str | None = None
    voice_cloned: bool
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime


class CreateAudioGenerationJobRequest(BaseModel):
    translation_job_id: int
    voice_cloned: bool = True


class UpdateAudioGenerationJobRequest(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    status: AudioGenerationStatus | None = None
    generated_audio_path: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
