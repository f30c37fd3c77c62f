"""Workflow status schemas."""

from enum import Enum

from pydantic import BaseModel, Field

from lingodub.schemas.audio_generation_job import AudioGenerationJob
from lingodub.schemas.final_output import FinalOutput
from lingodub.schemas.translation_job import TranslationJob
from lingodub.schemas.video import Video


class OverallStatus(str, Enum):
    NOT_STARTED = "not_started"
    UPLOADING = "uploading"
    TRANSLATING = "translating"
    GENERATING_AUDIO = "generating_audio"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowStatus(BaseModel):
    video: Video | None = None
    translation_job: TranslationJob | None = None
    audio_generation_job: AudioGenerationJob | None = None
    final_output: FinalOutput | None = None
    overall_status: OverallStatus
    progress: int = Field(ge=0, le=100)


class HealthcheckResponse(BaseModel):
    status: str
    timestamp: str
