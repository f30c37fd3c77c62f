"""Final output API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class FinalOutput(BaseModel):
    id: int
    video_id: int
    translation_job_id: int
    audio_generation_job_id: int
    final_video_path: str
    created_at: datetime


class CreateFinalOutputRequest(BaseModel):
    video_id: int
    translation_job_id: int
    audio_generation_job_id: int
    final_video_path: str = Field(min_length=1)
