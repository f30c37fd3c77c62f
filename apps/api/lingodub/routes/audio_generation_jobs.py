"""Audio generation job routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from lingodub.routes.dependencies import get_audio_generation_job_service
from lingodub.schemas.audio_generation_job import AudioGenerationJob, CreateAudioGenerationJobRequest
from lingodub.schemas.error import InvalidStateErrorResponse, NotFoundErrorResponse, RequestValidationErrorResponse
from lingodub.services.audio_generation_jobs import AudioGenerationJobService

router = APIRouter(prefix="/audio-generation-jobs", tags=["Audio generation jobs"])


@router.post(
    "",
    response_model=AudioGenerationJob,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": NotFoundErrorResponse},
        409: {"model": InvalidStateErrorResponse},
        422: {"model": RequestValidationErrorResponse},
    },
)
async def create_audio_generation_job(
    payload: CreateAudioGenerationJobRequest,
    service: Annotated[AudioGenerationJobService, Depends(get_audio_generation_job_service)],
) -> AudioGenerationJob:
    return service.create_audio_generation_job(request=payload)
