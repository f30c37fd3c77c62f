"""Internal routes used by the processing workers."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from lingodub.core.logging_safety import safe_log_identifier
from lingodub.routes.dependencies import (
    get_audio_generation_job_service,
    get_final_output_service,
    get_request_correlation_id,
    get_translation_job_service,
    get_video_service,
    require_callback_secret,
)
from lingodub.schemas.audio_generation_job import AudioGenerationJob, UpdateAudioGenerationJobRequest
from lingodub.schemas.error import (
    ErrorResponse,
    FinalOutputConflictErrorResponse,
    InvalidStateErrorResponse,
    NotFoundErrorResponse,
)
from lingodub.schemas.final_output import CreateFinalOutputRequest, FinalOutput
from lingodub.schemas.translation_job import TranslationJob, UpdateTranslationJobRequest
from lingodub.schemas.video import UpdateVideoStatusRequest, Video
from lingodub.services.audio_generation_jobs import AudioGenerationJobService
from lingodub.services.final_outputs import FinalOutputService
from lingodub.services.translation_jobs import TranslationJobService
from lingodub.services.videos import VideoService

router = APIRouter(prefix="/internal", tags=["Internal"], dependencies=[Depends(require_callback_secret)])
logger = logging.getLogger(__name__)


@router.patch(
    "/videos/{videoId}/status",
    response_model=Video,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": NotFoundErrorResponse},
        409: {"model": InvalidStateErrorResponse},
    },
)
async def update_video_status(
    video_id: Annotated[int, Path(alias="videoId")],
    payload: UpdateVideoStatusRequest,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Video:
    logger.info(
        "internal.video_status correlation_id=%s video_id=%s upload_status=%s",
        safe_log_identifier(correlation_id, prefix="cid"),
        video_id,
        payload.upload_status,
    )
    return service.update_video_status(video_id=video_id, request=payload)


@router.patch(
    "/translation-jobs/{jobId}",
    response_model=TranslationJob,
    responses={401: {"model": ErrorResponse}, 404: {"model": NotFoundErrorResponse}},
)
async def update_translation_job(
    job_id: Annotated[int, Path(alias="jobId")],
    payload: UpdateTranslationJobRequest,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    service: Annotated[TranslationJobService, Depends(get_translation_job_service)],
) -> TranslationJob:
    logger.info(
        "internal.translation_job_update correlation_id=%s translation_job_id=%s",
        safe_log_identifier(correlation_id, prefix="cid"),
        job_id,
    )
    return service.update_translation_job(job_id=job_id, request=payload)


@router.patch(
    "/audio-generation-jobs/{jobId}",
    response_model=AudioGenerationJob,
    responses={401: {"model": ErrorResponse}, 404: {"model": NotFoundErrorResponse}},
)
async def update_audio_generation_job(
    job_id: Annotated[int, Path(alias="jobId")],
    payload: UpdateAudioGenerationJobRequest,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    service: Annotated[AudioGenerationJobService, Depends(get_audio_generation_job_service)],
) -> AudioGenerationJob:
    logger.info(
        "internal.audio_generation_job_update correlation_id=%s audio_generation_job_id=%s",
        safe_log_identifier(correlation_id, prefix="cid"),
        job_id,
    )
    return service.update_audio_generation_job(job_id=job_id, request=payload)


@router.post(
    "/final-outputs",
    response_model=FinalOutput,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": NotFoundErrorResponse},
        409: {"model": FinalOutputConflictErrorResponse},
    },
)
async def create_final_output(
    payload: CreateFinalOutputRequest,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    service: Annotated[FinalOutputService, Depends(get_final_output_service)],
) -> FinalOutput:
    logger.info(
        "internal.final_output_create correlation_id=%s video_id=%s",
        safe_log_identifier(correlation_id, prefix="cid"),
        payload.video_id,
    )
    return service.create_final_output(request=payload)
