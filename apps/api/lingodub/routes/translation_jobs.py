"""Translation job routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from lingodub.routes.dependencies import Pagination, get_pagination, get_translation_job_service
from lingodub.schemas.error import InvalidStateErrorResponse, NotFoundErrorResponse, RequestValidationErrorResponse
from lingodub.schemas.translation_job import CreateTranslationJobRequest, TranslationJob, TranslationStatus
from lingodub.services.translation_jobs import TranslationJobService

router = APIRouter(prefix="/translation-jobs", tags=["Translation jobs"])


@router.post(
    "",
    response_model=TranslationJob,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": NotFoundErrorResponse},
        409: {"model": InvalidStateErrorResponse},
        422: {"model": RequestValidationErrorResponse},
    },
)
async def create_translation_job(
    payload: CreateTranslationJobRequest,
    service: Annotated[TranslationJobService, Depends(get_translation_job_service)],
) -> TranslationJob:
    return service.create_translation_job(request=payload)


@router.get(
    "",
    response_model=list[TranslationJob],
    responses={422: {"model": RequestValidationErrorResponse}},
)
async def list_translation_jobs(
    pagination: Annotated[Pagination, Depends(get_pagination)],
    service: Annotated[TranslationJobService, Depends(get_translation_job_service)],
    video_id: int | None = None,
    status: TranslationStatus | None = None,
) -> list[TranslationJob]:
    return service.list_translation_jobs(
        video_id=video_id,
        status=status,
        limit=pagination.limit,
        offset=pagination.offset,
    )
