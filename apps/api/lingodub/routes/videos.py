"""Video routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from lingodub.routes.dependencies import (
    Pagination,
    get_final_output_service,
    get_pagination,
    get_video_service,
    get_workflow_service,
)
from lingodub.schemas.error import NotFoundErrorResponse, RequestValidationErrorResponse
from lingodub.schemas.final_output import FinalOutput
from lingodub.schemas.video import CreateVideoRequest, UploadStatus, Video
from lingodub.schemas.workflow import WorkflowStatus
from lingodub.services.final_outputs import FinalOutputService
from lingodub.services.videos import VideoService
from lingodub.services.workflow import WorkflowService

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.post(
    "",
    response_model=Video,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": RequestValidationErrorResponse}},
)
async def create_video(
    payload: CreateVideoRequest,
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Video:
    return service.create_video(request=payload)


@router.get(
    "",
    response_model=list[Video],
    responses={422: {"model": RequestValidationErrorResponse}},
)
async def list_videos(
    pagination: Annotated[Pagination, Depends(get_pagination)],
    service: Annotated[VideoService, Depends(get_video_service)],
    status: UploadStatus | None = None,
) -> list[Video]:
    return service.list_videos(status=status, limit=pagination.limit, offset=pagination.offset)


@router.get(
    "/{videoId}",
    response_model=Video,
    responses={404: {"model": NotFoundErrorResponse}},
)
async def get_video(
    video_id: Annotated[int, Path(alias="videoId")],
    service: Annotated[VideoService, Depends(get_video_service)],
) -> Video:
    return service.get_video(video_id=video_id)


@router.get("/{videoId}/workflow-status", response_model=WorkflowStatus)
async def get_workflow_status(
    video_id: Annotated[int, Path(alias="videoId")],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
) -> WorkflowStatus:
    return service.get_workflow_status(video_id=video_id)


@router.get("/{videoId}/final-output", response_model=FinalOutput | None)
async def get_final_output_for_video(
    video_id: Annotated[int, Path(alias="videoId")],
    service: Annotated[FinalOutputService, Depends(get_final_output_service)],
) -> FinalOutput | None:
    return service.get_final_output_by_video_id(video_id=video_id)
