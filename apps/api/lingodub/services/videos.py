"""Video service layer."""

import logging

from lingodub.core.logging_safety import safe_log_identifier
from lingodub.domain.validators import ensure_video_status_update
from lingodub.errors import ApiError, NotFoundError
from lingodub.repositories.memory import InMemoryStore, VideoRecord
from lingodub.schemas.video import CreateVideoRequest, UpdateVideoStatusRequest, UploadStatus, Video

logger = logging.getLogger(__name__)


def to_video(record: VideoRecord) -> Video:
    return Video(
        id=record.id,
        filename=record.filename,
        original_filename=record.original_filename,
        file_path=record.file_path,
        file_size=record.file_size,
        duration=record.duration,
        format=record.format,
        upload_status=record.upload_status,
        uploaded_at=record.uploaded_at,
        created_at=record.created_at,
    )


class VideoService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_video(self, *, request: CreateVideoRequest) -> Video:
        record = self._store.insert_video(
            filename=request.filename,
            original_filename=request.original_filename,
            file_path=request.file_path,
            file_size=request.file_size,
            duration=request.duration,
            format=request.format,
        )
        logger.info(
            "video.created video_id=%s file=%s format=%s upload_status=%s",
            record.id,
            safe_log_identifier(record.file_path, prefix="path"),
            record.format,
            record.upload_status,
        )
        return to_video(record)

    def list_videos(self, *, status: UploadStatus | None, limit: int, offset: int) -> list[Video]:
        return [to_video(record) for record in self._store.list_videos(status=status, limit=limit, offset=offset)]

    def get_video(self, *, video_id: int) -> Video:
        record = self._store.find_video_by_id(video_id)
        if record is None:
            raise NotFoundError(f"Video with ID {video_id} not found")
        return to_video(record)

    def update_video_status(self, *, video_id: int, request: UpdateVideoStatusRequest) -> Video:
        observed: dict[str, UploadStatus] = {}

        def check(current: VideoRecord) -> None:
            observed["previous_status"] = current.upload_status
            ensure_video_status_update(video=current, new_status=request.upload_status)

        # Optional metadata left out of the payload keeps its stored value.
        patch = request.model_dump(exclude_none=True)
        try:
            record = self._store.update_video_status(video_id, patch, check=check)
        except ApiError as exc:
            logger.warning(
                "video.update_rejected video_id=%s code=%s current_status=%s attempted_status=%s",
                video_id,
                exc.payload.code,
                observed.get("previous_status"),
                request.upload_status,
            )
            raise

        if record is None:
            logger.warning("video.update_rejected video_id=%s code=RESOURCE_NOT_FOUND", video_id)
            raise NotFoundError(f"Video with ID {video_id} not found")

        logger.info(
            "video.status_updated video_id=%s prev_status=%s new_status=%s",
            video_id,
            observed.get("previous_status"),
            record.upload_status,
        )
        return to_video(record)
