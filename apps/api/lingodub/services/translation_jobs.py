"""Translation job service layer."""

import logging

from lingodub.domain.validators import ensure_translation_job_can_be_created
from lingodub.errors import ApiError, NotFoundError
from lingodub.repositories.memory import InMemoryStore, TranslationJobRecord
from lingodub.schemas.translation_job import (
    CreateTranslationJobRequest,
    TranslationJob,
    TranslationStatus,
    UpdateTranslationJobRequest,
)

logger = logging.getLogger(__name__)


def to_translation_job(record: TranslationJobRecord) -> TranslationJob:
    return TranslationJob(
        id=record.id,
        video_id=record.video_id,
        source_language=record.source_language,
        target_language=record.target_language,
        status=record.status,
        original_audio_path=record.original_audio_path,
        translated_text=record.translated_text,
        error_message=record.error_message,
        started_at=record.started_at,
        completed_at=record.completed_at,
        created_at=record.created_at,
    )


class TranslationJobService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_translation_job(self, *, request: CreateTranslationJobRequest) -> TranslationJob:
        video = self._store.find_video_by_id(request.video_id)
        try:
            ensure_translation_job_can_be_created(video_id=request.video_id, video=video)
        except ApiError as exc:
            logger.warning(
                "translation_job.rejected video_id=%s code=%s",
                request.video_id,
                exc.payload.code,
            )
            raise

        record = self._store.insert_translation_job(
            video_id=request.video_id,
            source_language=request.source_language,
            target_language=request.target_language,
        )
        logger.info(
            "translation_job.created translation_job_id=%s video_id=%s source_language=%s target_language=%s",
            record.id,
            record.video_id,
            record.source_language,
            record.target_language,
        )
        return to_translation_job(record)

    def list_translation_jobs(
        self,
        *,
        video_id: int | None,
        status: TranslationStatus | None,
        limit: int,
        offset: int,
    ) -> list[TranslationJob]:
        records = self._store.list_translation_jobs(video_id=video_id, status=status, limit=limit, offset=offset)
        return [to_translation_job(record) for record in records]

    def update_translation_job(self, *, job_id: int, request: UpdateTranslationJobRequest) -> TranslationJob:
        patch = request.model_dump(exclude_unset=True)
        # status is not nullable; an explicit null leaves it untouched.
        if patch.get("status") is None:
            patch.pop("status", None)

        previous = self._store.find_translation_job_by_id(job_id)
        previous_status = previous.status if previous is not None else None
        record = self._store.update_translation_job(job_id, patch)
        if record is None:
            logger.warning("translation_job.update_rejected translation_job_id=%s code=RESOURCE_NOT_FOUND", job_id)
            raise NotFoundError(f"Translation job with ID {job_id} not found")

        logger.info(
            "translation_job.updated translation_job_id=%s prev_status=%s new_status=%s fields=%s",
            record.id,
            previous_status,
            record.status,
            ",".join(sorted(patch)),
        )
        return to_translation_job(record)
