"""Audio generation job service layer."""

import logging

from lingodub.domain.validators import ensure_audio_generation_job_can_be_created
from lingodub.errors import ApiError, NotFoundError
from lingodub.repositories.memory import AudioGenerationJobRecord, InMemoryStore
from lingodub.schemas.audio_generation_job import (
    AudioGenerationJob,
    CreateAudioGenerationJobRequest,
    UpdateAudioGenerationJobRequest,
)

logger = logging.getLogger(__name__)


def to_audio_generation_job(record: AudioGenerationJobRecord) -> AudioGenerationJob:
    return AudioGenerationJob(
        id=record.id,
        translation_job_id=record.translation_job_id,
        status=record.status,
        generated_audio_path=record.generated_audio_path,
        voice_cloned=record.voice_cloned,
        error_message=record.error_message,
        started_at=record.started_at,
        completed_at=record.completed_at,
        created_at=record.created_at,
    )


class AudioGenerationJobService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_audio_generation_job(self, *, request: CreateAudioGenerationJobRequest) -> AudioGenerationJob:
        translation_job = self._store.find_translation_job_by_id(request.translation_job_id)
        try:
            ensure_audio_generation_job_can_be_created(
                translation_job_id=request.translation_job_id,
                translation_job=translation_job,
            )
        except ApiError as exc:
            logger.warning(
                "audio_generation_job.rejected translation_job_id=%s code=%s",
                request.translation_job_id,
                exc.payload.code,
            )
            raise

        record = self._store.insert_audio_generation_job(
            translation_job_id=request.translation_job_id,
            voice_cloned=request.voice_cloned,
        )
        logger.info(
            "audio_generation_job.created audio_generation_job_id=%s translation_job_id=%s voice_cloned=%s",
            record.id,
            record.translation_job_id,
            record.voice_cloned,
        )
        return to_audio_generation_job(record)

    def update_audio_generation_job(
        self,
        *,
        job_id: int,
        request: UpdateAudioGenerationJobRequest,
    ) -> AudioGenerationJob:
        patch = request.model_dump(exclude_unset=True)
        if patch.get("status") is None:
            patch.pop("status", None)

        record = self._store.update_audio_generation_job(job_id, patch)
        if record is None:
            logger.warning(
                "audio_generation_job.update_rejected audio_generation_job_id=%s code=RESOURCE_NOT_FOUND",
                job_id,
            )
            raise NotFoundError(f"Audio generation job with ID {job_id} not found")

        logger.info(
            "audio_generation_job.updated audio_generation_job_id=%s status=%s fields=%s",
            record.id,
            record.status,
            ",".join(sorted(patch)),
        )
        return to_audio_generation_job(record)
