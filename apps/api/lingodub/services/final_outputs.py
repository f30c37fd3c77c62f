"""Final output service layer."""

import logging

from lingodub.core.logging_safety import safe_log_identifier
from lingodub.domain.validators import ensure_final_output_can_be_created, final_output_conflict
from lingodub.errors import ApiError
from lingodub.repositories.memory import FinalOutputRecord, InMemoryStore, UniqueConstraintViolation
from lingodub.schemas.final_output import CreateFinalOutputRequest, FinalOutput

logger = logging.getLogger(__name__)


def to_final_output(record: FinalOutputRecord) -> FinalOutput:
    return FinalOutput(
        id=record.id,
        video_id=record.video_id,
        translation_job_id=record.translation_job_id,
        audio_generation_job_id=record.audio_generation_job_id,
        final_video_path=record.final_video_path,
        created_at=record.created_at,
    )


class FinalOutputService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_final_output(self, *, request: CreateFinalOutputRequest) -> FinalOutput:
        video_id = request.video_id
        translation_job_id = request.translation_job_id
        audio_generation_job_id = request.audio_generation_job_id

        try:
            ensure_final_output_can_be_created(
                video_id=video_id,
                translation_job_id=translation_job_id,
                audio_generation_job_id=audio_generation_job_id,
                video=self._store.find_video_by_id(video_id),
                translation_job=self._store.find_translation_job_by_id_and_video_id(translation_job_id, video_id),
                audio_generation_job=self._store.find_audio_job_by_id_and_translation_job_id(
                    audio_generation_job_id,
                    translation_job_id,
                ),
                existing_output=self._store.find_final_output_by_triple(
                    video_id,
                    translation_job_id,
                    audio_generation_job_id,
                ),
            )
            try:
                record = self._store.insert_final_output(
                    video_id=video_id,
                    translation_job_id=translation_job_id,
                    audio_generation_job_id=audio_generation_job_id,
                    final_video_path=request.final_video_path,
                )
            except UniqueConstraintViolation as exc:
                # A concurrent request inserted the same triple after the check above.
                raise final_output_conflict(
                    video_id=video_id,
                    translation_job_id=translation_job_id,
                    audio_generation_job_id=audio_generation_job_id,
                ) from exc
        except ApiError as exc:
            logger.warning(
                "final_output.rejected video_id=%s translation_job_id=%s audio_generation_job_id=%s code=%s",
                video_id,
                translation_job_id,
                audio_generation_job_id,
                exc.payload.code,
            )
            raise

        logger.info(
            "final_output.created final_output_id=%s video_id=%s translation_job_id=%s "
            "audio_generation_job_id=%s file=%s",
            record.id,
            record.video_id,
            record.translation_job_id,
            record.audio_generation_job_id,
            safe_log_identifier(record.final_video_path, prefix="path"),
        )
        return to_final_output(record)

    def list_final_outputs(self, *, limit: int, offset: int) -> list[FinalOutput]:
        return [to_final_output(record) for record in self._store.list_final_outputs(limit=limit, offset=offset)]

    def get_final_output_by_video_id(self, *, video_id: int) -> FinalOutput | None:
        record = self._store.find_latest_final_output_by_video_id(video_id)
        if record is None:
            return None
        return to_final_output(record)
