"""Prerequisite checks for workflow record creation and status updates.

Validators receive records that the caller already loaded (``None`` when the
lookup missed) and raise a ``WorkflowValidationError`` subclass on the first
violated rule. They never touch the store.
"""

from lingodub.errors import ConflictError, InvalidStateError, NotFoundError
from lingodub.repositories.memory import (
    AudioGenerationJobRecord,
    FinalOutputRecord,
    TranslationJobRecord,
    VideoRecord,
)
from lingodub.schemas.audio_generation_job import AudioGenerationStatus
from lingodub.schemas.translation_job import TranslationStatus
from lingodub.schemas.video import UploadStatus

_TERMINAL_UPLOAD_STATUSES: frozenset[UploadStatus] = frozenset({UploadStatus.FAILED})


def _invalid_state(
    message: str,
    *,
    entity: str,
    entity_id: int,
    required_status: str | None,
    current_status: str,
    attempted_status: str | None = None,
) -> InvalidStateError:
    details: dict[str, str | int] = {
        "entity": entity,
        "entity_id": entity_id,
        "current_status": current_status,
    }
    if required_status is not None:
        details["required_status"] = required_status
    if attempted_status is not None:
        details["attempted_status"] = attempted_status
    return InvalidStateError(message, details=details)


def ensure_translation_job_can_be_created(*, video_id: int, video: VideoRecord | None) -> None:
    if video is None:
        raise NotFoundError(f"Video with ID {video_id} not found")
    if video.upload_status != UploadStatus.UPLOADED:
        raise _invalid_state(
            f"Video with ID {video.id} must be uploaded before creating translation job. "
            f"Current status: {video.upload_status.value}",
            entity="video",
            entity_id=video.id,
            required_status=UploadStatus.UPLOADED.value,
            current_status=video.upload_status.value,
        )


def ensure_audio_generation_job_can_be_created(
    *,
    translation_job_id: int,
    translation_job: TranslationJobRecord | None,
) -> None:
    if translation_job is None:
        raise NotFoundError(f"Translation job with ID {translation_job_id} not found")
    if translation_job.status != TranslationStatus.COMPLETED:
        raise _invalid_state(
            f"Translation job with ID {translation_job.id} must be completed before creating audio generation job. "
            f"Current status: {translation_job.status.value}",
            entity="translation_job",
            entity_id=translation_job.id,
            required_status=TranslationStatus.COMPLETED.value,
            current_status=translation_job.status.value,
        )


def ensure_final_output_can_be_created(
    *,
    video_id: int,
    translation_job_id: int,
    audio_generation_job_id: int,
    video: VideoRecord | None,
    translation_job: TranslationJobRecord | None,
    audio_generation_job: AudioGenerationJobRecord | None,
    existing_output: FinalOutputRecord | None,
) -> None:
    """Check the whole pipeline behind a final output, stopping at the first failure.

    ``translation_job`` must have been looked up scoped to ``video_id`` and
    ``audio_generation_job`` scoped to ``translation_job_id``: a row that
    exists under another parent arrives here as ``None`` and is reported
    exactly like a missing one.
    """
    if video is None:
        raise NotFoundError(f"Video with ID {video_id} not found")
    if video.upload_status != UploadStatus.UPLOADED:
        raise _invalid_state(
            f"Video with ID {video_id} is not uploaded. Current status: {video.upload_status.value}",
            entity="video",
            entity_id=video_id,
            required_status=UploadStatus.UPLOADED.value,
            current_status=video.upload_status.value,
        )

    if translation_job is None:
        raise NotFoundError(f"Translation job with ID {translation_job_id} not found for video {video_id}")
    if translation_job.status != TranslationStatus.COMPLETED:
        raise _invalid_state(
            f"Translation job with ID {translation_job_id} is not completed. "
            f"Current status: {translation_job.status.value}",
            entity="translation_job",
            entity_id=translation_job_id,
            required_status=TranslationStatus.COMPLETED.value,
            current_status=translation_job.status.value,
        )

    if audio_generation_job is None:
        raise NotFoundError(
            f"Audio generation job with ID {audio_generation_job_id} not found "
            f"for translation job {translation_job_id}"
        )
    if audio_generation_job.status != AudioGenerationStatus.COMPLETED:
        raise _invalid_state(
            f"Audio generation job with ID {audio_generation_job_id} is not completed. "
            f"Current status: {audio_generation_job.status.value}",
            entity="audio_generation_job",
            entity_id=audio_generation_job_id,
            required_status=AudioGenerationStatus.COMPLETED.value,
            current_status=audio_generation_job.status.value,
        )

    if existing_output is not None:
        raise final_output_conflict(
            video_id=video_id,
            translation_job_id=translation_job_id,
            audio_generation_job_id=audio_generation_job_id,
        )


def final_output_conflict(*, video_id: int, translation_job_id: int, audio_generation_job_id: int) -> ConflictError:
    return ConflictError(
        f"Final output already exists for video {video_id}, translation job {translation_job_id}, "
        f"and audio generation job {audio_generation_job_id}",
        details={
            "video_id": video_id,
            "translation_job_id": translation_job_id,
            "audio_generation_job_id": audio_generation_job_id,
        },
    )


def ensure_video_status_update(*, video: VideoRecord, new_status: UploadStatus) -> None:
    """A failed upload is final; only a same-status replay is accepted."""
    if video.upload_status in _TERMINAL_UPLOAD_STATUSES and new_status != video.upload_status:
        raise _invalid_state(
            f"Video with ID {video.id} has failed and cannot change status. "
            f"Current status: {video.upload_status.value}",
            entity="video",
            entity_id=video.id,
            required_status=None,
            current_status=video.upload_status.value,
            attempted_status=new_status.value,
        )
