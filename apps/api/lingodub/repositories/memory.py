"""In-memory repositories used by the API scaffold and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from threading import RLock
from typing import Any, Callable, Iterable, TypeVar

from lingodub.schemas.audio_generation_job import AudioGenerationStatus
from lingodub.schemas.translation_job import Language, TranslationStatus
from lingodub.schemas.video import UploadStatus

_VIDEO_PATCH_KEYS = frozenset({"upload_status", "duration", "format"})
_TRANSLATION_JOB_PATCH_KEYS = frozenset(
    {
        "status",
        "original_audio_path",
        "translated_text",
        "error_message",
        "started_at",
        "completed_at",
    }
)
_AUDIO_JOB_PATCH_KEYS = frozenset(
    {
        "status",
        "generated_audio_path",
        "error_message",
        "started_at",
        "completed_at",
    }
)


class UniqueConstraintViolation(Exception):
    """Raised when an insert would duplicate a uniquely keyed row."""

    def __init__(self, table: str, key: tuple[Any, ...]) -> None:
        self.table = table
        self.key = key
        super().__init__(f"duplicate key {key!r} in {table}")


@dataclass(slots=True)
class VideoRecord:
    id: int
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    duration: float | None
    format: str
    upload_status: UploadStatus
    uploaded_at: datetime
    created_at: datetime


@dataclass(slots=True)
class TranslationJobRecord:
    id: int
    video_id: int
    source_language: Language
    target_language: Language
    status: TranslationStatus
    created_at: datetime
    original_audio_path: str | None = None
    translated_text: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(slots=True)
class AudioGenerationJobRecord:
    id: int
    translation_job_id: int
    status: AudioGenerationStatus
    voice_cloned: bool
    created_at: datetime
    generated_audio_path: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(slots=True)
class FinalOutputRecord:
    id: int
    video_id: int
    translation_job_id: int
    audio_generation_job_id: int
    final_video_path: str
    created_at: datetime


_RecordT = TypeVar("_RecordT", VideoRecord, TranslationJobRecord, AudioGenerationJobRecord, FinalOutputRecord)


def _recency_key(record: VideoRecord | TranslationJobRecord | AudioGenerationJobRecord | FinalOutputRecord) -> tuple[datetime, int]:
    # created_at can collide for rows inserted back to back; the id breaks the tie.
    return (record.created_at, record.id)


def _latest(records: Iterable[_RecordT]) -> _RecordT | None:
    return max(records, key=_recency_key, default=None)


def _newest_first(records: Iterable[_RecordT], *, limit: int, offset: int) -> list[_RecordT]:
    ordered = sorted(records, key=_recency_key, reverse=True)
    return ordered[offset : offset + limit]


@dataclass(slots=True)
class InMemoryStore:
    """Arena-style persistence layer keyed by integer ids.

    Rows are never deleted. "Latest" lookups order by ``(created_at, id)``
    descending, so the most recently inserted row wins even when two rows
    share a timestamp. Final outputs carry a unique index on the
    ``(video_id, translation_job_id, audio_generation_job_id)`` triple that
    is checked and written under the store lock.
    """

    videos: dict[int, VideoRecord] = field(default_factory=dict)
    translation_jobs: dict[int, TranslationJobRecord] = field(default_factory=dict)
    audio_generation_jobs: dict[int, AudioGenerationJobRecord] = field(default_factory=dict)
    final_outputs: dict[int, FinalOutputRecord] = field(default_factory=dict)
    final_output_ids_by_triple: dict[tuple[int, int, int], int] = field(default_factory=dict)
    last_video_id: int = 0
    last_translation_job_id: int = 0
    last_audio_generation_job_id: int = 0
    last_final_output_id: int = 0
    write_count: int = 0
    _lock: RLock = field(default_factory=RLock, repr=False)

    # Videos

    def insert_video(
        self,
        *,
        filename: str,
        original_filename: str,
        file_path: str,
        file_size: int,
        duration: float | None,
        format: str,
    ) -> VideoRecord:
        with self._lock:
            self.last_video_id += 1
            now = datetime.now(UTC)
            video = VideoRecord(
                id=self.last_video_id,
                filename=filename,
                original_filename=original_filename,
                file_path=file_path,
                file_size=file_size,
                duration=duration,
                format=format,
                upload_status=UploadStatus.PENDING,
                uploaded_at=now,
                created_at=now,
            )
            self.videos[video.id] = video
            self.write_count += 1
        return video

    def find_video_by_id(self, video_id: int) -> VideoRecord | None:
        return self.videos.get(video_id)

    def list_videos(self, *, status: UploadStatus | None, limit: int, offset: int) -> list[VideoRecord]:
        records: Iterable[VideoRecord] = self.videos.values()
        if status is not None:
            records = [record for record in records if record.upload_status == status]
        return _newest_first(records, limit=limit, offset=offset)

    def update_video_status(
        self,
        video_id: int,
        patch: dict[str, Any],
        *,
        check: Callable[[VideoRecord], None] | None = None,
    ) -> VideoRecord | None:
        """Patch a video; ``check`` sees the current row under the store lock and may raise to abort."""
        with self._lock:
            video = self.videos.get(video_id)
            if video is not None and check is not None:
                check(video)
            return self._apply_patch(video, patch, allowed_keys=_VIDEO_PATCH_KEYS)

    # Translation jobs

    def insert_translation_job(
        self,
        *,
        video_id: int,
        source_language: Language,
        target_language: Language,
    ) -> TranslationJobRecord:
        with self._lock:
            self.last_translation_job_id += 1
            job = TranslationJobRecord(
                id=self.last_translation_job_id,
                video_id=video_id,
                source_language=source_language,
                target_language=target_language,
                status=TranslationStatus.PENDING,
                created_at=datetime.now(UTC),
            )
            self.translation_jobs[job.id] = job
            self.write_count += 1
        return job

    def find_translation_job_by_id(self, job_id: int) -> TranslationJobRecord | None:
        return self.translation_jobs.get(job_id)

    def find_translation_job_by_id_and_video_id(self, job_id: int, video_id: int) -> TranslationJobRecord | None:
        job = self.translation_jobs.get(job_id)
        if job is None or job.video_id != video_id:
            return None
        return job

    def find_latest_translation_job_by_video_id(self, video_id: int) -> TranslationJobRecord | None:
        return _latest(job for job in self.translation_jobs.values() if job.video_id == video_id)

    def list_translation_jobs(
        self,
        *,
        video_id: int | None,
        status: TranslationStatus | None,
        limit: int,
        offset: int,
    ) -> list[TranslationJobRecord]:
        predicates: list[Callable[[TranslationJobRecord], bool]] = []
        if video_id is not None:
            predicates.append(lambda job: job.video_id == video_id)
        if status is not None:
            predicates.append(lambda job: job.status == status)
        records = [job for job in self.translation_jobs.values() if all(check(job) for check in predicates)]
        return _newest_first(records, limit=limit, offset=offset)

    def update_translation_job(self, job_id: int, patch: dict[str, Any]) -> TranslationJobRecord | None:
        return self._apply_patch(
            self.translation_jobs.get(job_id),
            patch,
            allowed_keys=_TRANSLATION_JOB_PATCH_KEYS,
        )

    # Audio generation jobs

    def insert_audio_generation_job(self, *, translation_job_id: int, voice_cloned: bool) -> AudioGenerationJobRecord:
        with self._lock:
            self.last_audio_generation_job_id += 1
            job = AudioGenerationJobRecord(
                id=self.last_audio_generation_job_id,
                translation_job_id=translation_job_id,
                status=AudioGenerationStatus.PENDING,
                voice_cloned=voice_cloned,
                created_at=datetime.now(UTC),
            )
            self.audio_generation_jobs[job.id] = job
            self.write_count += 1
        return job

    def find_audio_job_by_id(self, job_id: int) -> AudioGenerationJobRecord | None:
        return self.audio_generation_jobs.get(job_id)

    def find_audio_job_by_id_and_translation_job_id(
        self,
        job_id: int,
        translation_job_id: int,
    ) -> AudioGenerationJobRecord | None:
        job = self.audio_generation_jobs.get(job_id)
        if job is None or job.translation_job_id != translation_job_id:
            return None
        return job

    def find_latest_audio_job_by_translation_job_id(self, translation_job_id: int) -> AudioGenerationJobRecord | None:
        return _latest(
            job for job in self.audio_generation_jobs.values() if job.translation_job_id == translation_job_id
        )

    def update_audio_generation_job(self, job_id: int, patch: dict[str, Any]) -> AudioGenerationJobRecord | None:
        return self._apply_patch(
            self.audio_generation_jobs.get(job_id),
            patch,
            allowed_keys=_AUDIO_JOB_PATCH_KEYS,
        )

    # Final outputs

    def insert_final_output(
        self,
        *,
        video_id: int,
        translation_job_id: int,
        audio_generation_job_id: int,
        final_video_path: str,
    ) -> FinalOutputRecord:
        triple = (video_id, translation_job_id, audio_generation_job_id)
        with self._lock:
            if triple in self.final_output_ids_by_triple:
                raise UniqueConstraintViolation("final_outputs", triple)

            self.last_final_output_id += 1
            output = FinalOutputRecord(
                id=self.last_final_output_id,
                video_id=video_id,
                translation_job_id=translation_job_id,
                audio_generation_job_id=audio_generation_job_id,
                final_video_path=final_video_path,
                created_at=datetime.now(UTC),
            )
            self.final_outputs[output.id] = output
            self.final_output_ids_by_triple[triple] = output.id
            self.write_count += 1
        return output

    def find_final_output_by_triple(
        self,
        video_id: int,
        translation_job_id: int,
        audio_generation_job_id: int,
    ) -> FinalOutputRecord | None:
        output_id = self.final_output_ids_by_triple.get((video_id, translation_job_id, audio_generation_job_id))
        if output_id is None:
            return None
        return self.final_outputs.get(output_id)

    def find_latest_final_output_by_video_id(self, video_id: int) -> FinalOutputRecord | None:
        return _latest(output for output in self.final_outputs.values() if output.video_id == video_id)

    def list_final_outputs(self, *, limit: int, offset: int) -> list[FinalOutputRecord]:
        return _newest_first(self.final_outputs.values(), limit=limit, offset=offset)

    def _apply_patch(self, record: _RecordT | None, patch: dict[str, Any], *, allowed_keys: frozenset[str]) -> _RecordT | None:
        if record is None:
            return None

        with self._lock:
            for key, value in patch.items():
                # Unknown keys are ignored deterministically.
                if key not in allowed_keys:
                    continue
                setattr(record, key, value)
            self.write_count += 1
        return record
