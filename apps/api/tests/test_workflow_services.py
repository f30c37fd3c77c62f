"""Service-level tests for record lifecycle handlers and the workflow status query."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import threading
import unittest
from unittest import mock

from lingodub.domain import validators
from lingodub.errors import ConflictError, InvalidStateError, NotFoundError
from lingodub.repositories.memory import InMemoryStore, UniqueConstraintViolation
from lingodub.schemas.audio_generation_job import (
    AudioGenerationStatus,
    CreateAudioGenerationJobRequest,
    UpdateAudioGenerationJobRequest,
)
from lingodub.schemas.final_output import CreateFinalOutputRequest
from lingodub.schemas.translation_job import (
    CreateTranslationJobRequest,
    Language,
    TranslationStatus,
    UpdateTranslationJobRequest,
)
from lingodub.schemas.video import CreateVideoRequest, UpdateVideoStatusRequest, UploadStatus
from lingodub.schemas.workflow import OverallStatus
from lingodub.services.audio_generation_jobs import AudioGenerationJobService
from lingodub.services.final_outputs import FinalOutputService
from lingodub.services.translation_jobs import TranslationJobService
from lingodub.services.videos import VideoService
from lingodub.services.workflow import WorkflowService


class _ServiceCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.videos = VideoService(self.store)
        self.translation_jobs = TranslationJobService(self.store)
        self.audio_jobs = AudioGenerationJobService(self.store)
        self.final_outputs = FinalOutputService(self.store)
        self.workflow = WorkflowService(self.store)

    def _uploaded_video(self, name: str = "clip.mp4") -> int:
        video = self.videos.create_video(
            request=CreateVideoRequest(
                filename=name,
                original_filename=name,
                file_path=f"/uploads/{name}",
                file_size=4096,
                duration=30.0,
                format="mp4",
            )
        )
        self.videos.update_video_status(
            video_id=video.id,
            request=UpdateVideoStatusRequest(upload_status=UploadStatus.UPLOADED),
        )
        return video.id

    def _translation_job(self, video_id: int, status: TranslationStatus, target: Language = Language.ES) -> int:
        job = self.translation_jobs.create_translation_job(
            request=CreateTranslationJobRequest(
                video_id=video_id,
                source_language=Language.EN,
                target_language=target,
            )
        )
        if status is not TranslationStatus.PENDING:
            self.translation_jobs.update_translation_job(
                job_id=job.id,
                request=UpdateTranslationJobRequest(status=status),
            )
        return job.id

    def _audio_job(self, translation_job_id: int, status: AudioGenerationStatus) -> int:
        job = self.audio_jobs.create_audio_generation_job(
            request=CreateAudioGenerationJobRequest(translation_job_id=translation_job_id)
        )
        if status is not AudioGenerationStatus.PENDING:
            self.audio_jobs.update_audio_generation_job(
                job_id=job.id,
                request=UpdateAudioGenerationJobRequest(status=status),
            )
        return job.id

    def _final_output(self, video_id: int, translation_job_id: int, audio_job_id: int, path: str = "/out/a.mp4"):
        return self.final_outputs.create_final_output(
            request=CreateFinalOutputRequest(
                video_id=video_id,
                translation_job_id=translation_job_id,
                audio_generation_job_id=audio_job_id,
                final_video_path=path,
            )
        )


class WorkflowStatusServiceTests(_ServiceCase):
    def test_unknown_video_returns_all_null_not_started(self) -> None:
        status = self.workflow.get_workflow_status(video_id=12345)

        self.assertEqual(
            status.model_dump(),
            {
                "video": None,
                "translation_job": None,
                "audio_generation_job": None,
                "final_output": None,
                "overall_status": OverallStatus.NOT_STARTED,
                "progress": 0,
            },
        )

    def test_pending_upload_reports_uploading(self) -> None:
        video = self.videos.create_video(
            request=CreateVideoRequest(
                filename="a.mp4",
                original_filename="a.mp4",
                file_path="/uploads/a.mp4",
                file_size=1,
                format="mp4",
            )
        )
        status = self.workflow.get_workflow_status(video_id=video.id)
        self.assertEqual(status.video.id, video.id)
        self.assertEqual(status.overall_status, OverallStatus.UPLOADING)
        self.assertEqual(status.progress, 10)

    def test_pipeline_progression(self) -> None:
        video_id = self._uploaded_video()
        status = self.workflow.get_workflow_status(video_id=video_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.NOT_STARTED, 25))

        job_id = self._translation_job(video_id, TranslationStatus.TRANSLATING)
        status = self.workflow.get_workflow_status(video_id=video_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.TRANSLATING, 50))
        self.assertEqual(status.translation_job.id, job_id)

        self.translation_jobs.update_translation_job(
            job_id=job_id,
            request=UpdateTranslationJobRequest(status=TranslationStatus.COMPLETED),
        )
        status = self.workflow.get_workflow_status(video_id=video_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.TRANSLATING, 75))
        self.assertIsNone(status.audio_generation_job)

        audio_id = self._audio_job(job_id, AudioGenerationStatus.GENERATING)
        status = self.workflow.get_workflow_status(video_id=video_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.GENERATING_AUDIO, 85))

        self.audio_jobs.update_audio_generation_job(
            job_id=audio_id,
            request=UpdateAudioGenerationJobRequest(status=AudioGenerationStatus.COMPLETED),
        )
        status = self.workflow.get_workflow_status(video_id=video_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.GENERATING_AUDIO, 95))
        self.assertIsNone(status.final_output)

        output = self._final_output(video_id, job_id, audio_id)
        status = self.workflow.get_workflow_status(video_id=video_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.COMPLETED, 100))
        self.assertEqual(status.final_output.id, output.id)

    def test_newer_completed_translation_job_supersedes_older_failed_one(self) -> None:
        video_id = self._uploaded_video()
        older_id = self._translation_job(video_id, TranslationStatus.FAILED)
        newer_id = self._translation_job(video_id, TranslationStatus.COMPLETED)
        # Make sure the ordering does not rely on insertion luck.
        self.store.translation_jobs[older_id].created_at = datetime.now(UTC) - timedelta(minutes=5)

        status = self.workflow.get_workflow_status(video_id=video_id)

        self.assertEqual(status.translation_job.id, newer_id)
        self.assertNotEqual(status.overall_status, OverallStatus.FAILED)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.TRANSLATING, 75))

    def test_identical_timestamps_fall_back_to_greatest_id(self) -> None:
        video_id = self._uploaded_video()
        first_id = self._translation_job(video_id, TranslationStatus.COMPLETED)
        second_id = self._translation_job(video_id, TranslationStatus.FAILED)
        shared = datetime(2024, 1, 1, tzinfo=UTC)
        self.store.translation_jobs[first_id].created_at = shared
        self.store.translation_jobs[second_id].created_at = shared

        status = self.workflow.get_workflow_status(video_id=video_id)

        self.assertEqual(status.translation_job.id, second_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.FAILED, 25))

    def test_audio_job_is_taken_from_latest_translation_job_only(self) -> None:
        video_id = self._uploaded_video()
        older_job = self._translation_job(video_id, TranslationStatus.COMPLETED)
        self._audio_job(older_job, AudioGenerationStatus.FAILED)
        self._translation_job(video_id, TranslationStatus.COMPLETED, target=Language.DE)

        status = self.workflow.get_workflow_status(video_id=video_id)

        self.assertIsNone(status.audio_generation_job)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.TRANSLATING, 75))

    def test_older_failed_audio_job_is_superseded_by_retry(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.COMPLETED)
        self._audio_job(job_id, AudioGenerationStatus.FAILED)
        retry_id = self._audio_job(job_id, AudioGenerationStatus.GENERATING)

        status = self.workflow.get_workflow_status(video_id=video_id)

        self.assertEqual(status.audio_generation_job.id, retry_id)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.GENERATING_AUDIO, 85))

    def test_final_output_from_another_pipeline_reports_completed(self) -> None:
        video_id = self._uploaded_video()
        spanish_job = self._translation_job(video_id, TranslationStatus.COMPLETED)
        spanish_audio = self._audio_job(spanish_job, AudioGenerationStatus.COMPLETED)
        self._final_output(video_id, spanish_job, spanish_audio)
        self._translation_job(video_id, TranslationStatus.FAILED, target=Language.JA)

        status = self.workflow.get_workflow_status(video_id=video_id)

        self.assertEqual(status.translation_job.status, TranslationStatus.FAILED)
        self.assertEqual((status.overall_status, status.progress), (OverallStatus.COMPLETED, 100))

    def test_status_query_is_read_only(self) -> None:
        video_id = self._uploaded_video()
        before = self.store.write_count
        self.workflow.get_workflow_status(video_id=video_id)
        self.workflow.get_workflow_status(video_id=video_id + 100)
        self.assertEqual(self.store.write_count, before)


class RecordLifecycleServiceTests(_ServiceCase):
    def test_create_video_starts_pending(self) -> None:
        video = self.videos.create_video(
            request=CreateVideoRequest(
                filename="stored.mp4",
                original_filename="Holiday.mp4",
                file_path="/uploads/stored.mp4",
                file_size=2048,
                format="mp4",
            )
        )
        self.assertEqual(video.upload_status, UploadStatus.PENDING)
        self.assertIsNone(video.duration)
        self.assertEqual(self.videos.get_video(video_id=video.id), video)

    def test_get_missing_video_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as context:
            self.videos.get_video(video_id=77)
        self.assertEqual(context.exception.payload.message, "Video with ID 77 not found")

    def test_update_video_status_preserves_unchanged_fields(self) -> None:
        video_id = self._uploaded_video()
        self.videos.update_video_status(
            video_id=video_id,
            request=UpdateVideoStatusRequest(upload_status=UploadStatus.UPLOADED, duration=300),
        )
        updated = self.videos.update_video_status(
            video_id=video_id,
            request=UpdateVideoStatusRequest(upload_status=UploadStatus.PROCESSING, format="mkv"),
        )
        self.assertEqual(updated.upload_status, UploadStatus.PROCESSING)
        self.assertEqual(updated.duration, 300)
        self.assertEqual(updated.format, "mkv")

    def test_update_missing_video_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as context:
            self.videos.update_video_status(
                video_id=99999,
                request=UpdateVideoStatusRequest(upload_status=UploadStatus.UPLOADED),
            )
        self.assertEqual(context.exception.payload.message, "Video with ID 99999 not found")

    def test_failed_video_status_is_final(self) -> None:
        video_id = self._uploaded_video()
        self.videos.update_video_status(
            video_id=video_id,
            request=UpdateVideoStatusRequest(upload_status=UploadStatus.FAILED),
        )
        before = self.store.write_count

        with self.assertRaises(InvalidStateError):
            self.videos.update_video_status(
                video_id=video_id,
                request=UpdateVideoStatusRequest(upload_status=UploadStatus.UPLOADED),
            )

        self.assertEqual(self.store.write_count, before)
        self.assertEqual(self.store.videos[video_id].upload_status, UploadStatus.FAILED)

    def test_concurrent_failure_is_not_overwritten_by_status_update(self) -> None:
        video_id = self._uploaded_video()
        competing_errors: list[Exception] = []

        def mark_failed() -> None:
            try:
                self.videos.update_video_status(
                    video_id=video_id,
                    request=UpdateVideoStatusRequest(upload_status=UploadStatus.FAILED),
                )
            except Exception as exc:
                competing_errors.append(exc)

        competitor = threading.Thread(target=mark_failed)

        def check_then_race(*, video, new_status) -> None:
            if not competitor.is_alive() and competitor.ident is None:
                competitor.start()
                competitor.join(timeout=0.2)
                # The competing write must wait until this check and its patch complete.
                self.assertTrue(competitor.is_alive())
                self.assertEqual(self.store.videos[video_id].upload_status, UploadStatus.UPLOADED)
            validators.ensure_video_status_update(video=video, new_status=new_status)

        with mock.patch("lingodub.services.videos.ensure_video_status_update", side_effect=check_then_race):
            self.videos.update_video_status(
                video_id=video_id,
                request=UpdateVideoStatusRequest(upload_status=UploadStatus.PROCESSING),
            )
            competitor.join(timeout=5)

        self.assertFalse(competitor.is_alive())
        self.assertEqual(competing_errors, [])
        self.assertEqual(self.store.videos[video_id].upload_status, UploadStatus.FAILED)
        with self.assertRaises(InvalidStateError):
            self.videos.update_video_status(
                video_id=video_id,
                request=UpdateVideoStatusRequest(upload_status=UploadStatus.PROCESSING),
            )

    def test_video_timestamp_is_taken_after_id_assignment(self) -> None:
        assigned_ids: list[int] = []
        real_now = datetime.now

        def recording_now(tz=None):
            assigned_ids.append(self.store.last_video_id)
            return real_now(tz)

        with mock.patch("lingodub.repositories.memory.datetime") as patched_datetime:
            patched_datetime.now.side_effect = recording_now
            first = self.store.insert_video(
                filename="a.mp4",
                original_filename="a.mp4",
                file_path="/uploads/a.mp4",
                file_size=1,
                duration=None,
                format="mp4",
            )
            second = self.store.insert_video(
                filename="b.mp4",
                original_filename="b.mp4",
                file_path="/uploads/b.mp4",
                file_size=1,
                duration=None,
                format="mp4",
            )

        self.assertEqual(assigned_ids, [first.id, second.id])
        self.assertLessEqual(first.created_at, second.created_at)
        self.assertEqual(first.uploaded_at, first.created_at)

    def test_translation_job_requires_uploaded_video(self) -> None:
        video = self.videos.create_video(
            request=CreateVideoRequest(
                filename="a.mp4",
                original_filename="a.mp4",
                file_path="/uploads/a.mp4",
                file_size=1,
                format="mp4",
            )
        )
        before = self.store.write_count

        with self.assertRaises(InvalidStateError) as context:
            self._translation_job(video.id, TranslationStatus.PENDING)

        self.assertIn("Current status: pending", context.exception.payload.message)
        self.assertEqual(self.store.write_count, before)
        self.assertEqual(self.store.translation_jobs, {})

    def test_translation_job_is_created_pending(self) -> None:
        video_id = self._uploaded_video()
        job = self.translation_jobs.create_translation_job(
            request=CreateTranslationJobRequest(
                video_id=video_id,
                source_language=Language.EN,
                target_language=Language.KO,
            )
        )
        self.assertEqual(job.status, TranslationStatus.PENDING)
        self.assertIsNone(job.original_audio_path)
        self.assertIsNone(job.started_at)

    def test_update_translation_job_applies_only_supplied_fields(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.PENDING)
        started_at = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)

        self.translation_jobs.update_translation_job(
            job_id=job_id,
            request=UpdateTranslationJobRequest(
                status=TranslationStatus.EXTRACTING_AUDIO,
                original_audio_path="/audio/original.wav",
                started_at=started_at,
            ),
        )
        updated = self.translation_jobs.update_translation_job(
            job_id=job_id,
            request=UpdateTranslationJobRequest(translated_text="Hola"),
        )

        self.assertEqual(updated.status, TranslationStatus.EXTRACTING_AUDIO)
        self.assertEqual(updated.original_audio_path, "/audio/original.wav")
        self.assertEqual(updated.started_at, started_at)
        self.assertEqual(updated.translated_text, "Hola")

    def test_update_translation_job_explicit_null_clears_field(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.PENDING)
        self.translation_jobs.update_translation_job(
            job_id=job_id,
            request=UpdateTranslationJobRequest(original_audio_path="/some/path.wav", translated_text="Some text"),
        )

        updated = self.translation_jobs.update_translation_job(
            job_id=job_id,
            request=UpdateTranslationJobRequest.model_validate({"original_audio_path": None, "status": None}),
        )

        self.assertIsNone(updated.original_audio_path)
        self.assertEqual(updated.translated_text, "Some text")
        self.assertEqual(updated.status, TranslationStatus.PENDING)

    def test_update_missing_translation_job_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as context:
            self.translation_jobs.update_translation_job(
                job_id=99999,
                request=UpdateTranslationJobRequest(status=TranslationStatus.COMPLETED),
            )
        self.assertEqual(context.exception.payload.message, "Translation job with ID 99999 not found")

    def test_list_translation_jobs_filters_and_orders_newest_first(self) -> None:
        video_a = self._uploaded_video("a.mp4")
        video_b = self._uploaded_video("b.mp4")
        first = self._translation_job(video_a, TranslationStatus.COMPLETED)
        self._translation_job(video_b, TranslationStatus.COMPLETED)
        third = self._translation_job(video_a, TranslationStatus.FAILED)

        for_a = self.translation_jobs.list_translation_jobs(video_id=video_a, status=None, limit=10, offset=0)
        self.assertEqual([job.id for job in for_a], [third, first])

        completed_for_a = self.translation_jobs.list_translation_jobs(
            video_id=video_a,
            status=TranslationStatus.COMPLETED,
            limit=10,
            offset=0,
        )
        self.assertEqual([job.id for job in completed_for_a], [first])

        paged = self.translation_jobs.list_translation_jobs(video_id=None, status=None, limit=1, offset=1)
        self.assertEqual(len(paged), 1)

    def test_audio_job_against_translating_job_is_invalid_state(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.TRANSLATING)

        with self.assertRaises(InvalidStateError) as context:
            self._audio_job(job_id, AudioGenerationStatus.PENDING)

        self.assertIn("Current status: translating", context.exception.payload.message)
        self.assertEqual(self.store.audio_generation_jobs, {})

    def test_audio_job_defaults_to_voice_cloning_and_allows_siblings(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.COMPLETED)

        first = self.audio_jobs.create_audio_generation_job(
            request=CreateAudioGenerationJobRequest(translation_job_id=job_id)
        )
        second = self.audio_jobs.create_audio_generation_job(
            request=CreateAudioGenerationJobRequest(translation_job_id=job_id, voice_cloned=False)
        )

        self.assertTrue(first.voice_cloned)
        self.assertFalse(second.voice_cloned)
        self.assertEqual(first.status, AudioGenerationStatus.PENDING)
        self.assertNotEqual(first.id, second.id)

    def test_update_missing_audio_job_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as context:
            self.audio_jobs.update_audio_generation_job(
                job_id=42,
                request=UpdateAudioGenerationJobRequest(status=AudioGenerationStatus.COMPLETED),
            )
        self.assertEqual(context.exception.payload.message, "Audio generation job with ID 42 not found")

    def test_duplicate_final_output_triple_is_conflict(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.COMPLETED)
        audio_id = self._audio_job(job_id, AudioGenerationStatus.COMPLETED)
        self._final_output(video_id, job_id, audio_id)

        with self.assertRaises(ConflictError):
            self._final_output(video_id, job_id, audio_id, path="/out/b.mp4")

        self.assertEqual(len(self.store.final_outputs), 1)

    def test_final_outputs_allowed_for_distinct_pipelines(self) -> None:
        video_id = self._uploaded_video()
        spanish = self._translation_job(video_id, TranslationStatus.COMPLETED)
        german = self._translation_job(video_id, TranslationStatus.COMPLETED, target=Language.DE)
        spanish_audio = self._audio_job(spanish, AudioGenerationStatus.COMPLETED)
        german_audio = self._audio_job(german, AudioGenerationStatus.COMPLETED)

        self._final_output(video_id, spanish, spanish_audio, path="/out/es.mp4")
        german_output = self._final_output(video_id, german, german_audio, path="/out/de.mp4")

        listed = self.final_outputs.list_final_outputs(limit=10, offset=0)
        self.assertEqual(len(listed), 2)
        self.assertEqual(listed[0].id, german_output.id)
        latest = self.final_outputs.get_final_output_by_video_id(video_id=video_id)
        self.assertEqual(latest.id, german_output.id)
        self.assertIsNone(self.final_outputs.get_final_output_by_video_id(video_id=video_id + 1))

    def test_store_unique_constraint_maps_to_conflict_when_check_is_bypassed(self) -> None:
        video_id = self._uploaded_video()
        job_id = self._translation_job(video_id, TranslationStatus.COMPLETED)
        audio_id = self._audio_job(job_id, AudioGenerationStatus.COMPLETED)
        self._final_output(video_id, job_id, audio_id)
        # Simulate a concurrent writer that passed the check before the first insert landed.
        with mock.patch.object(InMemoryStore, "find_final_output_by_triple", return_value=None):
            with self.assertRaises(ConflictError) as context:
                self._final_output(video_id, job_id, audio_id)

        self.assertIsInstance(context.exception.__cause__, UniqueConstraintViolation)
        self.assertEqual(len(self.store.final_outputs), 1)


if __name__ == "__main__":
    unittest.main()
