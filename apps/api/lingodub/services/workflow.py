"""Workflow status query service."""

import logging

from lingodub.domain.workflow_status import UNKNOWN_VIDEO_STATUS, derive_status
from lingodub.repositories.memory import InMemoryStore
from lingodub.schemas.workflow import WorkflowStatus
from lingodub.services.audio_generation_jobs import to_audio_generation_job
from lingodub.services.final_outputs import to_final_output
from lingodub.services.translation_jobs import to_translation_job
from lingodub.services.videos import to_video

logger = logging.getLogger(__name__)


class WorkflowService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def get_workflow_status(self, *, video_id: int) -> WorkflowStatus:
        """Summarize the pipeline of ``video_id`` from its most recent rows.

        Every call re-reads the store. Older translation jobs, audio jobs and
        outputs never influence the result; the final output is looked up by
        video, independently of which translation job produced it.
        """
        video = self._store.find_video_by_id(video_id)
        if video is None:
            logger.debug("workflow.status_unknown_video video_id=%s", video_id)
            return WorkflowStatus(
                overall_status=UNKNOWN_VIDEO_STATUS.overall_status,
                progress=UNKNOWN_VIDEO_STATUS.progress,
            )

        translation_job = self._store.find_latest_translation_job_by_video_id(video_id)
        audio_generation_job = None
        if translation_job is not None:
            audio_generation_job = self._store.find_latest_audio_job_by_translation_job_id(translation_job.id)
        final_output = self._store.find_latest_final_output_by_video_id(video_id)

        derived = derive_status(video, translation_job, audio_generation_job, final_output)
        logger.debug(
            "workflow.status_derived video_id=%s overall_status=%s progress=%s",
            video_id,
            derived.overall_status,
            derived.progress,
        )

        return WorkflowStatus(
            video=to_video(video),
            translation_job=to_translation_job(translation_job) if translation_job is not None else None,
            audio_generation_job=(
                to_audio_generation_job(audio_generation_job) if audio_generation_job is not None else None
            ),
            final_output=to_final_output(final_output) if final_output is not None else None,
            overall_status=derived.overall_status,
            progress=derived.progress,
        )
