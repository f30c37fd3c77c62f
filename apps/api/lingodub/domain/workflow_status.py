"""Overall workflow status derivation.

The overall status of a video is computed from four independently updated
records: the video, its latest translation job, that job's latest audio
generation job and the video's latest final output. ``STATUS_RULES`` is
evaluated top to bottom and the first matching rule wins; the fallback row
makes the derivation total.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from lingodub.repositories.memory import (
    AudioGenerationJobRecord,
    FinalOutputRecord,
    TranslationJobRecord,
    VideoRecord,
)
from lingodub.schemas.audio_generation_job import AudioGenerationStatus
from lingodub.schemas.translation_job import TranslationStatus
from lingodub.schemas.video import UploadStatus
from lingodub.schemas.workflow import OverallStatus

_UPLOAD_IN_PROGRESS: frozenset[UploadStatus] = frozenset({UploadStatus.PENDING, UploadStatus.PROCESSING})
_TRANSLATION_IN_PROGRESS: frozenset[TranslationStatus] = frozenset(
    {
        TranslationStatus.PENDING,
        TranslationStatus.EXTRACTING_AUDIO,
        TranslationStatus.TRANSLATING,
    }
)
_AUDIO_IN_PROGRESS: frozenset[AudioGenerationStatus] = frozenset(
    {AudioGenerationStatus.PENDING, AudioGenerationStatus.GENERATING}
)


@dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    video: VideoRecord
    translation_job: TranslationJobRecord | None = None
    audio_generation_job: AudioGenerationJobRecord | None = None
    final_output: FinalOutputRecord | None = None


@dataclass(frozen=True, slots=True)
class DerivedStatus:
    overall_status: OverallStatus
    progress: int


@dataclass(frozen=True, slots=True)
class StatusRule:
    name: str
    matches: Callable[[WorkflowSnapshot], bool]
    result: DerivedStatus


def _translation_status(snapshot: WorkflowSnapshot) -> TranslationStatus | None:
    return snapshot.translation_job.status if snapshot.translation_job is not None else None


def _audio_status(snapshot: WorkflowSnapshot) -> AudioGenerationStatus | None:
    return snapshot.audio_generation_job.status if snapshot.audio_generation_job is not None else None


STATUS_RULES: tuple[StatusRule, ...] = (
    # A final output wins over any failure recorded on the jobs that preceded it.
    StatusRule(
        name="final_output_present",
        matches=lambda s: s.final_output is not None,
        result=DerivedStatus(OverallStatus.COMPLETED, 100),
    ),
    StatusRule(
        name="upload_failed",
        matches=lambda s: s.video.upload_status == UploadStatus.FAILED,
        result=DerivedStatus(OverallStatus.FAILED, 0),
    ),
    StatusRule(
        name="translation_failed",
        matches=lambda s: _translation_status(s) == TranslationStatus.FAILED,
        result=DerivedStatus(OverallStatus.FAILED, 25),
    ),
    StatusRule(
        name="audio_generation_failed",
        matches=lambda s: _audio_status(s) == AudioGenerationStatus.FAILED,
        result=DerivedStatus(OverallStatus.FAILED, 75),
    ),
    StatusRule(
        name="upload_in_progress",
        matches=lambda s: s.video.upload_status in _UPLOAD_IN_PROGRESS,
        result=DerivedStatus(OverallStatus.UPLOADING, 10),
    ),
    StatusRule(
        name="awaiting_translation",
        matches=lambda s: s.video.upload_status == UploadStatus.UPLOADED and s.translation_job is None,
        result=DerivedStatus(OverallStatus.NOT_STARTED, 25),
    ),
    StatusRule(
        name="translation_in_progress",
        matches=lambda s: _translation_status(s) in _TRANSLATION_IN_PROGRESS,
        result=DerivedStatus(OverallStatus.TRANSLATING, 50),
    ),
    StatusRule(
        name="awaiting_audio_generation",
        matches=lambda s: (
            _translation_status(s) == TranslationStatus.COMPLETED and s.audio_generation_job is None
        ),
        result=DerivedStatus(OverallStatus.TRANSLATING, 75),
    ),
    StatusRule(
        name="audio_generation_in_progress",
        matches=lambda s: _audio_status(s) in _AUDIO_IN_PROGRESS,
        result=DerivedStatus(OverallStatus.GENERATING_AUDIO, 85),
    ),
    StatusRule(
        name="awaiting_final_output",
        matches=lambda s: _audio_status(s) == AudioGenerationStatus.COMPLETED,
        result=DerivedStatus(OverallStatus.GENERATING_AUDIO, 95),
    ),
)

FALLBACK_STATUS = DerivedStatus(OverallStatus.NOT_STARTED, 0)
UNKNOWN_VIDEO_STATUS = DerivedStatus(OverallStatus.NOT_STARTED, 0)


def match_rule(snapshot: WorkflowSnapshot) -> StatusRule | None:
    """Return the first rule matching ``snapshot``, or ``None`` for the fallback row."""
    for rule in STATUS_RULES:
        if rule.matches(snapshot):
            return rule
    return None


def derive_status(
    video: VideoRecord,
    translation_job: TranslationJobRecord | None,
    audio_generation_job: AudioGenerationJobRecord | None,
    final_output: FinalOutputRecord | None,
) -> DerivedStatus:
    rule = match_rule(
        WorkflowSnapshot(
            video=video,
            translation_job=translation_job,
            audio_generation_job=audio_generation_job,
            final_output=final_output,
        )
    )
    return rule.result if rule is not None else FALLBACK_STATUS
