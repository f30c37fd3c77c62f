"""Translation job API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class Language(str, Enum):
    EN = "en"
    ES = "es"
    FR = "fr"
    DE = "de"
    IT = "it"
    PT = "pt"
    RU = "ru"
    ZH = "zh"
    JA = "ja"
    KO = "ko"
    AR = "ar"
    HI = "hi"


class TranslationStatus(str, Enum):
    PENDING = "pending"
    EXTRACTING_AUDIO = "extracting_audio"
    TRANSLATING = "translating"
    COMPLETED = "completed"
    FAILED = "failed"


class TranslationJob(BaseModel):
    id: int
    video_id: int
    source_language: Language
    target_language: Language
    status: TranslationStatus
    original_audio_path: str | None = None
    translated_text: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime


class CreateTranslationJobRequest(BaseModel):
    video_id: int
    source_language: Language
    target_language: Language


class UpdateTranslationJobRequest(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    status: TranslationStatus | None = None
    original_audio_path: str | None = None
    translated_text: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
