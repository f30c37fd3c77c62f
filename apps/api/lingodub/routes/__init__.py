"""Route modules."""

from .audio_generation_jobs import router as audio_generation_jobs_router
from .final_outputs import router as final_outputs_router
from .internal import router as internal_router
from .system import router as system_router
from .translation_jobs import router as translation_jobs_router
from .videos import router as videos_router

__all__ = [
    "audio_generation_jobs_router",
    "final_outputs_router",
    "internal_router",
    "system_router",
    "translation_jobs_router",
    "videos_router",
]
