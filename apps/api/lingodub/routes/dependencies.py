"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from secrets import compare_digest
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from lingodub.core.config import Settings, get_settings
from lingodub.core.logging_safety import safe_log_identifier
from lingodub.errors import ApiError
from lingodub.repositories.memory import InMemoryStore
from lingodub.services.audio_generation_jobs import AudioGenerationJobService
from lingodub.services.final_outputs import FinalOutputService
from lingodub.services.translation_jobs import TranslationJobService
from lingodub.services.videos import VideoService
from lingodub.services.workflow import WorkflowService

callback_secret_scheme = APIKeyHeader(
    name="X-Callback-Secret",
    auto_error=False,
    scheme_name="internalCallbackSecret",
)
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_request_correlation_id(request: Request) -> str:
    return _request_correlation_id(request)


async def require_callback_secret(
    request: Request,
    callback_secret: Annotated[str | None, Security(callback_secret_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Validate the shared secret sent by processing workers on internal endpoints."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if callback_secret is None or not compare_digest(callback_secret, settings.callback_secret):
        logger.warning(
            "callback.auth_rejected correlation_id=%s method=%s path=%s reason=invalid_callback_secret",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise ApiError(status_code=401, code="UNAUTHORIZED", message="Invalid callback authentication")


class Pagination:
    """Shared ``limit``/``offset`` query parameters bounded by settings."""

    def __init__(self, limit: int, offset: int) -> None:
        self.limit = limit
        self.offset = offset


def get_pagination(
    settings: Annotated[Settings, Depends(get_settings)],
    limit: int | None = None,
    offset: int = 0,
) -> Pagination:
    resolved_limit = settings.default_page_size if limit is None else limit
    if resolved_limit < 1 or resolved_limit > settings.max_page_size or offset < 0:
        raise ApiError(
            status_code=422,
            code="VALIDATION_ERROR",
            message="Invalid pagination parameters",
            details={
                "limit": resolved_limit,
                "offset": offset,
                "min_limit": 1,
                "max_limit": settings.max_page_size,
            },
        )
    return Pagination(limit=resolved_limit, offset=offset)


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_video_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> VideoService:
    return VideoService(store)


def get_translation_job_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> TranslationJobService:
    return TranslationJobService(store)


def get_audio_generation_job_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> AudioGenerationJobService:
    return AudioGenerationJobService(store)


def get_final_output_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> FinalOutputService:
    return FinalOutputService(store)


def get_workflow_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> WorkflowService:
    return WorkflowService(store)
