"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from lingodub.errors import ApiError
from lingodub.repositories.memory import InMemoryStore
from lingodub.routes import (
    audio_generation_jobs_router,
    final_outputs_router,
    internal_router,
    system_router,
    translation_jobs_router,
    videos_router,
)
from lingodub.schemas.error import ErrorResponse


_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/v1/healthcheck": {"get": {"200"}},
    "/api/v1/videos": {"post": {"201", "422"}, "get": {"200", "422"}},
    "/api/v1/videos/{videoId}": {"get": {"200", "404"}},
    "/api/v1/videos/{videoId}/workflow-status": {"get": {"200"}},
    "/api/v1/videos/{videoId}/final-output": {"get": {"200"}},
    "/api/v1/translation-jobs": {"post": {"201", "404", "409", "422"}, "get": {"200", "422"}},
    "/api/v1/audio-generation-jobs": {"post": {"201", "404", "409", "422"}},
    "/api/v1/final-outputs": {"get": {"200", "422"}},
    "/api/v1/internal/videos/{videoId}/status": {"patch": {"200", "401", "404", "409", "422"}},
    "/api/v1/internal/translation-jobs/{jobId}": {"patch": {"200", "401", "404", "422"}},
    "/api/v1/internal/audio-generation-jobs/{jobId}": {"patch": {"200", "401", "404", "422"}},
    "/api/v1/internal/final-outputs": {"post": {"201", "401", "404", "409", "422"}},
}

_FINAL_OUTPUT_409_ONEOF_REFS: list[str] = [
    "#/components/schemas/InvalidStateErrorResponse",
    "#/components/schemas/FinalOutputConflictErrorResponse",
]


def _apply_contract_response_codes(schema: dict) -> None:
    """Limit documented response codes to each operation's contract."""
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                responses.setdefault(status_code, {"description": "See API contract"})


def _apply_final_output_conflict_schema(schema: dict) -> None:
    """Document both 409 shapes of final output creation as a oneOf."""
    path_item = schema.get("paths", {}).get("/api/v1/internal/final-outputs")
    if not path_item:
        return

    operation = path_item.get("post")
    if not operation:
        return

    responses = operation.setdefault("responses", {})
    conflict = responses.setdefault("409", {"description": "See API contract"})
    content = conflict.setdefault("content", {}).setdefault("application/json", {})
    content["schema"] = {"oneOf": [{"$ref": ref} for ref in _FINAL_OUTPUT_409_ONEOF_REFS]}


def create_app() -> FastAPI:
    app = FastAPI(title="Lingodub API", version="1.0.0")
    app.state.store = InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorResponse(
            code="VALIDATION_ERROR",
            message="Invalid request payload",
            details={"errors": jsonable_encoder(exc.errors(), exclude={"ctx", "url"})},
        )
        return JSONResponse(status_code=422, content=payload.model_dump(mode="json"))

    api_prefix = "/api/v1"
    app.include_router(system_router, prefix=api_prefix)
    app.include_router(videos_router, prefix=api_prefix)
    app.include_router(translation_jobs_router, prefix=api_prefix)
    app.include_router(audio_generation_jobs_router, prefix=api_prefix)
    app.include_router(final_outputs_router, prefix=api_prefix)
    app.include_router(internal_router, prefix=api_prefix)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        _apply_final_output_conflict_schema(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
