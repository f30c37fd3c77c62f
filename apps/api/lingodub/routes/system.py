"""Operational routes."""

from datetime import UTC, datetime

from fastapi import APIRouter

from lingodub.schemas.workflow import HealthcheckResponse

router = APIRouter(tags=["System"])


@router.get("/healthcheck", response_model=HealthcheckResponse)
async def healthcheck() -> HealthcheckResponse:
    return HealthcheckResponse(status="ok", timestamp=datetime.now(UTC).isoformat())
