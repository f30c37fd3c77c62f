"""Final output routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from lingodub.routes.dependencies import Pagination, get_final_output_service, get_pagination
from lingodub.schemas.error import RequestValidationErrorResponse
from lingodub.schemas.final_output import FinalOutput
from lingodub.services.final_outputs import FinalOutputService

router = APIRouter(prefix="/final-outputs", tags=["Final outputs"])


@router.get(
    "",
    response_model=list[FinalOutput],
    responses={422: {"model": RequestValidationErrorResponse}},
)
async def list_final_outputs(
    pagination: Annotated[Pagination, Depends(get_pagination)],
    service: Annotated[FinalOutputService, Depends(get_final_output_service)],
) -> list[FinalOutput]:
    return service.list_final_outputs(limit=pagination.limit, offset=pagination.offset)
