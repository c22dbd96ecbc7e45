from typing import Annotated

from fastapi import APIRouter, Query

from alsader.core.modules.document.models import DocumentStats, StatsPeriod
from alsader.web.deps import AppDep, AuthTokenDep
from alsader.web.openapi import ErrorResponse

router = APIRouter(tags=["stats"])


@router.get(
    "/stats",
    summary="Document statistics",
    description=(
        "Counts of live documents per type, the latest reference numbers and a monthly chart. "
        "Users get their own numbers; admins get everyone's or, with `username`, one user's."
    ),
    operation_id="getStats",
    responses={
        200: {"description": "Document statistics"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Cannot view another user's statistics"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def get_stats(
    app: AppDep,
    auth_token: AuthTokenDep,
    period: Annotated[StatsPeriod, Query(description="Time window")] = StatsPeriod.ALL,
    username: Annotated[str | None, Query(description="Restrict to one uploader")] = None,
) -> DocumentStats:
    return await app.get_stats(auth_token, period, username)
