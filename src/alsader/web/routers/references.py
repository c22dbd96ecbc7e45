from typing import Annotated

from fastapi import APIRouter, Query

from alsader.core.modules.availability.models import AvailabilityView
from alsader.core.modules.reference.models import DocumentType
from alsader.web.deps import AppDep, AuthTokenDep
from alsader.web.openapi import ErrorResponse

router = APIRouter(tags=["references"])


@router.get(
    "/availability",
    summary="Check reference availability",
    description=(
        "Check whether a reference number can be used for a new document. "
        "Malformed input is reported as status `invalid_format` rather than an error."
    ),
    operation_id="checkAvailability",
    responses={
        200: {"description": "Availability of the reference number"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def check_availability(
    app: AppDep,
    auth_token: AuthTokenDep,
    document_type: Annotated[DocumentType, Query(alias="type", description="Document type")],
    reference_id: Annotated[str, Query(alias="ref", description="Candidate reference number")],
) -> AvailabilityView:
    return await app.check_availability(auth_token, document_type, reference_id)
