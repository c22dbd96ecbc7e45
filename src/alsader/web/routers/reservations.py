from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from alsader.core.modules.reference.models import DocumentType
from alsader.core.modules.reservation.models import ReservationView
from alsader.web.deps import AppDep, AuthTokenDep
from alsader.web.openapi import ErrorResponse

router = APIRouter(tags=["reservations"])


class ReserveRequest(BaseModel):
    """Request to reserve a reference number."""

    document_type: DocumentType = Field(..., description="Document type the number belongs to")
    reference_id: str = Field(..., description="Reference number, digits only")
    notes: str = Field("", max_length=1000, description="Why the number is being held")


@router.post(
    "/reservations",
    summary="Reserve reference number",
    description="Hold a reference number so no other document can take it until it is used or cancelled.",
    operation_id="createReservation",
    status_code=201,
    responses={
        201: {"description": "Reference number reserved"},
        400: {"model": ErrorResponse, "description": "Malformed reference number"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        409: {"model": ErrorResponse, "description": "Number already used or reserved"},
    },
)
async def create_reservation(request: ReserveRequest, app: AppDep, auth_token: AuthTokenDep) -> ReservationView:
    return await app.reserve_reference(auth_token, request.document_type, request.reference_id, request.notes)


@router.get(
    "/reservations",
    summary="List reservations",
    description="List reservations ordered by reservation time, active ones only by default.",
    operation_id="listReservations",
    responses={
        200: {"description": "List of reservations"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_reservations(
    app: AppDep,
    auth_token: AuthTokenDep,
    document_type: Annotated[DocumentType | None, Query(alias="type", description="Filter by document type")] = None,
    active: Annotated[bool, Query(description="Only reservations not yet used")] = True,
) -> list[ReservationView]:
    return await app.get_reservations(auth_token, document_type, active_only=active)


@router.delete(
    "/reservations/{reservation_id}",
    summary="Cancel reservation",
    description="Release an active reservation. Only its creator or an admin may cancel it.",
    operation_id="cancelReservation",
    status_code=204,
    responses={
        204: {"description": "Reservation cancelled"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Reservation belongs to another user"},
        404: {"model": ErrorResponse, "description": "Reservation not found"},
        409: {"model": ErrorResponse, "description": "Reservation already used"},
    },
)
async def cancel_reservation(reservation_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.cancel_reservation(auth_token, reservation_id)
