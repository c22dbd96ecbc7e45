from fastapi import APIRouter
from pydantic import BaseModel, Field

from alsader.core.modules.admin.models import NewYearResult, ResetDocumentsResult
from alsader.core.modules.counter.models import SequenceView
from alsader.core.modules.reference.models import DocumentType
from alsader.web.deps import AppDep, AuthTokenDep
from alsader.web.openapi import ErrorResponse

router = APIRouter(tags=["admin"])


class NewYearRequest(BaseModel):
    """Request to restart numbering for a new year."""

    document_types: list[DocumentType] = Field(
        default_factory=lambda: list(DocumentType), description="Sequences to reset, all by default"
    )
    clear_reservations: bool = Field(False, description="Also delete all reservations of those types")


class ResetReservationsRequest(BaseModel):
    document_types: list[DocumentType] = Field(
        default_factory=lambda: list(DocumentType), description="Types whose reservations are deleted"
    )


class ResetDocumentsRequest(BaseModel):
    document_types: list[DocumentType] = Field(
        default_factory=lambda: list(DocumentType), description="Types whose documents are cleared"
    )
    archive: bool = Field(True, description="Move documents to the archive instead of deleting them with their files")


class ResetReservationsResponse(BaseModel):
    removed: dict[DocumentType, int] = Field(..., description="Reservations deleted per type")


@router.get(
    "/admin/sequences",
    summary="Get sequence positions",
    description="Last issued and next reference number of every document type.",
    operation_id="getSequences",
    responses={
        200: {"description": "Sequence positions"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def get_sequences(app: AppDep, auth_token: AuthTokenDep) -> list[SequenceView]:
    return await app.get_sequences(auth_token)


@router.post(
    "/admin/new-year",
    summary="Start new year",
    description=(
        "Reset sequences so numbering starts again at 1. "
        "Numbers still held by documents or reservations are skipped when allocating."
    ),
    operation_id="startNewYear",
    responses={
        200: {"description": "Sequences reset"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def start_new_year(request: NewYearRequest, app: AppDep, auth_token: AuthTokenDep) -> NewYearResult:
    return await app.start_new_year(auth_token, request.document_types, request.clear_reservations)


@router.post(
    "/admin/reservations/reset",
    summary="Reset reservations",
    description="Delete all reservations, used and active, of the given types.",
    operation_id="resetReservations",
    responses={
        200: {"description": "Reservations deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def reset_reservations(
    request: ResetReservationsRequest, app: AppDep, auth_token: AuthTokenDep
) -> ResetReservationsResponse:
    return ResetReservationsResponse(removed=await app.reset_reservations(auth_token, request.document_types))


@router.post(
    "/admin/documents/reset",
    summary="Reset documents",
    description=(
        "Archive or permanently delete all documents of the given types, delete their reservations "
        "and restart numbering at 1."
    ),
    operation_id="resetDocuments",
    responses={
        200: {"description": "Documents cleared"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def reset_documents(request: ResetDocumentsRequest, app: AppDep, auth_token: AuthTokenDep) -> ResetDocumentsResult:
    return await app.reset_documents(auth_token, request.document_types, request.archive)
