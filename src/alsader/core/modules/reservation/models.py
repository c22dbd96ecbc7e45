from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from alsader.core.db import MongoModel
from alsader.core.modules.reference.models import DocumentType
from alsader.core.modules.reference.validators import format_reference
from alsader.utils import now


class Reservation(MongoModel):
    """Manual claim on a reference number before its document exists.

    Indexed on (document_type, reference_id) - unique among active (is_used=false) reservations.
    """

    document_type: DocumentType
    reference_id: int
    notes: str = ""
    reserved_by: UUID
    reserved_at: datetime = Field(default_factory=now)
    position: int = 0  # Insertion order, from an atomic counter
    is_used: bool = False
    used_at: datetime | None = None
    used_document_id: str | None = None  # Reference number of the document that consumed it


class ReservationView(BaseModel):
    """Reservation (API representation)."""

    id: UUID = Field(..., description="Reservation ID")
    reference_id: str = Field(..., description="Reserved reference number")
    reference: str = Field(..., description="Display form, e.g. OUT-010")
    document_type: DocumentType
    notes: str
    reserved_by: str = Field(..., description="Username of the user who reserved the number")
    reserved_at: datetime
    is_used: bool
    used_at: datetime | None = None
    used_document_id: str | None = None

    @classmethod
    def from_domain(cls, reservation: Reservation, username: str) -> "ReservationView":
        return cls(
            id=reservation.id,
            reference_id=str(reservation.reference_id),
            reference=format_reference(reservation.document_type, reservation.reference_id),
            document_type=reservation.document_type,
            notes=reservation.notes,
            reserved_by=username,
            reserved_at=reservation.reserved_at,
            is_used=reservation.is_used,
            used_at=reservation.used_at,
            used_document_id=reservation.used_document_id,
        )
