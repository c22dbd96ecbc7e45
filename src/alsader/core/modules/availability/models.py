from enum import StrEnum

from pydantic import BaseModel, Field

from alsader.core.modules.reference.models import DocumentType
from alsader.core.modules.reservation.models import Reservation, ReservationView


class AvailabilityStatus(StrEnum):
    AVAILABLE = "available"
    INVALID_FORMAT = "invalid_format"
    DOCUMENT_EXISTS = "document_exists"
    RESERVED = "reserved"


class AvailabilityResult(BaseModel):
    """Outcome of checking whether a reference number can still be claimed."""

    document_type: DocumentType
    reference_id: str = Field(..., description="Reference as given, or its canonical form when it parses")
    status: AvailabilityStatus
    reservation: Reservation | None = None  # Set when status is RESERVED

    @property
    def available(self) -> bool:
        return self.status == AvailabilityStatus.AVAILABLE


class AvailabilityView(BaseModel):
    """Availability check result (API representation)."""

    document_type: DocumentType
    reference_id: str
    status: AvailabilityStatus
    available: bool = Field(..., description="True only when the number can be claimed right now")
    reservation: ReservationView | None = Field(None, description="The blocking reservation, when status is reserved")

    @classmethod
    def from_domain(cls, result: AvailabilityResult, reservation: ReservationView | None) -> "AvailabilityView":
        return cls(
            document_type=result.document_type,
            reference_id=result.reference_id,
            status=result.status,
            available=result.available,
            reservation=reservation,
        )
