from pydantic import BaseModel, Field

from alsader.core.modules.counter.models import SequenceView
from alsader.core.modules.reference.models import DocumentType


class NewYearResult(BaseModel):
    """Outcome of a yearly rollover."""

    sequences: list[SequenceView] = Field(..., description="Sequence positions after the reset")
    reservations_removed: dict[DocumentType, int] = Field(
        default_factory=dict, description="Reservations deleted per type, when requested"
    )


class ResetDocumentsResult(BaseModel):
    """Outcome of clearing the documents of some types."""

    archived: bool = Field(..., description="Whether documents were moved to the archive rather than deleted")
    documents_removed: dict[DocumentType, int] = Field(..., description="Documents archived or deleted per type")
    reservations_removed: dict[DocumentType, int] = Field(..., description="Reservations deleted per type")
    sequences: list[SequenceView] = Field(..., description="Sequence positions after the reset")
