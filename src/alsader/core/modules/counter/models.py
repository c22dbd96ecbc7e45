"""Per-type counters that mint reference numbers.

Stored as {"document_type": ..., "seq": <last emitted value>} in the counters
collection, one document per type, only ever changed with atomic operators.
"""

from pydantic import BaseModel, Field

from alsader.core.modules.reference.models import DocumentType


class SequenceView(BaseModel):
    """Sequence position for one document type (API representation)."""

    document_type: DocumentType = Field(..., description="Document type")
    last_value: int = Field(..., description="Last reference number handed out (0 if none)", ge=0)
    next_value: int = Field(..., description="Reference number the next automatic allocation will try", ge=1)
