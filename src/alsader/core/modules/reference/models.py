"""Reference numbers shared by documents and reservations."""

from enum import StrEnum
from typing import NewType

ReferenceId = NewType("ReferenceId", int)


class DocumentType(StrEnum):
    """Correspondence direction. Each type owns its own reference number namespace."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"

    @property
    def prefix(self) -> str:
        """Display prefix, e.g. "IN" for inbound."""
        return REFERENCE_PREFIXES[self]


REFERENCE_PREFIXES: dict[DocumentType, str] = {
    DocumentType.INBOUND: "IN",
    DocumentType.OUTBOUND: "OUT",
}
