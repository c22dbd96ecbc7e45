from alsader.core.core import Service
from alsader.core.modules.availability.models import AvailabilityResult, AvailabilityStatus
from alsader.core.modules.reference.models import DocumentType, ReferenceId
from alsader.core.modules.reference.validators import parse_reference_id
from alsader.core.modules.reservation.models import Reservation
from alsader.errors import InvalidFormatError


class AvailabilityService(Service):
    """Read-only checks of whether a reference number is free."""

    async def check(self, document_type: DocumentType, raw_reference_id: str) -> AvailabilityResult:
        """Classify a candidate reference number without side effects."""
        try:
            reference_id = parse_reference_id(raw_reference_id)
        except InvalidFormatError:
            return AvailabilityResult(
                document_type=document_type, reference_id=raw_reference_id, status=AvailabilityStatus.INVALID_FORMAT
            )

        status, reservation = await self._check_reference(document_type, reference_id)
        return AvailabilityResult(
            document_type=document_type, reference_id=str(reference_id), status=status, reservation=reservation
        )

    async def is_available(self, document_type: DocumentType, raw_reference_id: str) -> bool:
        return (await self.check(document_type, raw_reference_id)).available

    async def is_reference_free(self, document_type: DocumentType, reference_id: ReferenceId) -> bool:
        """Same decision for an already parsed reference number."""
        status, _ = await self._check_reference(document_type, reference_id)
        return status == AvailabilityStatus.AVAILABLE

    async def next_free_reference(self, document_type: DocumentType, start: ReferenceId) -> ReferenceId:
        """Lowest number >= start held by neither a document nor an active reservation."""
        held = set(await self.core.services.document.reference_ids_from(document_type, start))
        held.update(await self.core.services.reservation.active_reference_ids_from(document_type, start))
        candidate = int(start)
        while candidate in held:
            candidate += 1
        return ReferenceId(candidate)

    async def _check_reference(
        self, document_type: DocumentType, reference_id: ReferenceId
    ) -> tuple[AvailabilityStatus, Reservation | None]:
        # Soft-deleted documents keep their numbers
        if await self.core.services.document.reference_exists(document_type, reference_id):
            return AvailabilityStatus.DOCUMENT_EXISTS, None
        reservation = await self.core.services.reservation.find_active(document_type, reference_id)
        if reservation is not None:
            return AvailabilityStatus.RESERVED, reservation
        return AvailabilityStatus.AVAILABLE, None
