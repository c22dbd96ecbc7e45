"""Reference number allocation at document creation time.

A number is taken by inserting the document itself: the unique index on
(document_type, reference_id) in the documents collection decides races, so
any availability check made before the insert is advisory only.
"""

from collections.abc import Awaitable, Callable

import structlog
from pymongo.errors import PyMongoError

from alsader.core.core import Service
from alsader.core.modules.reference.models import DocumentType, ReferenceId
from alsader.core.modules.reference.validators import format_reference, parse_reference_id
from alsader.errors import ConflictError

logger = structlog.get_logger(__name__)

# Inserts the record for a reference number; raises ConflictError if the number is taken
ClaimFn = Callable[[ReferenceId], Awaitable[None]]


class AllocationService(Service):
    """Mints or validates the reference number of a new document."""

    async def allocate(self, document_type: DocumentType, manual_reference_id: str | None, claim: ClaimFn) -> ReferenceId:
        """Pick a reference number, claim it through `claim`, and consume a matching reservation.

        An active reservation for a manual number does not block it: creating
        the document is what the reservation was for. Minted numbers are only
        claimed when no reservation holds them, so there is nothing to consume.

        Raises:
            InvalidFormatError: If the manual number is not a positive decimal number
            ConflictError: If the manual number is taken, or concurrent writers kept taking minted numbers
        """
        if manual_reference_id is None:
            reference_id = await self._claim_next(document_type, claim)
            logger.info("reference_allocated", document_type=document_type, reference_id=reference_id, manual=False)
            return reference_id

        reference_id = await self._claim_manual(document_type, manual_reference_id, claim)
        try:
            reservation = await self.core.services.reservation.mark_used(document_type, reference_id, str(reference_id))
        except PyMongoError:
            # The document exists, so the number stays unavailable; the reservation is left dangling
            logger.exception("reservation_mark_used_failed", document_type=document_type, reference_id=reference_id)
            raise

        logger.info(
            "reference_allocated",
            document_type=document_type,
            reference_id=reference_id,
            manual=True,
            reservation_id=reservation.id if reservation else None,
        )
        return reference_id

    async def _claim_manual(self, document_type: DocumentType, raw_reference_id: str, claim: ClaimFn) -> ReferenceId:
        reference_id = parse_reference_id(raw_reference_id)
        if await self.core.services.document.reference_exists(document_type, reference_id):
            raise ConflictError(f"Reference {format_reference(document_type, reference_id)} is already used by a document")

        await claim(reference_id)
        # Keep the sequence from minting this number later
        await self.core.services.counter.advance_past(document_type, reference_id)
        return reference_id

    async def _claim_next(self, document_type: DocumentType, claim: ClaimFn) -> ReferenceId:
        """Mint sequence values until one can be claimed.

        When a minted value is held by a document or an active reservation (after
        a sequence reset), the sequence jumps straight to the next free number.
        The attempt limit only bounds losses to concurrent writers.
        """
        max_attempts = self.core.config.allocation_max_attempts
        for _ in range(max_attempts):
            reference_id = await self.core.services.counter.get_next_sequence(document_type)
            if not await self.core.services.availability.is_reference_free(document_type, reference_id):
                free_id = await self.core.services.availability.next_free_reference(document_type, reference_id)
                logger.warning(
                    "sequence_skipped_held_numbers", document_type=document_type, from_value=reference_id, to_value=free_id
                )
                await self.core.services.counter.advance_past(document_type, ReferenceId(free_id - 1))
                continue
            try:
                await claim(reference_id)
            except ConflictError:
                logger.warning("sequence_value_burned", document_type=document_type, reference_id=reference_id)
                continue

            # A reservation made between the availability check and the claim lost the race
            raced = await self.core.services.reservation.find_active(document_type, reference_id)
            if raced is not None:
                logger.warning(
                    "reservation_lost_to_allocation",
                    document_type=document_type,
                    reference_id=reference_id,
                    reservation_id=raced.id,
                )
            return reference_id

        logger.error("allocation_exhausted", document_type=document_type, attempts=max_attempts)
        raise ConflictError(f"No free {document_type} reference number found after {max_attempts} attempts")
