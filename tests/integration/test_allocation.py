"""Tests for reference allocation through document creation."""

import asyncio
from pathlib import Path

import pytest

from alsader.core.modules.document.models import Document, UploadedFile
from alsader.core.modules.reference.models import DocumentType
from alsader.errors import ConflictError, InvalidFormatError


async def create(core, user, fields, document_type=DocumentType.INBOUND, manual=None, upload=None):
    return await core.services.document.create_document(document_type, fields, user, manual, upload)


class TestAutomaticAllocation:
    async def test_sequential_numbers_start_at_one(self, core, alice, document_fields):
        """Three automatic allocations on a fresh type yield 1, 2 and 3."""
        documents = [await create(core, alice, document_fields) for _ in range(3)]
        assert [document.reference_id for document in documents] == [1, 2, 3]
        assert not any(document.is_manual_reference for document in documents)

    async def test_types_numbered_independently(self, core, alice, document_fields):
        await create(core, alice, document_fields, DocumentType.INBOUND)
        await create(core, alice, document_fields, DocumentType.INBOUND)
        outbound = await create(core, alice, document_fields, DocumentType.OUTBOUND)
        assert outbound.reference_id == 1

    async def test_concurrent_allocations_unique(self, core, alice, bob, document_fields):
        users = [alice, bob] * 6
        documents = await asyncio.gather(*(create(core, user, document_fields) for user in users))
        assert sorted(document.reference_id for document in documents) == list(range(1, 13))

    async def test_skips_numbers_taken_manually(self, core, alice, document_fields):
        await create(core, alice, document_fields)  # 1
        await core.services.counter.reset_sequence(DocumentType.INBOUND)
        await create(core, alice, document_fields, manual="2")
        await core.services.counter.reset_sequence(DocumentType.INBOUND)

        document = await create(core, alice, document_fields)

        assert document.reference_id == 3

    async def test_skips_active_reservations(self, core, alice, document_fields):
        await core.services.reservation.reserve(DocumentType.OUTBOUND, "1", "", alice)
        await core.services.counter.reset_sequence(DocumentType.OUTBOUND)

        document = await create(core, alice, document_fields, DocumentType.OUTBOUND)

        assert document.reference_id == 2
        assert await core.services.reservation.find_active(DocumentType.OUTBOUND, 1) is not None

    async def test_jumps_past_held_numbers_after_reset(self, core, alice, document_fields):
        """More held numbers than allocation attempts after a reset still allocate on the first call."""
        max_attempts = core.config.allocation_max_attempts
        for _ in range(max_attempts + 5):
            await create(core, alice, document_fields)
        await core.services.counter.reset_sequence(DocumentType.INBOUND)

        document = await create(core, alice, document_fields)

        assert document.reference_id == max_attempts + 6

    async def test_jump_lands_in_first_gap(self, core, alice, document_fields):
        for reference_id in ("1", "2", "4"):
            await create(core, alice, document_fields, manual=reference_id)
        await core.services.reservation.reserve(DocumentType.INBOUND, "5", "", alice)
        await core.services.counter.reset_sequence(DocumentType.INBOUND)

        first = await create(core, alice, document_fields)
        second = await create(core, alice, document_fields)

        assert first.reference_id == 3
        assert second.reference_id == 6

    async def test_gives_up_when_every_claim_loses(self, core):
        """The attempt limit bounds retries when concurrent writers keep taking minted numbers."""
        core.config.allocation_max_attempts = 3

        async def claim(reference_id):
            raise ConflictError(f"Reference {reference_id} is already used")

        with pytest.raises(ConflictError, match="No free inbound reference number"):
            await core.services.allocation.allocate(DocumentType.INBOUND, None, claim)
        assert await core.services.counter.get_current_sequence(DocumentType.INBOUND) == 3

    async def test_reservation_racing_minted_number_is_not_consumed(self, core, alice, bob, document_fields):
        """A reservation slipping in between the availability check and the claim stays with its owner."""

        async def claim(reference_id):
            await core.services.reservation.reserve(DocumentType.INBOUND, str(reference_id), "", bob)
            document = Document(
                document_type=DocumentType.INBOUND,
                reference_id=reference_id,
                title=document_fields.title,
                subject=document_fields.subject,
                sender=document_fields.sender,
                document_date=document_fields.document_date,
                uploaded_by=alice.id,
            )
            await core.services.document.insert_document(document)

        reference_id = await core.services.allocation.allocate(DocumentType.INBOUND, None, claim)

        reservation = await core.services.reservation.find_active(DocumentType.INBOUND, reference_id)
        assert reservation is not None
        assert reservation.reserved_by == bob.id


class TestManualAllocation:
    async def test_manual_number_used(self, core, alice, document_fields):
        document = await create(core, alice, document_fields, manual="0042")
        assert document.reference_id == 42
        assert document.is_manual_reference

    async def test_manual_number_advances_sequence(self, core, alice, document_fields):
        await create(core, alice, document_fields, manual="50")
        document = await create(core, alice, document_fields)
        assert document.reference_id == 51

    async def test_lower_manual_number_does_not_rewind(self, core, alice, document_fields):
        for _ in range(5):
            await create(core, alice, document_fields)
        await create(core, alice, document_fields, manual="9")
        await create(core, alice, document_fields, manual="7")
        document = await create(core, alice, document_fields)
        assert document.reference_id == 10

    async def test_existing_number_conflicts(self, core, alice, bob, document_fields):
        await create(core, alice, document_fields, manual="5")
        with pytest.raises(ConflictError):
            await create(core, bob, document_fields, manual="5")

    async def test_soft_deleted_number_conflicts(self, core, alice, document_fields):
        """A number stays taken after its document is deleted."""
        document = await create(core, alice, document_fields, manual="5")
        await core.services.document.soft_delete(document.document_type, document.reference_id, alice)

        with pytest.raises(ConflictError):
            await create(core, alice, document_fields, manual="5")

    async def test_invalid_format_has_no_side_effects(self, core, alice, document_fields):
        with pytest.raises(InvalidFormatError):
            await create(core, alice, document_fields, manual="ab3")

        assert await core.services.counter.get_current_sequence(DocumentType.INBOUND) == 0
        page = await core.services.document.list_documents(alice)
        assert page.total == 0

    async def test_number_too_large_rejected(self, core, alice, document_fields):
        with pytest.raises(InvalidFormatError, match="too large"):
            await create(core, alice, document_fields, manual="99999999999999999999")
        assert await core.services.counter.get_current_sequence(DocumentType.INBOUND) == 0

    async def test_concurrent_claims_on_same_number(self, core, alice, bob, document_fields):
        users = [alice, bob, alice, bob, alice]
        results = await asyncio.gather(
            *(create(core, user, document_fields, manual="77") for user in users), return_exceptions=True
        )
        successes = [result for result in results if not isinstance(result, Exception)]
        failures = [result for result in results if isinstance(result, Exception)]

        assert len(successes) == 1
        assert all(isinstance(failure, ConflictError) for failure in failures)

    async def test_failed_claim_removes_uploaded_file(self, core, alice, document_fields):
        uploads_path = core.config.uploads_path
        upload = UploadedFile(filename="scan.pdf", mime_type="application/pdf", content=b"%PDF-1.4 first")
        await create(core, alice, document_fields, manual="5", upload=upload)

        second = UploadedFile(filename="scan.pdf", mime_type="application/pdf", content=b"%PDF-1.4 second")
        with pytest.raises(ConflictError):
            await create(core, alice, document_fields, manual="5", upload=second)

        stored = [path for path in Path(uploads_path).rglob("*") if path.is_file()]
        assert len(stored) == 1
        assert stored[0].read_bytes() == b"%PDF-1.4 first"
