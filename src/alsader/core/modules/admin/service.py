import structlog

from alsader.core.core import Service
from alsader.core.modules.admin.models import NewYearResult, ResetDocumentsResult
from alsader.core.modules.counter.models import SequenceView
from alsader.core.modules.reference.models import DocumentType

logger = structlog.get_logger(__name__)


class AdminService(Service):
    """Administrative maintenance of sequences and reservations."""

    async def get_sequences(self) -> list[SequenceView]:
        return [await self.core.services.counter.get_sequence_view(document_type) for document_type in DocumentType]

    async def reset_reservations(self, document_types: list[DocumentType]) -> dict[DocumentType, int]:
        return {
            document_type: await self.core.services.reservation.reset_reservations(document_type)
            for document_type in document_types
        }

    async def start_new_year(self, document_types: list[DocumentType], clear_reservations: bool = False) -> NewYearResult:
        """Restart numbering at 1 for the given types.

        Existing documents keep their numbers; automatic allocation skips any
        number still held after the reset.
        """
        for document_type in document_types:
            await self.core.services.counter.reset_sequence(document_type)

        removed: dict[DocumentType, int] = {}
        if clear_reservations:
            removed = await self.reset_reservations(document_types)

        logger.info("new_year_started", document_types=document_types, clear_reservations=clear_reservations)
        return NewYearResult(sequences=await self.get_sequences(), reservations_removed=removed)

    async def reset_documents(self, document_types: list[DocumentType], archive: bool = True) -> ResetDocumentsResult:
        """Clear the documents of the given types so their numbering starts over at 1.

        Documents are archived (kept with their files, out of the live registry)
        or purged. Reservations of those types are deleted and the sequences reset.
        """
        document_service = self.core.services.document
        removed: dict[DocumentType, int] = {}
        for document_type in document_types:
            if archive:
                removed[document_type] = await document_service.archive_documents(document_type)
            else:
                removed[document_type] = await document_service.purge_documents(document_type)

        reservations_removed = await self.reset_reservations(document_types)
        for document_type in document_types:
            await self.core.services.counter.reset_sequence(document_type)

        logger.warning("documents_reset", document_types=document_types, archive=archive, removed=removed)
        return ResetDocumentsResult(
            archived=archive,
            documents_removed=removed,
            reservations_removed=reservations_removed,
            sequences=await self.get_sequences(),
        )
