from typing import Any

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from alsader.core.core import Service
from alsader.core.modules.counter.models import SequenceView
from alsader.core.modules.reference.models import DocumentType, ReferenceId

logger = structlog.get_logger(__name__)


class CounterService(Service):
    """Service for managing the reference number sequence of each document type."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("counters")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("document_type", 1)], unique=True)

    async def get_next_sequence(self, document_type: DocumentType) -> ReferenceId:
        """Atomically increment and return the next reference number for a type."""
        result = await self._collection.find_one_and_update(
            {"document_type": document_type},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

        # If it was just created (upserted), seq will be 1
        # Otherwise, it returns the incremented value
        return ReferenceId(int(result["seq"]))

    async def get_current_sequence(self, document_type: DocumentType) -> int:
        """Get the last emitted number without incrementing."""
        doc = await self._collection.find_one({"document_type": document_type})
        if doc:
            return int(doc["seq"])
        return 0

    async def advance_past(self, document_type: DocumentType, reference_id: ReferenceId) -> None:
        """Move the sequence so the next minted number is greater than reference_id.

        Never moves the sequence backwards.
        """
        await self._collection.update_one(
            {"document_type": document_type},
            {"$max": {"seq": int(reference_id)}},
            upsert=True,
        )

    async def reset_sequence(self, document_type: DocumentType) -> None:
        """Restart numbering at 1 for a type. Previously issued numbers stay taken by their documents."""
        previous = await self.get_current_sequence(document_type)
        await self._collection.update_one({"document_type": document_type}, {"$set": {"seq": 0}}, upsert=True)
        logger.info("sequence_reset", document_type=document_type, previous_value=previous)

    async def get_sequence_view(self, document_type: DocumentType) -> SequenceView:
        last_value = await self.get_current_sequence(document_type)
        return SequenceView(document_type=document_type, last_value=last_value, next_value=last_value + 1)
