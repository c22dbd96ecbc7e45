from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from alsader.core.core import Service
from alsader.core.modules.audit.models import AuditAction, AuditEntry


class AuditService(Service):
    """Append-only trail of document actions."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("document_audit")

    async def on_start(self) -> None:
        await self._collection.create_index([("document_id", 1), ("created_at", 1)])

    async def record(self, document_id: UUID, user_id: UUID, action: AuditAction) -> AuditEntry:
        entry = AuditEntry(document_id=document_id, user_id=user_id, action=action)
        await self._collection.insert_one(entry.to_mongo())
        return entry

    async def list_for_document(self, document_id: UUID) -> list[AuditEntry]:
        """All entries for a document, oldest first."""
        cursor = self._collection.find({"document_id": document_id}).sort("created_at", 1)
        return await AuditEntry.list_cursor(cursor)

    async def delete_for_documents(self, document_ids: list[UUID]) -> int:
        result = await self._collection.delete_many({"document_id": {"$in": document_ids}})
        return result.deleted_count
