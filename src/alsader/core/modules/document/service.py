import asyncio
import re
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from alsader.core.core import Service
from alsader.core.modules.access.rules import owner_scope
from alsader.core.modules.audit.models import AuditAction
from alsader.core.modules.document.models import (
    Document,
    DocumentFields,
    DocumentFileInfo,
    DocumentStats,
    FileMetadata,
    StatsPeriod,
    UploadedFile,
)
from alsader.core.modules.document.stats import build_monthly_chart, period_start
from alsader.core.modules.document.storage import (
    build_storage_path,
    compute_content_hash,
    get_document_file_path,
    hash_file,
    remove_document_file,
    sanitize_filename,
    validate_upload,
    write_document_file,
)
from alsader.core.modules.reference.models import DocumentType, ReferenceId
from alsader.core.modules.reference.validators import format_reference, is_reference_id, parse_reference_id
from alsader.core.modules.user.models import User
from alsader.core.pagination import PaginationResult
from alsader.errors import ConflictError, NotFoundError, StorageFailure
from alsader.utils import now

logger = structlog.get_logger(__name__)


class DocumentService(Service):
    """Stores inbound and outbound documents under their reference numbers."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("documents")
        self._archive = database.get_collection("archived_documents")

    async def on_start(self) -> None:
        """Create indexes; the unique one is what makes a reference claim atomic."""
        await self._collection.create_index([("document_type", 1), ("reference_id", 1)], unique=True)
        await self._collection.create_index([("uploaded_by", 1)])
        await self._collection.create_index([("created_at", -1)])
        await self._archive.create_index([("document_type", 1), ("reference_id", 1)])
        await self._archive.create_index([("uploaded_by", 1)])

    async def insert_document(self, document: Document) -> None:
        """Insert a document, turning a reference collision into ConflictError."""
        try:
            await self._collection.insert_one(document.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError(
                f"Reference {format_reference(document.document_type, document.reference_id)} is already used"
            ) from e

    async def reference_exists(self, document_type: DocumentType, reference_id: ReferenceId) -> bool:
        """Whether any document, soft-deleted ones included, holds this reference."""
        count = await self._collection.count_documents(
            {"document_type": document_type, "reference_id": int(reference_id)}, limit=1
        )
        return count > 0

    async def reference_ids_from(self, document_type: DocumentType, start: int) -> list[int]:
        """Reference numbers of a type, soft-deleted documents included, that are >= start."""
        return await self._collection.distinct(
            "reference_id", {"document_type": document_type, "reference_id": {"$gte": start}}
        )

    async def find_document(self, document_type: DocumentType, reference_id: ReferenceId) -> Document | None:
        doc = await self._collection.find_one({"document_type": document_type, "reference_id": int(reference_id)})
        return Document.from_mongo(doc)

    async def get_document(
        self, document_type: DocumentType, reference_id: ReferenceId, include_deleted: bool = False
    ) -> Document:
        """Get a document by type and reference number; soft-deleted ones count as missing unless asked for."""
        document = await self.find_document(document_type, reference_id)
        if document is None or (document.is_deleted and not include_deleted):
            raise NotFoundError(f"Document not found: {format_reference(document_type, reference_id)}")
        return document

    async def get_document_by_raw_reference(self, document_type: DocumentType, raw_reference_id: str) -> Document:
        return await self.get_document(document_type, parse_reference_id(raw_reference_id))

    async def create_document(
        self,
        document_type: DocumentType,
        fields: DocumentFields,
        user: User,
        manual_reference_id: str | None = None,
        upload: UploadedFile | None = None,
    ) -> Document:
        """Allocate a reference number and store the document under it.

        The file, if any, is validated and written first and removed again when
        allocation fails, so a rejected upload never burns a sequence number.
        """
        config = self.core.config
        file_metadata: FileMetadata | None = None
        if upload is not None:
            validate_upload(upload.filename, len(upload.content), config.upload_allowed_extensions, config.upload_max_size)
            storage_path = build_storage_path(upload.filename, now())
            file_metadata = FileMetadata(
                filename=sanitize_filename(upload.filename),
                mime_type=upload.mime_type,
                size=len(upload.content),
                content_hash=compute_content_hash(upload.content),
                storage_path=storage_path,
            )
            await asyncio.to_thread(write_document_file, config.uploads_path, storage_path, upload.content)

        async def claim(reference_id: ReferenceId) -> None:
            document = Document(
                document_type=document_type,
                reference_id=reference_id,
                title=fields.title,
                subject=fields.subject,
                sender=fields.sender,
                document_date=fields.document_date,
                uploaded_by=user.id,
                file=file_metadata,
                is_manual_reference=manual_reference_id is not None,
            )
            await self.insert_document(document)

        try:
            reference_id = await self.core.services.allocation.allocate(document_type, manual_reference_id, claim)
        except Exception:
            if file_metadata is not None:
                await asyncio.to_thread(remove_document_file, config.uploads_path, file_metadata.storage_path)
            raise

        document = await self.get_document(document_type, reference_id)
        await self.core.services.audit.record(document.id, user.id, AuditAction.CREATE)
        logger.info(
            "document_created",
            document_type=document_type,
            reference_id=reference_id,
            uploaded_by=user.username,
            has_file=file_metadata is not None,
        )
        return document

    async def list_documents(
        self,
        user: User,
        document_type: DocumentType | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> PaginationResult[Document]:
        """Get live documents newest first; non-admin users only see their own.

        Args:
            user: The acting user
            document_type: Optional type filter
            search: Case-insensitive text matched against title, subject and sender,
                or an exact reference number when the text is numeric
            limit: Maximum number of documents to return
            offset: Number of documents to skip
        """
        query: dict[str, Any] = {"deleted_at": None}
        owner_id = owner_scope(user)
        if owner_id is not None:
            query["uploaded_by"] = owner_id
        if document_type is not None:
            query["document_type"] = document_type
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            conditions: list[dict[str, Any]] = [{"title": pattern}, {"subject": pattern}, {"sender": pattern}]
            if is_reference_id(search):
                conditions.append({"reference_id": int(parse_reference_id(search))})
            query["$or"] = conditions

        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query).sort([("created_at", -1), ("reference_id", -1)]).skip(offset).limit(limit)
        items = await Document.list_cursor(cursor)

        logger.debug("list_documents", query=query, total=total, limit=limit, offset=offset, returned=len(items))
        return PaginationResult(items=items, total=total, limit=limit, offset=offset)

    async def soft_delete(self, document_type: DocumentType, reference_id: ReferenceId, user: User) -> None:
        """Mark a document deleted. Its reference number is never handed out again."""
        document = await self.get_document(document_type, reference_id)
        self.core.services.access.ensure_owner_or_admin(user, document.uploaded_by, f"document {document.reference}")

        result = await self._collection.update_one({"_id": document.id, "deleted_at": None}, {"$set": {"deleted_at": now()}})
        if result.modified_count == 0:
            raise NotFoundError(f"Document not found: {document.reference}")

        await self.core.services.audit.record(document.id, user.id, AuditAction.DELETE)
        logger.info("document_deleted", document_type=document_type, reference_id=reference_id, deleted_by=user.username)

    async def get_file_info(self, document_type: DocumentType, reference_id: ReferenceId, user: User) -> DocumentFileInfo:
        """Locate a document's file for download after checking ownership and integrity.

        Raises:
            NotFoundError: If the document is missing, has no file, or the file is gone
            AccessDeniedError: If the user is neither the owner nor an admin
            StorageFailure: If the file on disk no longer matches its recorded hash
        """
        document = await self.get_document(document_type, reference_id)
        self.core.services.access.ensure_owner_or_admin(user, document.uploaded_by, f"document {document.reference}")
        if document.file is None:
            raise NotFoundError(f"Document {document.reference} has no file attached")

        file_path = get_document_file_path(self.core.config.uploads_path, document.file.storage_path)
        if not file_path.exists():
            raise NotFoundError(f"File not found for document {document.reference}")

        actual_hash = await asyncio.to_thread(hash_file, file_path)
        if actual_hash != document.file.content_hash:
            logger.error("file_integrity_check_failed", document_type=document_type, reference_id=reference_id)
            raise StorageFailure(f"File integrity check failed for document {document.reference}")

        await self.core.services.audit.record(document.id, user.id, AuditAction.DOWNLOAD)
        return DocumentFileInfo(file_path=file_path, filename=document.file.filename, mime_type=document.file.mime_type)

    async def get_stats(self, owner_id: UUID | None, period: StatsPeriod) -> DocumentStats:
        """Count live documents, optionally for one uploader and a recent period."""
        query: dict[str, Any] = {"deleted_at": None}
        if owner_id is not None:
            query["uploaded_by"] = owner_id
        since = period_start(period, now())
        if since is not None:
            query["created_at"] = {"$gte": since}

        counts = {document_type: 0 for document_type in DocumentType}
        async for row in await self._collection.aggregate(
            [{"$match": query}, {"$group": {"_id": "$document_type", "count": {"$sum": 1}}}]
        ):
            counts[DocumentType(row["_id"])] = int(row["count"])

        last_refs: dict[DocumentType, str] = {}
        for document_type in DocumentType:
            latest = await self._collection.find_one(
                {**query, "document_type": document_type}, sort=[("created_at", -1), ("reference_id", -1)]
            )
            last_refs[document_type] = str(latest["reference_id"]) if latest else ""

        monthly_rows = await (
            await self._collection.aggregate(
                [
                    {"$match": query},
                    {
                        "$group": {
                            "_id": {
                                "month": {"$dateToString": {"format": "%Y-%m", "date": "$created_at"}},
                                "document_type": "$document_type",
                            },
                            "count": {"$sum": 1},
                        }
                    },
                ]
            )
        ).to_list()

        return DocumentStats(
            total=sum(counts.values()),
            inbound_count=counts[DocumentType.INBOUND],
            outbound_count=counts[DocumentType.OUTBOUND],
            last_inbound_ref=last_refs[DocumentType.INBOUND],
            last_outbound_ref=last_refs[DocumentType.OUTBOUND],
            chart_data=build_monthly_chart(monthly_rows),
        )

    async def has_documents_by_user(self, user_id: UUID) -> bool:
        """Whether the user registered any document, archived ones included."""
        if await self._collection.count_documents({"uploaded_by": user_id}, limit=1) > 0:
            return True
        return await self._archive.count_documents({"uploaded_by": user_id}, limit=1) > 0

    async def archive_documents(self, document_type: DocumentType) -> int:
        """Move every document of a type, soft-deleted ones included, to the archive.

        Files and audit entries are kept. The archived reference numbers become
        free again. Returns the number of documents moved.
        """
        docs = await self._collection.find({"document_type": document_type}).to_list()
        if not docs:
            return 0

        archived_at = now()
        await self._archive.insert_many([{**doc, "archived_at": archived_at} for doc in docs])
        # Only what was copied is removed; documents created meanwhile stay
        result = await self._collection.delete_many({"_id": {"$in": [doc["_id"] for doc in docs]}})
        logger.info("documents_archived", document_type=document_type, count=result.deleted_count)
        return result.deleted_count

    async def purge_documents(self, document_type: DocumentType) -> int:
        """Permanently delete every document of a type with its files and audit trail."""
        documents = await Document.list_cursor(self._collection.find({"document_type": document_type}))
        if not documents:
            return 0

        document_ids = [document.id for document in documents]
        result = await self._collection.delete_many({"_id": {"$in": document_ids}})
        await self.core.services.audit.delete_for_documents(document_ids)
        for document in documents:
            if document.file is not None:
                await asyncio.to_thread(remove_document_file, self.core.config.uploads_path, document.file.storage_path)
        logger.info("documents_purged", document_type=document_type, count=result.deleted_count)
        return result.deleted_count
