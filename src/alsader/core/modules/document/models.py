from datetime import date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from alsader.core.db import MongoModel
from alsader.core.modules.reference.models import DocumentType
from alsader.core.modules.reference.validators import format_reference
from alsader.utils import now


class FileMetadata(BaseModel):
    """Uploaded file attached to a document."""

    filename: str  # Original filename from user
    mime_type: str
    size: int  # File size in bytes
    content_hash: str  # sha512 hex digest, checked again on download
    storage_path: str  # Relative to uploads_path, e.g. "2025/05/3f2a...c1.pdf"


class Document(MongoModel):
    """Inbound or outbound correspondence registered under a reference number.

    Indexed on (document_type, reference_id) - unique, including soft-deleted documents.
    """

    document_type: DocumentType
    reference_id: int
    title: str
    subject: str
    sender: str
    document_date: date
    uploaded_by: UUID
    file: FileMetadata | None = None
    is_manual_reference: bool = False
    created_at: datetime = Field(default_factory=now)
    deleted_at: datetime | None = None  # Soft delete marker, the reference number stays taken

    @property
    def reference(self) -> str:
        return format_reference(self.document_type, self.reference_id)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_mongo(self) -> dict[str, Any]:
        data = super().to_mongo()
        data["document_date"] = self.document_date.isoformat()  # BSON has no date-only type
        return data


class DocumentFields(BaseModel):
    """User-supplied descriptive fields of a new document."""

    title: str = Field(..., min_length=1, max_length=255, description="Document title")
    subject: str = Field(..., min_length=1, description="Subject line")
    sender: str = Field(..., min_length=1, max_length=255, description="Sending (inbound) or receiving (outbound) party")
    document_date: date = Field(..., description="Date written on the document (YYYY-MM-DD)")


class UploadedFile(BaseModel):
    """Raw upload handed from the web layer to the document service."""

    filename: str
    mime_type: str
    content: bytes


class FileView(BaseModel):
    filename: str = Field(..., description="Original filename")
    mime_type: str = Field(..., description="MIME type")
    size: int = Field(..., description="File size in bytes")


class DocumentView(BaseModel):
    """Document (API representation). `id` is the reference number."""

    id: str = Field(..., description="Reference number, unique within the document type")
    reference: str = Field(..., description="Display form of the reference number, e.g. IN-007")
    document_type: DocumentType
    title: str
    subject: str
    sender: str
    document_date: date
    uploaded_by: str = Field(..., description="Username of the uploader")
    uploaded_by_name: str = Field(..., description="Full name of the uploader")
    file: FileView | None = None
    is_manual_reference: bool = Field(..., description="True when the number was typed in instead of generated")
    created_at: datetime
    deleted_at: datetime | None = None

    @classmethod
    def from_domain(cls, document: Document, username: str, full_name: str) -> "DocumentView":
        file_view = None
        if document.file is not None:
            file_view = FileView(filename=document.file.filename, mime_type=document.file.mime_type, size=document.file.size)
        return cls(
            id=str(document.reference_id),
            reference=document.reference,
            document_type=document.document_type,
            title=document.title,
            subject=document.subject,
            sender=document.sender,
            document_date=document.document_date,
            uploaded_by=username,
            uploaded_by_name=full_name,
            file=file_view,
            is_manual_reference=document.is_manual_reference,
            created_at=document.created_at,
            deleted_at=document.deleted_at,
        )


class DocumentFileInfo(BaseModel):
    """Information about a document file for download."""

    file_path: Path = Field(..., description="Absolute path to file on disk")
    filename: str = Field(..., description="Original filename")
    mime_type: str = Field(..., description="MIME type")


class StatsPeriod(StrEnum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class MonthlyCount(BaseModel):
    month: str = Field(..., description="Month as YYYY-MM")
    inbound: int = 0
    outbound: int = 0


class DocumentStats(BaseModel):
    """Document counters for the dashboard cards and chart."""

    total: int = Field(..., ge=0)
    inbound_count: int = Field(..., ge=0)
    outbound_count: int = Field(..., ge=0)
    last_inbound_ref: str = Field(..., description="Most recently registered inbound reference, empty if none")
    last_outbound_ref: str = Field(..., description="Most recently registered outbound reference, empty if none")
    chart_data: list[MonthlyCount]
