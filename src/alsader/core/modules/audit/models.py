from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import Field

from alsader.core.db import MongoModel
from alsader.utils import now


class AuditAction(StrEnum):
    CREATE = "create"
    DOWNLOAD = "download"
    DELETE = "delete"


class AuditEntry(MongoModel):
    """Who did what to a document and when.

    Indexed on (document_id, created_at).
    """

    document_id: UUID
    user_id: UUID
    action: AuditAction
    created_at: datetime = Field(default_factory=now)
