from datetime import date
from typing import Annotated

from fastapi import APIRouter, Form, Query, UploadFile
from fastapi.responses import FileResponse

from alsader.core.modules.audit.models import AuditEntry
from alsader.core.modules.document.models import DocumentFields, DocumentView, UploadedFile
from alsader.core.modules.reference.models import DocumentType
from alsader.core.pagination import PaginationResult
from alsader.web.deps import AppDep, AuthTokenDep
from alsader.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["documents"])


@router.post(
    "/documents",
    summary="Register document",
    description=(
        "Register an inbound or outbound document as multipart form data. "
        "Leave `reference_id` empty to take the next number of the type's sequence, "
        "or give a number (typically one reserved earlier) to use it instead. "
        "A reservation on that number is consumed."
    ),
    operation_id="createDocument",
    status_code=201,
    responses={
        201: {"description": "Document registered"},
        400: {"model": ErrorResponse, "description": "Invalid fields, file or reference number"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        409: {"model": ErrorResponse, "description": "Reference number already used"},
    },
)
async def create_document(
    app: AppDep,
    auth_token: AuthTokenDep,
    document_type: Annotated[DocumentType, Form(description="Document type")],
    title: Annotated[str, Form(min_length=1, max_length=255)],
    subject: Annotated[str, Form(min_length=1)],
    sender: Annotated[str, Form(min_length=1, max_length=255)],
    document_date: Annotated[date, Form(description="Date written on the document (YYYY-MM-DD)")],
    reference_id: Annotated[str | None, Form(description="Manual reference number, empty for automatic")] = None,
    file: UploadFile | None = None,
) -> DocumentView:
    fields = DocumentFields(title=title, subject=subject, sender=sender, document_date=document_date)
    manual_reference_id = reference_id if reference_id and reference_id.strip() else None

    upload = None
    if file is not None:
        upload = UploadedFile(
            filename=file.filename or "document",
            mime_type=file.content_type or "application/octet-stream",
            content=await file.read(),
        )
    return await app.create_document(auth_token, document_type, fields, manual_reference_id, upload)


@router.get(
    "/documents",
    summary="List documents",
    description="Get live documents newest first. Admins see every document, users only their own.",
    operation_id="listDocuments",
    responses={
        200: {"description": "Paginated list of documents"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_documents(
    app: AppDep,
    auth_token: AuthTokenDep,
    document_type: Annotated[DocumentType | None, Query(alias="type", description="Filter by document type")] = None,
    search: Annotated[str | None, Query(description="Text in title, subject or sender, or a reference number")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum items to return")] = 20,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
) -> PaginationResult[DocumentView]:
    return await app.get_documents(auth_token, document_type, search, limit, offset)


@router.get(
    "/documents/{document_type}/{reference_id}",
    summary="Get document",
    description="Get a single document by type and reference number.",
    operation_id="getDocument",
    responses={
        200: {"description": "Document details"},
        400: {"model": ErrorResponse, "description": "Malformed reference number"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Document belongs to another user"},
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def get_document(
    document_type: DocumentType, reference_id: str, app: AppDep, auth_token: AuthTokenDep
) -> DocumentView:
    return await app.get_document(auth_token, document_type, reference_id)


@router.get(
    "/documents/{document_type}/{reference_id}/file",
    summary="Download document file",
    description="Download the file attached to a document. The download is recorded in the audit log.",
    operation_id="downloadDocumentFile",
    response_model=None,
    responses={
        200: {"description": "Document file"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Document belongs to another user"},
        404: {"model": ErrorResponse, "description": "Document or file not found"},
    },
)
async def download_document_file(
    document_type: DocumentType, reference_id: str, app: AppDep, auth_token: AuthTokenDep
) -> FileResponse:
    file_info = await app.get_document_file_info(auth_token, document_type, reference_id)
    return FileResponse(path=file_info.file_path, media_type=file_info.mime_type, filename=file_info.filename)


@router.delete(
    "/documents/{document_type}/{reference_id}",
    summary="Delete document",
    description="Soft-delete a document. Its reference number is never reused.",
    operation_id="deleteDocument",
    status_code=204,
    responses={
        204: {"description": "Document deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Document belongs to another user"},
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def delete_document(document_type: DocumentType, reference_id: str, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_document(auth_token, document_type, reference_id)


@router.get(
    "/documents/{document_type}/{reference_id}/audit",
    summary="Document audit trail",
    description="Who created, downloaded and deleted a document, oldest first. Only accessible by admin users.",
    operation_id="getDocumentAudit",
    responses={
        200: {"description": "Audit entries"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def get_document_audit(
    document_type: DocumentType, reference_id: str, app: AppDep, auth_token: AuthTokenDep
) -> list[AuditEntry]:
    return await app.get_document_audit(auth_token, document_type, reference_id)
