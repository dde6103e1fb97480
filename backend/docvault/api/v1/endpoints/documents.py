"""
Document endpoints.

Listing and reading are open to every signed-in user, subject to the
document read rules; uploads and admin actions require the admin role.
"""

import logging
from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from docvault.api.deps import (
    get_current_admin,
    get_current_role,
    get_document_service,
    get_user_service,
)
from docvault.config import settings
from docvault.core.exceptions import DocVaultError, NotFoundError
from docvault.core.metrics import track_document_operation, track_document_read, track_upload
from docvault.core.rate_limiter import RATE_LIMITS, limiter
from docvault.core.rbac import effective_status_filter
from docvault.models.document import DocumentCreate, DocumentStatus, RetrievalMode
from docvault.models.user import UserRecord, UserRole
from docvault.schemas.document import (
    DocumentListResponse,
    DocumentResponse,
    DownloadToggleResponse,
    ReconcileResponse,
)
from docvault.services.document_service import DEFAULT_LIST_LIMIT, DocumentService
from docvault.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()


def _file_response(
    service: DocumentService,
    document_id: str,
    role: UserRole,
    mode: RetrievalMode,
) -> StreamingResponse:
    try:
        retrieved = service.retrieve(document_id, role, mode)
    except DocVaultError:
        track_document_read(mode.value, "rejected")
        raise

    track_document_read(mode.value, "ok")
    disposition = "attachment" if mode == RetrievalMode.DOWNLOAD else "inline"
    return StreamingResponse(
        retrieved.stream,
        media_type=retrieved.content_type,
        headers={
            "Content-Disposition": f'{disposition}; filename="{quote(retrieved.filename)}"',
        },
    )


@router.get("", response_model=DocumentListResponse, summary="List documents")
@limiter.limit(RATE_LIMITS["default"])
def list_documents(
    request: Request,
    role: Annotated[UserRole, Depends(get_current_role)],
    service: Annotated[DocumentService, Depends(get_document_service)],
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=200),
    skip: int = Query(0, ge=0),
    status_filter: Optional[DocumentStatus] = Query(None, alias="status"),
):
    """
    List documents newest first.

    Non-admins only ever see enabled documents, whatever status they ask for.
    """
    effective = effective_status_filter(role, status_filter)
    documents = service.list_documents(status=effective, limit=limit, skip=skip)
    total = service.count_documents(status=effective)

    return DocumentListResponse(
        documents=documents,
        total=total,
        has_more=skip + len(documents) < total,
    )


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
)
@limiter.limit(RATE_LIMITS["upload"])
def upload_document(
    request: Request,
    file: Annotated[UploadFile, File(description="PDF file (max 50MB)")],
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[DocumentService, Depends(get_document_service)],
    title: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    category: Annotated[str, Form()] = "",
):
    """Upload a PDF. The bytes are gzip-compressed before they are stored."""
    # One byte past the limit is enough to reject an oversized file
    data = file.file.read(settings.MAX_UPLOAD_SIZE + 1)
    content_type = file.content_type or "application/octet-stream"

    document_in = DocumentCreate(
        title=title,
        description=description,
        category=category or "Other",
        file_name=file.filename or "document.pdf",
        mime_type=content_type,
        uploaded_by=admin.external_id,
    )

    try:
        document = service.upload(data, document_in)
    except DocVaultError:
        track_upload("failed", content_type, len(data))
        raise

    track_upload("stored", content_type, len(data))
    return DocumentResponse(document=document)


@router.post(
    "/maintenance/reconcile",
    response_model=ReconcileResponse,
    summary="Remove orphaned blobs",
)
@limiter.limit(RATE_LIMITS["default"])
def reconcile_orphan_blobs(
    request: Request,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[DocumentService, Depends(get_document_service)],
):
    """Delete stored blobs that no document references."""
    deleted = service.reconcile_orphan_blobs()
    track_document_operation("reconcile")
    logger.info(f"Admin {admin.external_id} reconciled blobs, {deleted} removed")
    return ReconcileResponse(deleted=deleted)


@router.get("/{document_id}", summary="Download a document")
@limiter.limit(RATE_LIMITS["download"])
def download_document(
    request: Request,
    document_id: str,
    role: Annotated[UserRole, Depends(get_current_role)],
    service: Annotated[DocumentService, Depends(get_document_service)],
):
    return _file_response(service, document_id, role, RetrievalMode.DOWNLOAD)


@router.get("/{document_id}/view", summary="View a document inline")
@limiter.limit(RATE_LIMITS["download"])
def view_document(
    request: Request,
    document_id: str,
    role: Annotated[UserRole, Depends(get_current_role)],
    service: Annotated[DocumentService, Depends(get_document_service)],
):
    """Stream the document for in-browser viewing. Allowed even when downloads are off."""
    return _file_response(service, document_id, role, RetrievalMode.VIEW)


@router.patch(
    "/{document_id}/toggle",
    response_model=DocumentResponse,
    summary="Enable or disable a document",
)
@limiter.limit(RATE_LIMITS["default"])
def toggle_document_status(
    request: Request,
    document_id: str,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[DocumentService, Depends(get_document_service)],
):
    document = service.toggle_status(document_id)
    track_document_operation("toggle_status")
    return DocumentResponse(document=document)


@router.patch(
    "/{document_id}/toggle-download",
    response_model=DownloadToggleResponse,
    summary="Allow or block downloads of a document",
)
@limiter.limit(RATE_LIMITS["default"])
def toggle_document_download(
    request: Request,
    document_id: str,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[DocumentService, Depends(get_document_service)],
):
    document = service.toggle_download_enabled(document_id)
    track_document_operation("toggle_download")
    return DownloadToggleResponse(download_enabled=document.download_enabled)


@router.delete("/{document_id}", summary="Delete a document")
@limiter.limit(RATE_LIMITS["default"])
def delete_document(
    request: Request,
    document_id: str,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[DocumentService, Depends(get_document_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Delete a document, its blob, and every user reference to it."""
    if not service.delete(document_id):
        raise NotFoundError("Document not found")

    user_service.forget_document(document_id)
    track_document_operation("delete")
    logger.info(f"Admin {admin.external_id} deleted document {document_id}")
    return {"success": True}
