"""
Document schemas for request/response validation.
"""

from typing import List

from pydantic import Field

from docvault.models.document import DocumentMetadata
from docvault.schemas.base import CamelModel


class DocumentListResponse(CamelModel):
    """Paginated document list response."""

    documents: List[DocumentMetadata]
    total: int = Field(..., description="Documents matching the filter")
    has_more: bool = Field(..., description="Whether more pages follow")


class DocumentResponse(CamelModel):
    """Response wrapping a single document."""

    success: bool = True
    document: DocumentMetadata


class DownloadToggleResponse(CamelModel):
    success: bool = True
    download_enabled: bool


class ReconcileResponse(CamelModel):
    """Result of an orphan blob sweep."""

    deleted: int = Field(..., description="Number of orphaned blobs removed")
