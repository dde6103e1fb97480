"""
Document metadata model.

Stores the display fields and access flags for an uploaded PDF. The file
bytes live in the GridFS bucket and are referenced through ``blob_ref``.
"""

import enum
from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class DocumentStatus(str, enum.Enum):
    """Visibility of a document to non-admin readers."""

    ENABLED = "enabled"
    DISABLED = "disabled"


class RetrievalMode(str, enum.Enum):
    """How the bytes are handed to the reader."""

    VIEW = "view"
    DOWNLOAD = "download"


class DocumentCreate(BaseModel):
    """Fields supplied by the uploader alongside the file bytes."""

    title: str
    description: str = ""
    category: str = "Other"
    file_name: str
    mime_type: str
    uploaded_by: str


class DocumentMetadata(BaseModel):
    """
    Metadata record for a stored document.

    Attributes:
        id: Record ID (ObjectId hex string).
        title: Display title.
        description: Free-text description.
        category: Category name.
        file_name: Original filename.
        mime_type: MIME type of the original file.
        file_size: Original size in bytes, before compression.
        blob_ref: GridFS file ID holding the compressed bytes.
        status: Visibility to non-admin readers.
        download_enabled: Whether non-admins may download raw bytes.
        uploaded_by: External ID of the uploading admin.
    """

    id: str
    title: str
    description: str = ""
    category: str = "Other"
    file_name: str
    mime_type: str
    file_size: int
    blob_ref: str
    status: DocumentStatus
    download_enabled: bool
    uploaded_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @property
    def is_enabled(self) -> bool:
        return self.status == DocumentStatus.ENABLED

    @classmethod
    def from_mongo(cls, doc: Dict[str, Any]) -> "DocumentMetadata":
        """Build a record from a raw ``documents`` collection entry."""
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        data["blobRef"] = str(data["blobRef"])
        return cls.model_validate(data)

    def __repr__(self) -> str:
        return f"<DocumentMetadata(id={self.id}, file_name={self.file_name})>"


class RetrievedDocument:
    """A readable document: lazy byte stream plus response hints."""

    def __init__(self, stream, filename: str, content_type: str, document: DocumentMetadata):
        self.stream = stream
        self.filename = filename
        self.content_type = content_type
        self.document = document
