"""
Document Service.

Orchestrates the document pipeline:
- upload: validate -> compress -> write blob -> insert metadata
- retrieve: look up metadata -> access check -> open blob -> gunzip stream
- toggles, delete, listing and orphan blob reconciliation
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from docvault.config import settings
from docvault.core.exceptions import NotFoundError, StorageError, ValidationError
from docvault.core.rbac import check_document_access
from docvault.db.mongo import parse_object_id, utcnow
from docvault.models.document import (
    DocumentCreate,
    DocumentMetadata,
    DocumentStatus,
    RetrievalMode,
    RetrievedDocument,
)
from docvault.models.user import UserRole
from docvault.services.compression import compress, decompress_stream
from docvault.services.storage_service import GridFSBlobStore

logger = logging.getLogger(__name__)

COLLECTION = "documents"
DEFAULT_LIST_LIMIT = 50
MAX_TOGGLE_ATTEMPTS = 3


class DocumentService:
    """
    Service for storing and serving documents.

    Metadata lives in the ``documents`` collection; bytes live in the blob
    store, gzip-compressed.
    """

    def __init__(self, db: Database, blob_store: GridFSBlobStore):
        self.db = db
        self.collection = db[COLLECTION]
        self.blob_store = blob_store

    def _validate_upload(self, data: bytes, document_in: DocumentCreate) -> None:
        if not document_in.title or not document_in.title.strip():
            raise ValidationError("Title is required")

        if document_in.mime_type != settings.ALLOWED_MIME_TYPE:
            raise ValidationError("Only PDF files are allowed")

        if not data:
            raise ValidationError("Empty file not allowed")

        if len(data) > settings.MAX_UPLOAD_SIZE:
            limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
            raise ValidationError(f"File size exceeds {limit_mb}MB limit")

    def upload(self, data: bytes, document_in: DocumentCreate) -> DocumentMetadata:
        """
        Store a new document.

        The blob is fully written before the metadata record is inserted, so
        a failed blob write never leaves a metadata record behind.

        Args:
            data: Original file bytes.
            document_in: Uploader-supplied metadata.

        Returns:
            DocumentMetadata: The created record.

        Raises:
            ValidationError: On a bad title, MIME type or size.
            StorageError: If the blob write or metadata insert fails.
        """
        self._validate_upload(data, document_in)

        compressed = compress(data)
        blob_id = self.blob_store.upload(
            document_in.file_name,
            compressed,
            metadata={
                "contentType": document_in.mime_type,
                "uploadedBy": document_in.uploaded_by,
                "title": document_in.title,
                "isCompressed": True,
                "originalSize": len(data),
            },
        )

        now = utcnow()
        record: Dict[str, Any] = {
            "title": document_in.title.strip(),
            "description": document_in.description or "",
            "category": document_in.category or settings.DEFAULT_CATEGORY,
            "fileName": document_in.file_name,
            "mimeType": document_in.mime_type,
            "fileSize": len(data),
            "blobRef": blob_id,
            "status": DocumentStatus.ENABLED.value,
            "downloadEnabled": True,
            "uploadedBy": document_in.uploaded_by,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = self.collection.insert_one(record)
        except PyMongoError as e:
            logger.error(f"Metadata insert failed for blob {blob_id}: {e}")
            self._discard_blob(blob_id)
            raise StorageError(f"Failed to save document metadata: {e}")

        record["_id"] = result.inserted_id
        logger.info(
            f"Uploaded document {result.inserted_id} ({document_in.file_name}, "
            f"{len(data)} -> {len(compressed)} bytes) by {document_in.uploaded_by}"
        )
        return DocumentMetadata.from_mongo(record)

    def _discard_blob(self, blob_id: ObjectId) -> None:
        """Best-effort blob removal; failures are only logged."""
        try:
            self.blob_store.delete(blob_id)
        except (NotFoundError, StorageError) as e:
            logger.error(f"Failed to delete blob {blob_id}: {e}")

    def get(self, document_id: str) -> DocumentMetadata:
        """
        Get a document's metadata.

        Raises:
            NotFoundError: If the ID is unknown or malformed.
            StorageError: If the metadata lookup fails.
        """
        doc = self._find(document_id)
        if doc is None:
            raise NotFoundError("Document not found")
        return DocumentMetadata.from_mongo(doc)

    def _find(self, document_id: str) -> Optional[Dict[str, Any]]:
        oid = parse_object_id(document_id)
        if oid is None:
            return None
        try:
            return self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Metadata lookup failed for document {document_id}: {e}")
            raise StorageError(f"Failed to read document metadata: {e}")

    def retrieve(
        self,
        document_id: str,
        requester_role: UserRole,
        mode: RetrievalMode = RetrievalMode.DOWNLOAD,
    ) -> RetrievedDocument:
        """
        Open a document for reading.

        The blob is opened before returning so a missing blob is reported
        up front; the bytes themselves are read lazily as the stream is
        consumed.

        Raises:
            NotFoundError: If the metadata or the blob is missing.
            ForbiddenError: If the requester may not read it in this mode.
        """
        document = self.get(document_id)
        check_document_access(requester_role, document, mode)

        blob = self.blob_store.open_download_stream(ObjectId(document.blob_ref))
        stream = blob.chunks
        if blob.metadata.get("isCompressed"):
            stream = decompress_stream(stream)

        return RetrievedDocument(
            stream=stream,
            filename=blob.filename or document.file_name,
            content_type=blob.metadata.get("contentType") or document.mime_type,
            document=document,
        )

    def _flip(self, document_id: str, field: str, first: Any, second: Any) -> DocumentMetadata:
        """
        Atomically flip a two-valued field.

        Each attempt is a conditional update on the current value, so two
        concurrent flips never both apply to the same state.
        """
        oid = parse_object_id(document_id)
        if oid is None:
            raise NotFoundError("Document not found")

        for _ in range(MAX_TOGGLE_ATTEMPTS):
            for current, target in ((first, second), (second, first)):
                doc = self.collection.find_one_and_update(
                    {"_id": oid, field: current},
                    {"$set": {field: target, "updatedAt": utcnow()}},
                    return_document=ReturnDocument.AFTER,
                )
                if doc is not None:
                    logger.info(f"Document {document_id} {field} set to {target}")
                    return DocumentMetadata.from_mongo(doc)

            if self.collection.find_one({"_id": oid}, {"_id": 1}) is None:
                raise NotFoundError("Document not found")

        raise StorageError(f"Could not toggle {field} for document {document_id}")

    def toggle_status(self, document_id: str) -> DocumentMetadata:
        """Flip a document between enabled and disabled."""
        return self._flip(
            document_id,
            "status",
            DocumentStatus.ENABLED.value,
            DocumentStatus.DISABLED.value,
        )

    def toggle_download_enabled(self, document_id: str) -> DocumentMetadata:
        """Flip whether non-admins may download a document."""
        return self._flip(document_id, "downloadEnabled", True, False)

    def delete(self, document_id: str) -> bool:
        """
        Delete a document and its blob.

        Blob deletion failures are logged and do not stop the metadata
        deletion.

        Returns:
            bool: False if the document does not exist.

        Raises:
            StorageError: If the metadata lookup or delete fails.
        """
        doc = self._find(document_id)
        if doc is None:
            return False

        self._discard_blob(doc["blobRef"])

        try:
            result = self.collection.delete_one({"_id": doc["_id"]})
        except PyMongoError as e:
            logger.error(f"Metadata delete failed for document {document_id}: {e}")
            raise StorageError(f"Failed to delete document: {e}")
        logger.info(f"Deleted document {document_id}")
        return result.deleted_count == 1

    def list_documents(
        self,
        status: Optional[DocumentStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
        skip: int = 0,
    ) -> List[DocumentMetadata]:
        """List documents newest first, optionally filtered by status."""
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = DocumentStatus(status).value

        try:
            docs = list(
                self.collection.find(query)
                .sort([("createdAt", -1), ("_id", -1)])
                .skip(skip)
                .limit(limit)
            )
        except PyMongoError as e:
            logger.error(f"Document listing failed: {e}")
            raise StorageError(f"Failed to list documents: {e}")
        return [DocumentMetadata.from_mongo(doc) for doc in docs]

    def count_documents(self, status: Optional[DocumentStatus] = None) -> int:
        """Count documents, optionally filtered by status."""
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = DocumentStatus(status).value
        try:
            return self.collection.count_documents(query)
        except PyMongoError as e:
            logger.error(f"Document count failed: {e}")
            raise StorageError(f"Failed to count documents: {e}")

    def reconcile_orphan_blobs(self, grace: Optional[timedelta] = None) -> int:
        """
        Delete blobs that no metadata record references.

        Blobs younger than ``grace`` are skipped because their upload may
        still be waiting for its metadata insert.

        Returns:
            int: Number of blobs deleted.
        """
        if grace is None:
            grace = timedelta(minutes=settings.ORPHAN_BLOB_GRACE_MINUTES)

        cutoff = utcnow() - grace
        referenced = set(self.collection.distinct("blobRef"))
        orphans = [
            blob_id
            for blob_id in self.blob_store.list_blob_ids(uploaded_before=cutoff)
            if blob_id not in referenced
        ]

        deleted = 0
        for blob_id in orphans:
            try:
                self.blob_store.delete(blob_id)
                deleted += 1
            except NotFoundError:
                continue

        if deleted:
            logger.warning(f"Removed {deleted} orphaned blobs")
        return deleted
