"""
Unit tests for the document service.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from docvault.config import settings
from docvault.core.exceptions import ForbiddenError, NotFoundError, StorageError, ValidationError
from docvault.models.document import DocumentCreate, DocumentStatus, RetrievalMode
from docvault.models.user import UserRole
from docvault.services.compression import decompress

PDF_BYTES = b"%PDF-1.4\n" + b"fake pdf content with some repetition " * 40 + b"\n%%EOF"


def _create(title="Notes", mime_type="application/pdf", file_name="notes.pdf") -> DocumentCreate:
    return DocumentCreate(
        title=title,
        file_name=file_name,
        mime_type=mime_type,
        uploaded_by="user_admin",
    )


class TestUpload:
    """Tests for DocumentService.upload."""

    def test_upload_stores_compressed_blob_and_metadata(self, document_service, blob_store, mongo_db):
        document = document_service.upload(PDF_BYTES, _create())

        assert document.status == DocumentStatus.ENABLED
        assert document.download_enabled is True
        assert document.file_size == len(PDF_BYTES)
        assert document.category == "Other"

        blob = blob_store.blobs[ObjectId(document.blob_ref)]
        assert blob["metadata"]["isCompressed"] is True
        assert blob["metadata"]["originalSize"] == len(PDF_BYTES)
        assert blob["metadata"]["contentType"] == "application/pdf"
        assert len(blob["data"]) < len(PDF_BYTES)
        assert decompress(blob["data"]) == PDF_BYTES

        stored = mongo_db["documents"].find_one({"_id": ObjectId(document.id)})
        assert stored["downloadEnabled"] is True
        assert stored["blobRef"] == ObjectId(document.blob_ref)

    @pytest.mark.parametrize(
        "data,document_in,message",
        [
            (PDF_BYTES, _create(title="  "), "Title is required"),
            (PDF_BYTES, _create(mime_type="image/png"), "Only PDF files are allowed"),
            (b"", _create(), "Empty file not allowed"),
        ],
    )
    def test_upload_validation(self, document_service, blob_store, data, document_in, message):
        with pytest.raises(ValidationError) as exc_info:
            document_service.upload(data, document_in)

        assert exc_info.value.detail == message
        assert blob_store.blobs == {}

    def test_upload_over_size_limit(self, document_service, blob_store):
        with patch.object(settings, "MAX_UPLOAD_SIZE", 10):
            with pytest.raises(ValidationError):
                document_service.upload(PDF_BYTES, _create())
        assert blob_store.blobs == {}

    def test_blob_failure_leaves_no_metadata(self, document_service, blob_store, mongo_db):
        blob_store.fail_uploads = True

        with pytest.raises(StorageError):
            document_service.upload(PDF_BYTES, _create())

        assert mongo_db["documents"].count_documents({}) == 0

    def test_metadata_failure_removes_blob(self, document_service, blob_store):
        with patch.object(
            document_service.collection, "insert_one", side_effect=PyMongoError("write failed")
        ):
            with pytest.raises(StorageError):
                document_service.upload(PDF_BYTES, _create())

        assert blob_store.blobs == {}


class TestRetrieve:
    """Tests for DocumentService.retrieve."""

    def test_round_trip_returns_original_bytes(self, document_service, make_document):
        document = make_document(file_name="Data Structures.pdf")

        retrieved = document_service.retrieve(document.id, UserRole.USER)

        assert b"".join(retrieved.stream) == PDF_BYTES
        assert retrieved.filename == "Data Structures.pdf"
        assert retrieved.content_type == "application/pdf"

    def test_unknown_or_malformed_id(self, document_service):
        with pytest.raises(NotFoundError):
            document_service.retrieve(str(ObjectId()), UserRole.ADMIN)
        with pytest.raises(NotFoundError):
            document_service.retrieve("not-an-id", UserRole.ADMIN)

    def test_missing_blob(self, document_service, blob_store, make_document):
        document = make_document()
        blob_store.blobs.clear()

        with pytest.raises(NotFoundError):
            document_service.retrieve(document.id, UserRole.ADMIN)

    def test_disabled_document_hidden_from_users(self, document_service, make_document):
        document = make_document()
        document_service.toggle_status(document.id)

        with pytest.raises(ForbiddenError):
            document_service.retrieve(document.id, UserRole.USER, RetrievalMode.VIEW)

        retrieved = document_service.retrieve(document.id, UserRole.ADMIN)
        assert b"".join(retrieved.stream) == PDF_BYTES

    def test_view_allowed_when_downloads_disabled(self, document_service, make_document):
        document = make_document()
        document_service.toggle_download_enabled(document.id)

        with pytest.raises(ForbiddenError):
            document_service.retrieve(document.id, UserRole.USER, RetrievalMode.DOWNLOAD)

        retrieved = document_service.retrieve(document.id, UserRole.USER, RetrievalMode.VIEW)
        assert b"".join(retrieved.stream) == PDF_BYTES

    def test_uncompressed_legacy_blob_served_as_is(self, document_service, blob_store, make_document):
        document = make_document()
        blob = blob_store.blobs[ObjectId(document.blob_ref)]
        blob["data"] = PDF_BYTES
        blob["metadata"]["isCompressed"] = False

        retrieved = document_service.retrieve(document.id, UserRole.USER)

        assert b"".join(retrieved.stream) == PDF_BYTES


class TestToggles:
    """Tests for status and download toggles."""

    def test_toggle_status_flips_and_restores(self, document_service, make_document):
        document = make_document()

        disabled = document_service.toggle_status(document.id)
        enabled = document_service.toggle_status(document.id)

        assert disabled.status == DocumentStatus.DISABLED
        assert enabled.status == DocumentStatus.ENABLED

    def test_toggle_download_flips(self, document_service, make_document):
        document = make_document()

        assert document_service.toggle_download_enabled(document.id).download_enabled is False
        assert document_service.toggle_download_enabled(document.id).download_enabled is True

    def test_toggle_unknown_document(self, document_service):
        with pytest.raises(NotFoundError):
            document_service.toggle_status(str(ObjectId()))
        with pytest.raises(NotFoundError):
            document_service.toggle_download_enabled("bogus")


class TestDelete:
    """Tests for DocumentService.delete."""

    def test_delete_removes_metadata_and_blob(self, document_service, blob_store, mongo_db, make_document):
        document = make_document()

        assert document_service.delete(document.id) is True
        assert mongo_db["documents"].count_documents({}) == 0
        assert blob_store.blobs == {}

    def test_delete_unknown_returns_false(self, document_service):
        assert document_service.delete(str(ObjectId())) is False
        assert document_service.delete("bogus") is False

    def test_blob_delete_failure_still_deletes_metadata(self, document_service, blob_store, mongo_db, make_document):
        document = make_document()
        blob_store.fail_deletes = True

        assert document_service.delete(document.id) is True
        assert mongo_db["documents"].count_documents({}) == 0

    def test_missing_blob_still_deletes_metadata(self, document_service, blob_store, mongo_db, make_document):
        document = make_document()
        blob_store.blobs.clear()

        assert document_service.delete(document.id) is True
        assert mongo_db["documents"].count_documents({}) == 0


class TestListing:
    """Tests for list_documents and count_documents."""

    def test_newest_first_with_status_filter(self, document_service, make_document):
        first = make_document(title="First")
        second = make_document(title="Second")
        third = make_document(title="Third")
        document_service.toggle_status(second.id)

        all_docs = document_service.list_documents()
        enabled = document_service.list_documents(status=DocumentStatus.ENABLED)

        assert [d.id for d in all_docs] == [third.id, second.id, first.id]
        assert [d.id for d in enabled] == [third.id, first.id]
        assert document_service.count_documents() == 3
        assert document_service.count_documents(DocumentStatus.DISABLED) == 1

    def test_pagination(self, document_service, make_document):
        for i in range(5):
            make_document(title=f"Doc {i}")

        page = document_service.list_documents(limit=2, skip=4)

        assert len(page) == 1
        assert page[0].title == "Doc 0"


class TestDriverErrors:
    """Driver failures surface as StorageError."""

    @pytest.mark.parametrize("method", ["find_one", "delete_one"])
    def test_delete(self, document_service, make_document, method):
        document = make_document()
        with patch.object(
            document_service.collection, method, side_effect=PyMongoError("connection lost")
        ):
            with pytest.raises(StorageError):
                document_service.delete(document.id)

    def test_get(self, document_service, make_document):
        document = make_document()
        with patch.object(
            document_service.collection, "find_one", side_effect=PyMongoError("connection lost")
        ):
            with pytest.raises(StorageError):
                document_service.get(document.id)

    def test_list_and_count(self, document_service):
        with patch.object(
            document_service.collection, "find", side_effect=PyMongoError("connection lost")
        ):
            with pytest.raises(StorageError):
                document_service.list_documents()

        with patch.object(
            document_service.collection,
            "count_documents",
            side_effect=PyMongoError("connection lost"),
        ):
            with pytest.raises(StorageError):
                document_service.count_documents()


class TestReconcile:
    """Tests for orphan blob reconciliation."""

    def test_removes_only_unreferenced_blobs(self, document_service, blob_store, make_document):
        document = make_document()
        orphan_id = blob_store.upload("orphan.pdf", b"orphan")

        deleted = document_service.reconcile_orphan_blobs(grace=timedelta(seconds=-1))

        assert deleted == 1
        assert orphan_id not in blob_store.blobs
        assert ObjectId(document.blob_ref) in blob_store.blobs

    def test_recent_orphans_are_kept(self, document_service, blob_store):
        orphan_id = blob_store.upload("in-flight.pdf", b"orphan")

        assert document_service.reconcile_orphan_blobs(grace=timedelta(minutes=30)) == 0
        assert orphan_id in blob_store.blobs
