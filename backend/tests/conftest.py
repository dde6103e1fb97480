"""
Pytest fixtures for backend tests.

Provides an in-memory MongoDB (mongomock), an in-memory blob store, a test
client wired to both, and authenticated users.
"""

from datetime import datetime
from typing import Any, Dict, Generator, List, Optional

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from docvault.api.deps import get_blob_store
from docvault.core.exceptions import NotFoundError, StorageError
from docvault.core.rate_limiter import limiter
from docvault.core.security import create_access_token
from docvault.db.mongo import get_db, utcnow
from docvault.main import app
from docvault.models.document import DocumentCreate, DocumentMetadata
from docvault.models.user import IdentityProfile, UserRecord, UserRole
from docvault.services.document_service import DocumentService
from docvault.services.storage_service import StoredBlob
from docvault.services.user_service import UserService

PDF_BYTES = b"%PDF-1.4\n" + b"fake pdf content with some repetition " * 40 + b"\n%%EOF"


class InMemoryBlobStore:
    """Blob store double keeping bytes in a dict and serving them in small chunks."""

    def __init__(self, chunk_size: int = 64):
        self.chunk_size = chunk_size
        self.blobs: Dict[ObjectId, Dict[str, Any]] = {}
        self.fail_uploads = False
        self.fail_deletes = False

    def upload(self, filename: str, data: bytes, metadata: Optional[Dict[str, Any]] = None) -> ObjectId:
        if self.fail_uploads:
            raise StorageError("Failed to write file: store unavailable")
        blob_id = ObjectId()
        self.blobs[blob_id] = {
            "filename": filename,
            "data": data,
            "metadata": dict(metadata or {}),
            "uploadDate": utcnow(),
        }
        return blob_id

    def open_download_stream(self, blob_id: ObjectId) -> StoredBlob:
        blob = self.blobs.get(blob_id)
        if blob is None:
            raise NotFoundError("File not found")
        data = blob["data"]
        chunks = [data[i:i + self.chunk_size] for i in range(0, len(data), self.chunk_size)]
        return StoredBlob(
            blob_id=blob_id,
            filename=blob["filename"],
            metadata=blob["metadata"],
            length=len(data),
            chunks=iter(chunks),
        )

    def delete(self, blob_id: ObjectId) -> None:
        if self.fail_deletes:
            raise StorageError(f"Failed to delete blob {blob_id}: store unavailable")
        if blob_id not in self.blobs:
            raise NotFoundError(f"Blob {blob_id} not found")
        del self.blobs[blob_id]

    def list_blob_ids(self, uploaded_before: Optional[datetime] = None) -> List[ObjectId]:
        return [
            blob_id
            for blob_id, blob in self.blobs.items()
            if uploaded_before is None or blob["uploadDate"] < uploaded_before
        ]


@pytest.fixture(scope="function")
def mongo_db():
    """
    Create a fresh in-memory database for each test.

    Returns:
        Database: mongomock database handle.
    """
    return mongomock.MongoClient()["docvault_test"]


@pytest.fixture(scope="function")
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture(scope="function")
def document_service(mongo_db, blob_store) -> DocumentService:
    return DocumentService(mongo_db, blob_store)


@pytest.fixture(scope="function")
def user_service(mongo_db) -> UserService:
    return UserService(mongo_db)


@pytest.fixture(scope="function")
def client(mongo_db, blob_store) -> Generator[TestClient, None, None]:
    """
    Create a test client with database and blob store overrides.

    Yields:
        TestClient: FastAPI test client.
    """
    app.dependency_overrides[get_db] = lambda: mongo_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def regular_user(user_service: UserService) -> UserRecord:
    """Create a user with the default role."""
    return user_service.sync_user(
        IdentityProfile(external_id="user_reader", email="reader@example.com", first_name="Rea")
    )


@pytest.fixture(scope="function")
def admin_user(user_service: UserService, mongo_db) -> UserRecord:
    """Create a user and promote them to admin."""
    user_service.sync_user(
        IdentityProfile(external_id="user_admin", email="admin@example.com", first_name="Ada")
    )
    mongo_db["users"].update_one(
        {"externalId": "user_admin"},
        {"$set": {"role": UserRole.ADMIN.value}},
    )
    return user_service.get_user("user_admin")


def _headers_for(external_id: str, email: str) -> dict:
    token = create_access_token(subject=external_id, claims={"email": email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def auth_headers(regular_user: UserRecord) -> dict:
    """Authorization headers for the regular user."""
    return _headers_for(regular_user.external_id, regular_user.email)


@pytest.fixture(scope="function")
def admin_headers(admin_user: UserRecord) -> dict:
    """Authorization headers for the admin user."""
    return _headers_for(admin_user.external_id, admin_user.email)


@pytest.fixture(scope="function")
def make_document(document_service: DocumentService):
    """Factory storing a PDF through the document service."""

    def _make(
        title: str = "Lecture Notes",
        file_name: str = "notes.pdf",
        data: bytes = PDF_BYTES,
        category: str = "Other",
    ) -> DocumentMetadata:
        return document_service.upload(
            data,
            DocumentCreate(
                title=title,
                category=category,
                file_name=file_name,
                mime_type="application/pdf",
                uploaded_by="user_admin",
            ),
        )

    return _make
