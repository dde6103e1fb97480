"""
Blob storage service for document bytes.

Wraps a GridFS bucket: files are split into chunks on write and streamed
back chunk by chunk on read. Driver failures surface as StorageError and
unknown blob IDs as NotFoundError.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from bson import ObjectId
from gridfs import GridFSBucket, GridIn, GridOut
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from docvault.core.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class StoredBlob:
    """An opened blob: file info plus a lazy chunk iterator."""

    def __init__(
        self,
        blob_id: ObjectId,
        filename: str,
        metadata: Dict[str, Any],
        length: int,
        chunks: Iterator[bytes],
    ):
        self.blob_id = blob_id
        self.filename = filename
        self.metadata = metadata
        self.length = length
        self.chunks = chunks


def _iter_chunks(grid_out: GridOut) -> Iterator[bytes]:
    """Yield the stored chunks of a GridOut and close it when exhausted."""
    try:
        while True:
            chunk = grid_out.readchunk()
            if not chunk:
                break
            yield chunk
    except PyMongoError as e:
        raise StorageError(f"Failed to read blob {grid_out._id}: {e}")
    finally:
        grid_out.close()


class GridFSBlobStore:
    """
    GridFS-backed blob store.

    Blob IDs are allocated when an upload stream is opened, so callers can
    reference a blob before its bytes are fully written.
    """

    def __init__(self, bucket: GridFSBucket) -> None:
        self.bucket = bucket

    def open_upload_stream(self, filename: str, metadata: Optional[Dict[str, Any]] = None) -> GridIn:
        """Open a writable handle for a new blob. Its ``_id`` is already set."""
        try:
            return self.bucket.open_upload_stream(filename, metadata=metadata)
        except PyMongoError as e:
            raise StorageError(f"Failed to open upload stream: {e}")

    def upload(self, filename: str, data: bytes, metadata: Optional[Dict[str, Any]] = None) -> ObjectId:
        """
        Write a complete buffer as a new blob.

        Args:
            filename: Name recorded on the blob.
            data: Bytes to store.
            metadata: Extra fields stored with the blob.

        Returns:
            ObjectId: The new blob ID.

        Raises:
            StorageError: If the write fails. Partially written chunks are
                removed.
        """
        grid_in = self.open_upload_stream(filename, metadata)
        try:
            grid_in.write(data)
            grid_in.close()
        except PyMongoError as e:
            logger.error(f"Blob write failed for {filename}: {e}")
            try:
                grid_in.abort()
            except PyMongoError as abort_error:
                logger.error(f"Failed to abort blob {grid_in._id}: {abort_error}")
            raise StorageError(f"Failed to write file: {e}")

        logger.info(f"Stored blob {grid_in._id} ({len(data)} bytes) for {filename}")
        return grid_in._id

    def open_download_stream(self, blob_id: ObjectId) -> StoredBlob:
        """
        Open a blob for reading.

        Raises:
            NotFoundError: If no blob has this ID.
            StorageError: If the store cannot be reached.
        """
        try:
            grid_out = self.bucket.open_download_stream(blob_id)
        except NoFile:
            raise NotFoundError("File not found")
        except PyMongoError as e:
            raise StorageError(f"Failed to open file: {e}")

        return StoredBlob(
            blob_id=blob_id,
            filename=grid_out.filename,
            metadata=grid_out.metadata or {},
            length=grid_out.length,
            chunks=_iter_chunks(grid_out),
        )

    def delete(self, blob_id: ObjectId) -> None:
        """
        Delete a blob and all of its chunks.

        Raises:
            NotFoundError: If no blob has this ID.
            StorageError: If the store cannot be reached.
        """
        try:
            self.bucket.delete(blob_id)
        except NoFile:
            raise NotFoundError(f"Blob {blob_id} not found")
        except PyMongoError as e:
            raise StorageError(f"Failed to delete blob {blob_id}: {e}")
        logger.info(f"Deleted blob {blob_id}")

    def list_blob_ids(self, uploaded_before: Optional[datetime] = None) -> List[ObjectId]:
        """List blob IDs, optionally only those uploaded before a cutoff."""
        query: Dict[str, Any] = {}
        if uploaded_before is not None:
            query["uploadDate"] = {"$lt": uploaded_before}
        try:
            return [grid_out._id for grid_out in self.bucket.find(query)]
        except PyMongoError as e:
            raise StorageError(f"Failed to list blobs: {e}")
