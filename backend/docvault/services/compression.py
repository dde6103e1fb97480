"""
Compression codec for stored document bytes.

Uploads are gzip-compressed as one buffer; downloads are decompressed as a
streaming transform over the chunks read from the blob store.
"""

import gzip
import zlib
from typing import Iterable, Iterator

from docvault.core.exceptions import StorageError

# zlib window bits that select the gzip container format
GZIP_WBITS = 16 + zlib.MAX_WBITS


def compress(data: bytes) -> bytes:
    """Compress a whole buffer."""
    return gzip.compress(data)


def decompress(data: bytes) -> bytes:
    """Decompress a whole buffer produced by compress()."""
    return b"".join(decompress_stream([data]))


def decompress_stream(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """
    Decompress an iterable of compressed chunks lazily.

    Args:
        chunks: Compressed byte chunks in order.

    Yields:
        bytes: Decompressed data as it becomes available.

    Raises:
        StorageError: If the compressed data is corrupt or truncated.
    """
    decompressor = zlib.decompressobj(GZIP_WBITS)
    try:
        for chunk in chunks:
            data = decompressor.decompress(chunk)
            if data:
                yield data
        tail = decompressor.flush()
    except zlib.error as e:
        raise StorageError(f"Corrupt compressed data: {e}")

    if tail:
        yield tail
    if not decompressor.eof:
        raise StorageError("Compressed data is truncated")
