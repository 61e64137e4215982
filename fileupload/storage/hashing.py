"""
Storage - Content Addressing

SHA-256 helpers used to name stored files after their content.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, Tuple

from fileupload.errors import SourceReadFailure

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MB


class AsyncReadable(Protocol):
    """Async, rewindable byte source (starlette's UploadFile satisfies it)."""

    async def read(self, size: int = -1) -> bytes: ...

    async def seek(self, offset: int) -> None: ...


def sha256_bytes(data: bytes) -> str:
    """Compute SHA-256 hash of in-memory bytes."""
    return hashlib.sha256(data).hexdigest()


async def sha256_reader(source: AsyncReadable, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Tuple[str, int]:
    """
    Hash a stream from its current position to EOF.

    Returns:
        (hex digest, number of bytes read)

    Raises:
        SourceReadFailure: If the source cannot be read
    """
    sha256 = hashlib.sha256()
    size = 0
    try:
        while chunk := await source.read(chunk_size):
            sha256.update(chunk)
            size += len(chunk)
    except (OSError, ValueError) as e:
        raise SourceReadFailure(f"Failed to read upload stream: {e}") from e
    return sha256.hexdigest(), size


async def rewind(source: AsyncReadable) -> None:
    """Seek back to the start so the stream can be copied after hashing."""
    try:
        await source.seek(0)
    except (OSError, ValueError) as e:
        raise SourceReadFailure(f"Upload stream cannot be rewound: {e}") from e
