"""
Storage - Service

Content-addressed file storage on local disk.

Every stored file is named `<sha256 of its bytes><extension>` and placed
under `<storage directory>/<sub-directory>/`. Identical bytes with an
identical extension therefore always land on the same path: a second
upload of the same content finds the file already there and skips the
write.

Writes go to a temporary file next to the destination and are renamed
into place, so a failed copy never leaves a truncated file under the
content name.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import stat
import uuid
from pathlib import Path
from typing import AsyncIterator, Callable, Iterable, List, Optional, Tuple, Union

import aiofiles
import aiofiles.os
from starlette.datastructures import FormData, UploadFile

from fileupload.errors import (
    DestinationWriteFailure,
    FileUploadError,
    InvalidPayload,
    SourceReadFailure,
)
from fileupload.storage.hashing import (
    DEFAULT_CHUNK_SIZE,
    AsyncReadable,
    rewind,
    sha256_bytes,
    sha256_reader,
)
from fileupload.storage.models import (
    MultipartFieldNames,
    StorageDefaults,
    StoredFileRecord,
    UploadRequestParams,
)
from fileupload.storage.paths import (
    Placement,
    ensure_directory,
    file_extension,
    plan_placement,
)

logger = logging.getLogger(__name__)

IMAGE_BASE64_PATTERN = re.compile(r"^data:\s*image/(\w+);base64,(.*)$", re.ASCII | re.DOTALL)


def decode_image_base64(payload: Union[str, bytes]) -> Tuple[str, bytes]:
    """
    Split a `data:image/<type>;base64,<data>` URI into extension and bytes.

    Returns:
        (".<type>", decoded bytes)

    Raises:
        InvalidPayload: If the URI is not an image data URI or the data is not base64
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("ascii")
        except UnicodeDecodeError as e:
            raise InvalidPayload("Illegal image base64 value: not ASCII") from e

    match = IMAGE_BASE64_PATTERN.match(payload or "")
    if match is None:
        raise InvalidPayload("Illegal image base64 value")

    subtype, data = match.groups()
    data = data.strip()
    if not data:
        raise InvalidPayload("Illegal image base64 value: empty payload")

    try:
        content = base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise InvalidPayload(f"Illegal image base64 value: {e}") from e

    return f".{subtype}", content


def iterate_records(records: Iterable[StoredFileRecord], fn: Callable[[StoredFileRecord], None]) -> None:
    """Apply `fn` to every record in order."""
    for record in records:
        fn(record)


class StorageService:
    """
    Stores uploads under content-derived names.

    Args:
        defaults: Storage directory and URI prefix used when a request
            does not override them
        directory_mode: Permission bits for created directories
        chunk_size: Read size while hashing and copying streams
    """

    def __init__(
        self,
        defaults: StorageDefaults,
        directory_mode: int = 0o755,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.defaults = defaults
        self.directory_mode = directory_mode
        self.chunk_size = chunk_size

    # ===== Single items =====

    async def store_stream(
        self,
        source: AsyncReadable,
        filename: Optional[str],
        params: UploadRequestParams,
    ) -> StoredFileRecord:
        """
        Hash a rewindable stream, then copy it to its content address.

        The extension comes from `filename`; the stream is read twice
        (hash pass, copy pass) with a rewind in between.
        """
        digest, size = await sha256_reader(source, self.chunk_size)
        await rewind(source)

        extension = file_extension(filename)
        placement = await self._prepare(digest + extension, params)

        if await self._needs_write(placement, size):
            await self._commit(placement, self._iter_source(source))
            logger.info(f"Stored {filename or 'upload'} as {placement.relative_path} ({size} bytes)")

        return StoredFileRecord(
            size=size,
            name=digest + extension,
            hash=digest,
            extension=extension,
            absolute_path=str(placement.absolute_path),
            relative_path=placement.relative_path,
            public_path=placement.public_path,
            original_name=filename or "",
        )

    async def store_base64(
        self,
        payload: Union[str, bytes],
        params: UploadRequestParams,
    ) -> StoredFileRecord:
        """Decode an image data URI and store the decoded bytes."""
        extension, content = decode_image_base64(payload)
        digest = sha256_bytes(content)
        placement = await self._prepare(digest + extension, params)

        if await self._needs_write(placement, len(content)):
            await self._commit(placement, self._iter_bytes(content))
            logger.info(f"Stored base64 image as {placement.relative_path} ({len(content)} bytes)")

        return StoredFileRecord(
            size=len(content),
            name=digest + extension,
            hash=digest,
            extension=extension,
            absolute_path=str(placement.absolute_path),
            relative_path=placement.relative_path,
            public_path=placement.public_path,
        )

    # ===== Batches =====

    async def store_uploads(
        self,
        params: UploadRequestParams,
        uploads: Iterable[Optional[UploadFile]],
    ) -> List[StoredFileRecord]:
        """
        Store multipart files in order, skipping None entries.

        The first failure propagates and the records gathered so far are
        dropped; files already written stay on disk.
        """
        stored = []
        for upload in uploads:
            if upload is None:
                continue
            stored.append(await self.store_stream(upload, upload.filename, params))
        return stored

    async def store_base64_many(
        self,
        params: UploadRequestParams,
        payloads: Iterable[Optional[Union[str, bytes]]],
    ) -> List[StoredFileRecord]:
        """Store base64 image payloads in order, same abort rules as store_uploads."""
        stored = []
        for payload in payloads:
            if payload is None:
                continue
            stored.append(await self.store_base64(payload, params))
        return stored

    async def store_form(
        self,
        form: FormData,
        params: UploadRequestParams,
        field_names: MultipartFieldNames,
    ) -> List[StoredFileRecord]:
        """
        Store the single-file field, then every file of the multiple-file field.

        Raises:
            InvalidPayload: If neither field carries a file, or a field holds plain text
        """
        entries = []
        if field_names.single:
            single = form.get(field_names.single)
            if single is not None:
                entries.append((field_names.single, single))
        if field_names.multiple:
            entries.extend((field_names.multiple, item) for item in form.getlist(field_names.multiple))

        if not entries:
            raise InvalidPayload(
                f"No file found in form fields '{field_names.single}' or '{field_names.multiple}'",
                details={"fields": [field_names.single, field_names.multiple]},
            )

        uploads = []
        for field, entry in entries:
            if not isinstance(entry, UploadFile):
                raise InvalidPayload(f"Form field '{field}' does not contain a file", details={"field": field})
            uploads.append(entry)

        return await self.store_uploads(params, uploads)

    # ===== Internals =====

    async def _prepare(self, name: str, params: UploadRequestParams) -> Placement:
        placement = plan_placement(name, params, self.defaults)
        await ensure_directory(placement.storage_directory, self.directory_mode)
        return placement

    async def _needs_write(self, placement: Placement, size: int) -> bool:
        """
        Decide whether the destination must be (re)written.

        Same name means same content, so an existing regular file of the
        expected size is kept as is. A size mismatch means an earlier write
        was damaged and the file is replaced.
        """
        path = placement.absolute_path
        try:
            st = await aiofiles.os.stat(path)
        except FileNotFoundError:
            return True
        except (OSError, ValueError) as e:
            raise DestinationWriteFailure(f"Cannot inspect destination {path}: {e}") from e

        if stat.S_ISDIR(st.st_mode):
            raise DestinationWriteFailure(
                f"Destination {path} is a directory",
                details={"path": placement.relative_path},
            )
        if st.st_size == size:
            logger.debug(f"Duplicate content, keeping existing {placement.relative_path}")
            return False

        logger.warning(
            f"Replacing {placement.relative_path}: existing size {st.st_size} != {size}"
        )
        return True

    async def _commit(self, placement: Placement, chunks: AsyncIterator[bytes]) -> None:
        """Write chunks to a temp file, then rename it onto the destination."""
        tmp_path = placement.storage_directory / f".{placement.absolute_path.name}.{uuid.uuid4().hex}.tmp"
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                async for chunk in chunks:
                    await f.write(chunk)
            await aiofiles.os.replace(tmp_path, placement.absolute_path)
        except FileUploadError:
            await self._discard(tmp_path)
            raise
        except (OSError, ValueError) as e:
            await self._discard(tmp_path)
            logger.error(f"Failed to write {placement.absolute_path}: {e}")
            raise DestinationWriteFailure(
                f"Failed to write {placement.relative_path}: {e}",
                details={"path": placement.relative_path},
            ) from e

    async def _iter_source(self, source: AsyncReadable) -> AsyncIterator[bytes]:
        while True:
            try:
                chunk = await source.read(self.chunk_size)
            except (OSError, ValueError) as e:
                raise SourceReadFailure(f"Failed to read upload stream: {e}") from e
            if not chunk:
                return
            yield chunk

    @staticmethod
    async def _iter_bytes(content: bytes) -> AsyncIterator[bytes]:
        yield content

    @staticmethod
    async def _discard(tmp_path: Path) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except (OSError, ValueError) as e:
            logger.warning(f"Could not remove temp file {tmp_path}: {e}")
