"""
Storage package: content hashing, path planning and the disk writer.
"""

from fileupload.storage.models import (
    MultipartFieldNames,
    StorageDefaults,
    StoredFileRecord,
    StoredFileResponse,
    UploadRequestParams,
)
from fileupload.storage.paths import (
    Placement,
    build_public_path,
    file_extension,
    plan_placement,
    sub_directory_date,
)
from fileupload.storage.hashing import sha256_bytes, sha256_reader
from fileupload.storage.service import StorageService, decode_image_base64, iterate_records

__all__ = [
    "MultipartFieldNames",
    "StorageDefaults",
    "StoredFileRecord",
    "StoredFileResponse",
    "UploadRequestParams",
    "Placement",
    "build_public_path",
    "file_extension",
    "plan_placement",
    "sub_directory_date",
    "sha256_bytes",
    "sha256_reader",
    "StorageService",
    "decode_image_base64",
    "iterate_records",
]
