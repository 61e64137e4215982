"""
Storage - Models

Pydantic models describing where a file goes and where it landed.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StorageDefaults(BaseModel):
    """Process-wide storage defaults, fixed when the service is built."""
    model_config = ConfigDict(frozen=True)

    storage_directory: str = Field(..., min_length=1)
    uri_access_prefix: str = ""


class UploadRequestParams(BaseModel):
    """
    Per-request placement parameters.

    Empty overrides fall back to the StorageDefaults of the service.
    """
    model_config = ConfigDict(frozen=True)

    storage_directory: Optional[str] = None
    uri_access_prefix: Optional[str] = None
    sub_directory: str = ""


class MultipartFieldNames(BaseModel):
    """Form field names for single and multiple file uploads."""
    model_config = ConfigDict(frozen=True)

    single: str = "file"
    multiple: str = "files"


class StoredFileRecord(BaseModel):
    """Result of storing one file. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    size: int
    name: str
    hash: str
    extension: str
    absolute_path: str
    relative_path: str
    public_path: str
    original_name: str = ""

    def to_response(self) -> "StoredFileResponse":
        """Transport view with filesystem paths stripped"""
        return StoredFileResponse(
            size=self.size,
            name=self.name,
            hash=self.hash,
            extension=self.extension,
            public_path=self.public_path,
            original_name=self.original_name,
        )


class StoredFileResponse(BaseModel):
    """What an HTTP client gets back for each stored file."""
    size: int
    name: str
    hash: str
    extension: str
    public_path: str
    original_name: str = ""
