"""
Error Types - Enums and exception classes for the upload pipeline

Contains:
- ErrorType enum (one value per failure kind)
- Exception classes (FileUploadError and subclasses)

Every storage failure is raised as one of these classes; the HTTP layer
maps them to status codes via `status_code` and to a stable wire
identifier via `error_type`.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorType(Enum):
    """Standard error types"""
    SOURCE_READ_FAILURE = "source_read_failure"
    INVALID_PAYLOAD = "invalid_payload"
    PATH_RESOLUTION_FAILURE = "path_resolution_failure"
    DIRECTORY_CREATE_FAILURE = "directory_create_failure"
    DESTINATION_WRITE_FAILURE = "destination_write_failure"

    # Generic
    INTERNAL_ERROR = "internal_error"


class FileUploadError(Exception):
    """Base exception for fileupload"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class SourceReadFailure(FileUploadError):
    """The incoming stream could not be opened, read or rewound"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type=ErrorType.SOURCE_READ_FAILURE,
            status_code=400,  # Bad Request
            details=details
        )


class InvalidPayload(FileUploadError):
    """Malformed base64 data URI, or an expected form field is absent"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type=ErrorType.INVALID_PAYLOAD,
            status_code=400,  # Bad Request
            details=details
        )


class PathResolutionFailure(FileUploadError):
    """A storage path could not be made absolute or escapes its base directory"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type=ErrorType.PATH_RESOLUTION_FAILURE,
            status_code=400,  # Bad Request
            details=details
        )


class DirectoryCreateFailure(FileUploadError):
    """The storage directory could not be created"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type=ErrorType.DIRECTORY_CREATE_FAILURE,
            status_code=500,
            details=details
        )


class DestinationWriteFailure(FileUploadError):
    """The destination file could not be created or written"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type=ErrorType.DESTINATION_WRITE_FAILURE,
            status_code=500,
            details=details
        )


__all__ = [
    # Enum
    "ErrorType",
    # Exception classes
    "FileUploadError",
    "SourceReadFailure",
    "InvalidPayload",
    "PathResolutionFailure",
    "DirectoryCreateFailure",
    "DestinationWriteFailure",
]
