"""
Errors Package

Provides standardized error handling for fileupload:
- ErrorType enum for error categories
- Exception classes (FileUploadError and subclasses)
"""

from fileupload.errors.types import (
    ErrorType,
    FileUploadError,
    SourceReadFailure,
    InvalidPayload,
    PathResolutionFailure,
    DirectoryCreateFailure,
    DestinationWriteFailure,
)

__all__ = [
    "ErrorType",
    "FileUploadError",
    "SourceReadFailure",
    "InvalidPayload",
    "PathResolutionFailure",
    "DirectoryCreateFailure",
    "DestinationWriteFailure",
]
