"""
Unified Configuration Management for fileupload

Consolidates all configuration into a single source of truth using Pydantic BaseSettings.
All settings can be overridden via environment variables with FILEUPLOAD_ prefix.

Usage:
    from fileupload.config import get_settings

    settings = get_settings()
    print(settings.storage_directory)
    print(settings.uri_access_prefix)
"""

from pathlib import Path
from typing import Literal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fileupload.storage.models import MultipartFieldNames, StorageDefaults


class FileUploadSettings(BaseSettings):
    """
    Unified configuration for fileupload

    All settings can be overridden via environment variables with FILEUPLOAD_ prefix.
    Example: FILEUPLOAD_STORAGE_DIRECTORY=/var/files/uploads
    """

    model_config = SettingsConfigDict(
        env_prefix="FILEUPLOAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================
    # SYSTEM SETTINGS
    # ============================================

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # API SERVER SETTINGS
    # ============================================

    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )

    api_port: int = Field(
        default=7878,
        description="API server port"
    )

    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )

    # ============================================
    # STORAGE SETTINGS
    # ============================================

    storage_directory: Path = Field(
        default_factory=lambda: Path.cwd() / "uploads",
        description="Default disk directory uploaded files are stored under"
    )

    uri_access_prefix: str = Field(
        default="/resource/static",
        description="Default URL prefix stored files are served from"
    )

    directory_mode: int = Field(
        default=0o755,
        description="Permission bits for created storage directories"
    )

    chunk_size: int = Field(
        default=1024 * 1024,  # 1 MB
        description="Read size used while hashing and copying streams"
    )

    serve_static: bool = Field(
        default=True,
        description="Mount the storage directory at the URI prefix"
    )

    # ============================================
    # REQUEST SETTINGS
    # ============================================

    project_namespace: str = Field(
        default="project1",
        description="First sub-directory segment (project, program version, business module)"
    )

    default_sub_directory: str = Field(
        default="default",
        description="Sub-directory used when the request carries no sub-directory header"
    )

    sub_directory_header: str = Field(
        default="SubDirectory",
        description="Request header that selects the sub-directory"
    )

    multipart_single_field: str = Field(
        default="file",
        description="Form field carrying a single file"
    )

    multipart_multiple_field: str = Field(
        default="files",
        description="Form field carrying multiple files"
    )

    @field_validator("uri_access_prefix", mode="after")
    @classmethod
    def normalize_uri_prefix(cls, v: str) -> str:
        """Force a leading slash and drop trailing ones"""
        v = v.strip().replace("\\", "/")
        if not v:
            return v
        return "/" + v.strip("/")

    @field_validator("chunk_size", mode="after")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"chunk_size must be positive, got {v}")
        return v

    # ============================================
    # DERIVED VALUES
    # ============================================

    @property
    def storage_defaults(self) -> StorageDefaults:
        """Defaults handed to StorageService at construction"""
        return StorageDefaults(
            storage_directory=str(self.storage_directory),
            uri_access_prefix=self.uri_access_prefix,
        )

    @property
    def multipart_fields(self) -> MultipartFieldNames:
        return MultipartFieldNames(
            single=self.multipart_single_field,
            multiple=self.multipart_multiple_field,
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> FileUploadSettings:
    """
    Get cached settings instance (singleton pattern)

    Returns:
        FileUploadSettings: Application settings
    """
    return FileUploadSettings()
