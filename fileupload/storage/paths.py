"""
Storage - Path Planning

Turns a content-derived file name plus placement parameters into the
on-disk location and the public URL of a stored file.

Layout:
    <storage_directory>/<sub_directory>/<sha256><extension>
    <uri_access_prefix>/<sub_directory>/<sha256><extension>

Public paths are always `/`-separated and rooted, whatever the host OS
uses for filesystem paths.
"""

from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiofiles.os

from fileupload.errors import DirectoryCreateFailure, PathResolutionFailure
from fileupload.storage.models import StorageDefaults, UploadRequestParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Resolved locations for one file name."""
    storage_directory: Path
    absolute_path: Path
    relative_path: str
    public_path: str


def file_extension(filename: Optional[str]) -> str:
    """
    Extension of the last path element, dot included.

    Example:
        >>> file_extension("photos/cat.tar.gz")
        '.gz'
        >>> file_extension("README")
        ''
    """
    if not filename:
        return ""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    idx = base.rfind(".")
    return base[idx:] if idx >= 0 else ""


def normalize_sub_directory(sub_directory: Optional[str]) -> str:
    """
    Clean a caller-supplied sub-directory into a relative `/` path.

    Backslashes count as separators and leading slashes are dropped, so
    the result always nests under the storage directory.

    Raises:
        PathResolutionFailure: If the path climbs out of the storage directory
    """
    sub = (sub_directory or "").strip().replace("\\", "/").lstrip("/")
    if not sub:
        return ""
    cleaned = posixpath.normpath(sub)
    if cleaned == ".":
        return ""
    if cleaned == ".." or cleaned.startswith("../"):
        raise PathResolutionFailure(
            f"Sub-directory escapes the storage directory: {sub_directory!r}",
            details={"sub_directory": sub_directory},
        )
    return cleaned


def build_public_path(uri_access_prefix: Optional[str], sub_directory: str, name: str) -> str:
    """Join prefix, sub-directory and name into a rooted URL path."""
    parts = [p.replace("\\", "/") for p in (uri_access_prefix, sub_directory, name) if p]
    joined = posixpath.normpath("/".join(parts))
    return "/" + joined.lstrip("/")


def plan_placement(
    name: str,
    params: UploadRequestParams,
    defaults: StorageDefaults,
) -> Placement:
    """
    Resolve where `name` is stored and how it is reached over HTTP.

    Per-request overrides win over the defaults when non-empty.

    Raises:
        PathResolutionFailure: If the storage directory cannot be made absolute,
            the sub-directory is unsafe or a component holds a NUL byte
    """
    base_directory = params.storage_directory or defaults.storage_directory
    uri_access_prefix = params.uri_access_prefix or defaults.uri_access_prefix

    components = (
        ("storage_directory", base_directory),
        ("sub_directory", params.sub_directory),
        ("name", name),
    )
    for label, value in components:
        if value and "\x00" in value:
            raise PathResolutionFailure(f"NUL byte in {label}: {value!r}", details={label: value})

    sub_directory = normalize_sub_directory(params.sub_directory)

    try:
        base_absolute = Path(os.path.abspath(base_directory))
    except (OSError, ValueError) as e:
        raise PathResolutionFailure(
            f"Cannot resolve storage directory {base_directory!r}: {e}"
        ) from e

    storage_directory = base_absolute / sub_directory if sub_directory else base_absolute
    relative_path = posixpath.join(sub_directory, name) if sub_directory else name

    return Placement(
        storage_directory=storage_directory,
        absolute_path=storage_directory / name,
        relative_path=relative_path,
        public_path=build_public_path(uri_access_prefix, sub_directory, name),
    )


async def ensure_directory(directory: Path, mode: int = 0o755) -> None:
    """
    Create `directory` and its parents if missing.

    Raises:
        DirectoryCreateFailure: If creation fails or a file is in the way
    """
    try:
        if await aiofiles.os.path.isdir(directory):
            return
        await aiofiles.os.makedirs(directory, mode=mode, exist_ok=True)
    except (OSError, ValueError) as e:
        raise DirectoryCreateFailure(
            f"Failed to create storage directory {directory}: {e}",
            details={"directory": str(directory)},
        ) from e
    logger.debug(f"Created storage directory {directory}")


def sub_directory_date(sub_directory: str = "", now: Optional[datetime] = None) -> str:
    """
    Append `<YYYY>/<MM>/<DD>` to a sub-directory.

    Recomputed on every call from the wall clock unless `now` is given.

    Example:
        >>> sub_directory_date("project1/default", datetime(2024, 1, 5))
        'project1/default/2024/01/05'
    """
    now = now or datetime.now()
    return posixpath.join(
        sub_directory.replace("\\", "/"),
        f"{now.year:04d}",
        f"{now.month:02d}",
        f"{now.day:02d}",
    )
