"""
Upload Routes

Multipart and base64 upload endpoints. Files are stored under
`<project>/<sub-directory>/<YYYY>/<MM>/<DD>/` and named after their
SHA-256 hash; responses carry the public URL path of each file.
"""

from __future__ import annotations

import logging
import posixpath
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request

from fileupload.config import FileUploadSettings
from fileupload.middleware.auth import authorize_upload
from fileupload.storage import (
    StorageService,
    StoredFileResponse,
    UploadRequestParams,
    sub_directory_date,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1",
    tags=["Upload"],
    dependencies=[Depends(authorize_upload)],
)


def get_app_settings(request: Request) -> FileUploadSettings:
    return request.app.state.settings


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage


def get_upload_params(
    request: Request,
    settings: FileUploadSettings = Depends(get_app_settings),
) -> UploadRequestParams:
    """
    Build placement parameters for this request.

    The sub-directory header picks the namespace under the project; a dated
    path is appended so uploads are grouped by day.
    """
    # a rooted header value still nests under the project namespace
    sub_directory = request.headers.get(settings.sub_directory_header, "").strip()
    sub_directory = sub_directory.replace("\\", "/").lstrip("/")
    if not sub_directory:
        sub_directory = settings.default_sub_directory
    return UploadRequestParams(
        sub_directory=sub_directory_date(posixpath.join(settings.project_namespace, sub_directory)),
    )


@router.post("/upload", response_model=List[StoredFileResponse])
async def upload_files(
    request: Request,
    params: UploadRequestParams = Depends(get_upload_params),
    storage: StorageService = Depends(get_storage_service),
    settings: FileUploadSettings = Depends(get_app_settings),
) -> List[StoredFileResponse]:
    """
    Store multipart form files.

    Reads the single-file field and the multiple-file field (`file` and
    `files` by default). The first failing file aborts the request.
    """
    form = await request.form()
    try:
        records = await storage.store_form(form, params, settings.multipart_fields)
    finally:
        await form.close()

    logger.info(f"Stored {len(records)} multipart file(s) under {params.sub_directory}")
    return [record.to_response() for record in records]


@router.post("/upload/base64", response_model=List[StoredFileResponse])
async def upload_base64(
    payloads: List[Optional[str]] = Body(...),
    params: UploadRequestParams = Depends(get_upload_params),
    storage: StorageService = Depends(get_storage_service),
) -> List[StoredFileResponse]:
    """
    Store images sent as a JSON array of `data:image/<type>;base64,<data>` strings.

    Null entries are skipped. The first invalid entry aborts the request.
    """
    records = await storage.store_base64_many(params, payloads)

    logger.info(f"Stored {len(records)} base64 image(s) under {params.sub_directory}")
    return [record.to_response() for record in records]
