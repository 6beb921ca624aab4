"""Router – multipart upload governed by the file router policy."""

import logging
import mimetypes
from collections import Counter
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from src.upload_relay.dependencies import get_storage_client
from src.upload_relay.errors import RelayHTTPError
from src.upload_relay.file_router import FILE_ROUTER, FileRoute, file_category
from src.upload_relay.schemas.upload import ErrorResponse, StoredFileResponse
from src.upload_relay.schemas.uploadthing import UploadFileItem
from src.upload_relay.services.base64_service import build_filename
from src.upload_relay.services.uploadthing_client import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])


async def _validated_items(
    slug: str, route: FileRoute, files: list[UploadFile],
) -> list[UploadFileItem]:
    """Check *files* against *route* and read them into upload items."""
    counts: Counter[str] = Counter()
    items: list[UploadFileItem] = []

    for index, upload in enumerate(files):
        mime_type = upload.content_type
        if not mime_type and upload.filename:
            mime_type, _ = mimetypes.guess_type(upload.filename)
        mime_type = mime_type or "application/octet-stream"

        governing = route.governing_category(file_category(mime_type, upload.filename))
        if governing is None:
            raise RelayHTTPError(400, f"File type '{mime_type}' not allowed for route '{slug}'")

        limit = route.limits[governing]
        counts[governing] += 1
        if counts[governing] > limit.max_file_count:
            raise RelayHTTPError(
                400,
                f"Too many {governing} files for route '{slug}' "
                f"(maximum {limit.max_file_count})",
            )

        content = await upload.read()
        if len(content) > limit.max_file_bytes:
            raise RelayHTTPError(
                413,
                f"File '{upload.filename}' is larger than the {limit.max_file_size} "
                f"limit for {governing} files",
            )

        items.append(
            UploadFileItem(
                content=content,
                name=build_filename(mime_type, index=index),
                mime_type=mime_type,
            )
        )

    return items


@router.post(
    "/api/uploadthing",
    response_model=list[StoredFileResponse],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def upload_multipart(
    slug: str = Query(..., description="Route name from the file router"),
    files: Optional[list[UploadFile]] = File(None),
    storage: StorageClient = Depends(get_storage_client),
) -> list[StoredFileResponse]:
    """
    Upload one or more files to the storage service.

    Parameters
    ----------
    slug  : str – file route to validate against (e.g. ``imageUploader``).
    files : list[UploadFile] – multipart ``files`` parts.
    """
    route = FILE_ROUTER.get(slug)
    if route is None:
        raise RelayHTTPError(404, f"Unknown upload route '{slug}'")
    if not files:
        raise RelayHTTPError(400, "No files provided")

    items = await _validated_items(slug, route, files)
    logger.info(
        "Uploading %d file(s) on route '%s': %s",
        len(items), slug, ", ".join(item.name for item in items),
    )

    try:
        results = await storage.upload_files(items)
        failure = next((r.error for r in results if r.error is not None), None)
        if failure is None:
            for result in results:
                await route.on_upload_complete(slug, result.data)
    except Exception:
        logger.exception("Error handling multipart upload on route '%s'", slug)
        raise RelayHTTPError(500, "Internal server error")

    if failure is not None:
        logger.error("UploadThing error on route '%s': %s", slug, failure.message)
        raise RelayHTTPError(500, "Upload failed", failure.message)

    return [
        StoredFileResponse(
            key=result.data.key,
            name=result.data.name,
            original_name=upload.filename,
            size=result.data.size,
            type=result.data.type,
            url=result.data.ufs_url,
        )
        for upload, result in zip(files, results)
    ]
