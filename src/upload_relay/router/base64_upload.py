"""Router – base64 data-URI upload."""

import logging

from fastapi import APIRouter, Depends, Request

from src.upload_relay.dependencies import get_storage_client
from src.upload_relay.errors import RelayHTTPError
from src.upload_relay.middleware import is_json_content_type
from src.upload_relay.schemas.upload import Base64UploadResponse, ErrorResponse
from src.upload_relay.services.base64_service import (
    RejectionKind,
    UploadRejected,
    relay_base64_upload,
)
from src.upload_relay.services.uploadthing_client import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])

_STATUS_FOR_REJECTION = {
    RejectionKind.INVALID_FIELD: 400,
    RejectionKind.INVALID_FORMAT: 400,
    RejectionKind.UPLOAD_FAILED: 500,
}


@router.post(
    "/api/upload-base64",
    response_model=Base64UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def upload_base64(
    request: Request,
    storage: StorageClient = Depends(get_storage_client),
) -> Base64UploadResponse:
    """
    Upload a file sent as ``{"file": "data:<mime>;base64,<payload>"}``.

    Returns
    -------
    Base64UploadResponse with:
        - url : public URL of the stored file
    """
    # Only JSON bodies are parsed; anything else is left unread
    body = None
    if is_json_content_type(request.headers):
        try:
            body = await request.json()
        except ValueError:
            body = None

    try:
        outcome = await relay_base64_upload(body, storage)
    except Exception:
        logger.exception("Error handling base64 upload")
        raise RelayHTTPError(500, "Internal server error")

    if isinstance(outcome, UploadRejected):
        raise RelayHTTPError(
            _STATUS_FOR_REJECTION[outcome.kind], outcome.message, outcome.details,
        )
    return Base64UploadResponse(url=outcome.url)
