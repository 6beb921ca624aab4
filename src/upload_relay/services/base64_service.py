"""Service layer – base64 data-URI uploads.

Every step returns an explicit value instead of raising: the parser yields
``DataUri`` or ``DataUriError`` and the relay yields ``UploadSucceeded`` or
``UploadRejected``.  Mapping to HTTP status codes happens in the router.
Only genuinely unexpected failures (storage API unreachable, bad
adapter responses) escape as exceptions.
"""

from __future__ import annotations

import base64
import binascii
import enum
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

from src.upload_relay.schemas.uploadthing import UploadFileItem
from src.upload_relay.services.uploadthing_client import StorageClient

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"data:(.+);base64,(.+)")
# RFC 6838 restricted-name, minus characters that are awkward in filenames
SUBTYPE_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._+-]{0,126}")
FALLBACK_EXTENSION = "bin"


# ──────────────────────────────────────────────
# Data-URI parsing
# ──────────────────────────────────────────────
@dataclass(frozen=True)
class DataUri:
    mime_type: str
    payload: str


@dataclass(frozen=True)
class DataUriError:
    reason: str


def parse_data_uri(value: str) -> Union[DataUri, DataUriError]:
    """Split ``data:<mime>;base64,<payload>`` into its MIME type and payload.

    The whole string must match; nothing is guessed from a malformed prefix.
    """
    match = DATA_URI_PATTERN.fullmatch(value)
    if match is None:
        return DataUriError("Invalid base64 string format")
    return DataUri(mime_type=match.group(1), payload=match.group(2))


_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def decode_payload(payload: str) -> Union[bytes, DataUriError]:
    """Decode standard or URL-safe base64, with or without ``=`` padding.

    Characters outside the alphabet are rejected, never silently dropped.
    """
    normalized = payload.translate(_URLSAFE_TO_STANDARD).rstrip("=")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True)
    except binascii.Error:
        return DataUriError("Invalid base64 string format")


def extension_for(mime_type: str) -> str:
    """Return the MIME subtype as a file extension, or ``bin``."""
    essence = mime_type.split(";", 1)[0].strip()
    _, slash, subtype = essence.partition("/")
    if slash and SUBTYPE_PATTERN.fullmatch(subtype):
        return subtype
    return FALLBACK_EXTENSION


def build_filename(
    mime_type: str,
    index: Optional[int] = None,
    now_ms: Optional[int] = None,
) -> str:
    """Server-side filename: ``upload-<epoch-ms>[-<index>].<ext>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stem = f"upload-{now_ms}" if index is None else f"upload-{now_ms}-{index}"
    return f"{stem}.{extension_for(mime_type)}"


# ──────────────────────────────────────────────
# Relay
# ──────────────────────────────────────────────
class RejectionKind(enum.Enum):
    INVALID_FIELD = "invalid_field"
    INVALID_FORMAT = "invalid_format"
    UPLOAD_FAILED = "upload_failed"


@dataclass(frozen=True)
class UploadSucceeded:
    url: str


@dataclass(frozen=True)
class UploadRejected:
    kind: RejectionKind
    message: str
    details: Optional[str] = None


async def relay_base64_upload(
    body: Any,
    storage: StorageClient,
) -> Union[UploadSucceeded, UploadRejected]:
    """Validate *body*, decode its ``file`` data URI and store it."""
    file_field = body.get("file") if isinstance(body, dict) else None
    if not file_field or not isinstance(file_field, str):
        return UploadRejected(
            RejectionKind.INVALID_FIELD,
            "Missing or invalid base64 file string in body",
        )

    parsed = parse_data_uri(file_field)
    if isinstance(parsed, DataUriError):
        return UploadRejected(RejectionKind.INVALID_FORMAT, parsed.reason)

    content = decode_payload(parsed.payload)
    if isinstance(content, DataUriError):
        return UploadRejected(RejectionKind.INVALID_FORMAT, content.reason)

    item = UploadFileItem(
        content=content,
        name=build_filename(parsed.mime_type),
        mime_type=parsed.mime_type,
    )

    logger.info(
        "Uploading file: %s, size: %d, type: %s",
        item.name, item.size, item.mime_type,
    )

    results = await storage.upload_files([item])
    uploaded = results[0]
    if uploaded.error is not None:
        logger.error("UploadThing error for %s: %s", item.name, uploaded.error.message)
        return UploadRejected(
            RejectionKind.UPLOAD_FAILED,
            "Upload failed",
            details=uploaded.error.message,
        )

    logger.info("✅ Upload successful: %s → %s", uploaded.data.key, uploaded.data.ufs_url)
    return UploadSucceeded(url=uploaded.data.ufs_url)
