"""Router policy for the multipart upload endpoint.

Each route (selected with ``?slug=``) lists the file categories it
accepts, with a maximum size and a maximum count per category.  A route
may also carry an ``on_upload_complete`` callback that runs once per file
stored successfully.
"""

from __future__ import annotations

import logging
import mimetypes
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Optional

from src.upload_relay.schemas.uploadthing import UploadedFileData

logger = logging.getLogger(__name__)

FILE_CATEGORIES = ("image", "video", "audio", "pdf", "text", "blob")

_SIZE_PATTERN = re.compile(r"\s*(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)\s*", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}

UploadCompleteCallback = Callable[[str, UploadedFileData], Awaitable[None]]


def parse_file_size(value: str) -> int:
    """Convert a size string such as ``"4MB"`` into bytes."""
    match = _SIZE_PATTERN.fullmatch(value)
    if match is None:
        raise ValueError(f"Invalid file size: {value!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit.upper()])


def file_category(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """Map a content type (or, failing that, a filename) to a file category."""
    if not content_type and filename:
        content_type, _ = mimetypes.guess_type(filename)
    if not content_type:
        return "blob"

    content_type = content_type.split(";", 1)[0].strip().lower()
    if content_type == "application/pdf":
        return "pdf"
    major = content_type.partition("/")[0]
    if major in ("image", "video", "audio", "text"):
        return major
    return "blob"


async def log_upload_complete(slug: str, file: UploadedFileData) -> None:
    logger.info("Upload complete on route '%s': %s → %s", slug, file.name, file.ufs_url)


@dataclass(frozen=True)
class CategoryLimit:
    max_file_size: str = "4MB"
    max_file_count: int = 1

    @property
    def max_file_bytes(self) -> int:
        return parse_file_size(self.max_file_size)


@dataclass(frozen=True)
class FileRoute:
    limits: dict[str, CategoryLimit]
    on_upload_complete: UploadCompleteCallback = field(default=log_upload_complete)

    def governing_category(self, category: str) -> Optional[str]:
        """Return the limits key that governs *category*; ``blob`` accepts anything."""
        if category in self.limits:
            return category
        if "blob" in self.limits:
            return "blob"
        return None


# ──────────────────────────────────────────────
# Route registry
#   key   → slug (query param of POST /api/uploadthing)
#   value → FileRoute with per-category limits
# ──────────────────────────────────────────────
FILE_ROUTER: dict[str, FileRoute] = {
    "imageUploader": FileRoute(
        limits={"image": CategoryLimit(max_file_size="4MB", max_file_count=1)},
    ),
    "mediaUploader": FileRoute(
        limits={
            "image": CategoryLimit(max_file_size="8MB", max_file_count=4),
            "video": CategoryLimit(max_file_size="64MB", max_file_count=1),
            "audio": CategoryLimit(max_file_size="16MB", max_file_count=1),
        },
    ),
    "documentUploader": FileRoute(
        limits={
            "pdf": CategoryLimit(max_file_size="16MB", max_file_count=4),
            "text": CategoryLimit(max_file_size="1MB", max_file_count=4),
        },
    ),
}
