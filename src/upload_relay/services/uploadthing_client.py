"""Service layer – UploadThing storage client.

Talks to the UploadThing v6 REST API with a single shared
``httpx.AsyncClient``:

1. ``POST /v6/uploadFiles`` registers the files and returns one presigned
   POST target per file (same order as submitted).
2. Each file is then posted to its presigned target as multipart form data.

A failure in step 1 (missing key, network error, non-2xx) raises
``UploadThingError``.  A failure in step 2 only affects that file and is
reported as an error ``UploadResult``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, Optional, Protocol

import httpx

from src.upload_relay.config import Settings
from src.upload_relay.schemas.uploadthing import (
    UploadedFileData,
    UploadFileItem,
    UploadResult,
    UploadThingFileError,
)

logger = logging.getLogger(__name__)

UPLOADTHING_API_VERSION = "6.4.0"


class UploadThingError(Exception):
    """The UploadThing API could not be reached or rejected the request."""


class StorageClient(Protocol):
    async def upload_files(self, files: Sequence[UploadFileItem]) -> list[UploadResult]: ...


class UploadThingClient:
    """Async UploadThing client, created once per process."""

    def __init__(
        self,
        api_key: Optional[str],
        app_id: Optional[str] = None,
        api_url: str = "https://api.uploadthing.com",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._app_id = app_id
        self._client = httpx.AsyncClient(
            base_url=api_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> UploadThingClient:
        if not settings.uploadthing_secret:
            logger.warning(
                "UploadThing not configured. Set UPLOADTHING_SECRET; "
                "uploads will fail until then.",
            )
        return cls(
            api_key=settings.uploadthing_secret,
            app_id=settings.uploadthing_app_id,
            api_url=settings.uploadthing_api_url,
            timeout=settings.uploadthing_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────
    async def upload_files(self, files: Sequence[UploadFileItem]) -> list[UploadResult]:
        """Upload *files* and return one ``UploadResult`` per file, in order."""
        if not files:
            return []

        targets = await self._request_presigned_posts(files)
        return list(
            await asyncio.gather(
                *(self._post_to_target(item, target) for item, target in zip(files, targets))
            )
        )

    # ──────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────
    def _api_headers(self) -> dict[str, str]:
        return {
            "x-uploadthing-api-key": self._api_key or "",
            "x-uploadthing-version": UPLOADTHING_API_VERSION,
            "x-uploadthing-be-adapter": "server-sdk",
        }

    def _public_url(self, key: str, file_url: str) -> str:
        if self._app_id:
            return f"https://{self._app_id}.ufs.sh/f/{key}"
        return file_url

    async def _request_presigned_posts(
        self, files: Sequence[UploadFileItem],
    ) -> list[dict[str, Any]]:
        if not self.is_configured:
            raise UploadThingError("Missing UPLOADTHING_SECRET, cannot upload files.")

        payload = {
            "files": [
                {"name": item.name, "size": item.size, "type": item.mime_type}
                for item in files
            ],
            "metadata": {},
            "contentDisposition": "inline",
        }

        try:
            response = await self._client.post(
                "/v6/uploadFiles", json=payload, headers=self._api_headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UploadThingError(
                f"UploadThing API responded {exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UploadThingError(f"Could not reach UploadThing API: {exc}") from exc

        data = response.json().get("data")
        if not isinstance(data, list) or len(data) != len(files):
            raise UploadThingError("Unexpected response from UploadThing API.")
        return data

    async def _post_to_target(
        self, item: UploadFileItem, target: dict[str, Any],
    ) -> UploadResult:
        try:
            key = target["key"]
            response = await self._client.post(
                target["url"],
                data=target.get("fields") or {},
                files={"file": (item.name, item.content, item.mime_type)},
            )
            response.raise_for_status()
        except (httpx.HTTPError, KeyError) as exc:
            logger.error("Upload of %s to presigned target failed: %s", item.name, exc)
            return UploadResult(
                error=UploadThingFileError(
                    code="UPLOAD_FAILED",
                    message=f"Failed to upload file {item.name}: {exc}",
                ),
            )

        file_url = target.get("fileUrl") or f"https://utfs.io/f/{key}"
        return UploadResult(
            data=UploadedFileData(
                key=key,
                name=target.get("fileName") or item.name,
                size=item.size,
                type=target.get("fileType") or item.mime_type,
                url=file_url,
                ufs_url=self._public_url(key, file_url),
            ),
        )
