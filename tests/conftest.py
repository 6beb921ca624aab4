"""Shared fixtures: a fake storage client injected through FastAPI."""

from collections.abc import Iterator, Sequence
from typing import Optional

import pytest

from src.upload_relay.dependencies import get_storage_client
from src.upload_relay.main import app
from src.upload_relay.schemas.uploadthing import (
    UploadedFileData,
    UploadFileItem,
    UploadResult,
)


class FakeStorageClient:
    """Records every call; answers with canned results or raises."""

    def __init__(self) -> None:
        self.calls: list[list[UploadFileItem]] = []
        self.results: Optional[list[UploadResult]] = None
        self.exc: Optional[Exception] = None

    async def upload_files(self, files: Sequence[UploadFileItem]) -> list[UploadResult]:
        self.calls.append(list(files))
        if self.exc is not None:
            raise self.exc
        if self.results is not None:
            return self.results
        return [
            UploadResult(
                data=UploadedFileData(
                    key=f"key-{i}",
                    name=item.name,
                    size=item.size,
                    type=item.mime_type,
                    url=f"https://utfs.io/f/key-{i}",
                    ufs_url=f"https://app.ufs.sh/f/key-{i}",
                ),
            )
            for i, item in enumerate(files)
        ]


@pytest.fixture
def storage() -> Iterator[FakeStorageClient]:
    fake = FakeStorageClient()
    app.dependency_overrides[get_storage_client] = lambda: fake
    yield fake
    app.dependency_overrides.clear()
