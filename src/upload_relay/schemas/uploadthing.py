"""Schemas exchanged with the UploadThing storage API."""

from typing import Optional

from pydantic import BaseModel


class UploadFileItem(BaseModel):
    """A single in-memory file to hand to the storage client."""
    content: bytes
    name: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


class UploadedFileData(BaseModel):
    """Descriptor of a file stored by UploadThing."""
    key: str
    name: str
    size: int
    type: str
    url: str
    ufs_url: str


class UploadThingFileError(BaseModel):
    """Per-file error reported by the storage client."""
    code: str
    message: str


class UploadResult(BaseModel):
    """One result per submitted file: either ``data`` or ``error`` is set."""
    data: Optional[UploadedFileData] = None
    error: Optional[UploadThingFileError] = None
