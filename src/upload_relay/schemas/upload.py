from typing import Optional

from pydantic import BaseModel


class Base64UploadResponse(BaseModel):
    """Response schema for POST /api/upload-base64."""
    url: str


class StoredFileResponse(BaseModel):
    """Single stored file returned by POST /api/uploadthing."""
    key: str
    name: str
    original_name: Optional[str] = None
    size: int
    type: str
    url: str


class ErrorResponse(BaseModel):
    """Error envelope for every non-2xx response."""
    error: str
    details: Optional[str] = None
