"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from src.upload_relay.services.uploadthing_client import StorageClient


def get_storage_client(request: Request) -> StorageClient:
    """Return the process-wide storage client created in the lifespan."""
    return request.app.state.storage_client
