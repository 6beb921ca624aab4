"""Upload Relay – FastAPI application entry-point."""

from contextlib import asynccontextmanager
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from src.upload_relay.config import settings
from src.upload_relay.errors import register_exception_handlers
from src.upload_relay.middleware import JSONBodyLimitMiddleware
from src.upload_relay.router import base64_upload, health, uploadthing
from src.upload_relay.services.uploadthing_client import UploadThingClient

# Configure logging from settings
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Lifespan: one storage client for the whole process
# ──────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("🚀 Creating UploadThing client …")
    app.state.storage_client = UploadThingClient.from_settings(settings)
    yield
    logger.info("🛑 Shutting down – closing UploadThing client …")
    await app.state.storage_client.aclose()


# ──────────────────────────────────────────────
# Application factory
# ──────────────────────────────────────────────
app = FastAPI(
    title="Upload Relay API",
    description="Relay multipart and base64 uploads to UploadThing.",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# ── JSON body ceiling (inner) ──
app.add_middleware(
    JSONBodyLimitMiddleware,
    max_body_size=settings.max_json_body_size,
)

# ── CORS middleware (outer, so rejections carry CORS headers too) ──
app.add_middleware(
    middleware_class=CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
)

logger.info("CORS configured with origins: %s", settings.cors_origins_list)

# ── register routers ──
app.include_router(health.router)
app.include_router(uploadthing.router)
app.include_router(base64_upload.router)
