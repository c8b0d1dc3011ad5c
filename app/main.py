from contextlib import asynccontextmanager
from fastapi import FastAPI
from .core.config import settings
from .core.logging_config import configure_logging
from .files.utils import ensure_directories_exist
from .aws.clients import ensure_table
from .routers.memories import router as memories_router

tags_metadata = [
    {
        "name": "photos",
        "description": (
            "Endpoints to upload, list, fetch and delete memory photos.\n\n"
            "- Upload via multipart.\n"
            "- JPEG/PNG/WebP/GIF validation, resize and WebP re-encoding.\n"
            "- List per memory, optionally filtered by user.\n"
            "- Delete removes the file and prunes the emptied memory directory."
        ),
    }
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    ensure_directories_exist([settings.upload_dir or settings.temp_photos_dir])
    if settings.auto_create_table:
        ensure_table()
    yield


app = FastAPI(
    title="Memories Photo Service",
    description=(
        "How to Use:\n\n"
        "1) Upload a photo: POST /memories/{memory_id}/photos with `user_id` and a JPG/PNG/WebP/GIF `file`.\n"
        "2) List photos: GET /memories/{memory_id}/photos with optional `user_id`.\n"
        "3) Fetch: GET /photos/{photo_id} returns the optimized WebP.\n"
        "4) Delete: DELETE /photos/{photo_id} removes the file and its record.\n\n"
        "Notes: uploads are resized to fit within the configured bounds (2000x2000 by default) and never enlarged."
    ),
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(memories_router)
