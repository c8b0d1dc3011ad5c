from fastapi import APIRouter, HTTPException, Query, UploadFile, File, Form
from fastapi.responses import FileResponse
from PIL import UnidentifiedImageError
from typing import Optional
import logging
import os
import re
import uuid
from ..core.config import settings
from ..core.models import PhotoResponse, ListResponse
from ..files.utils import (
    delete_file_and_empty_parent,
    delete_files,
    generate_unique_filename,
    get_upload_dir,
    process_image,
    remove_dir_if_empty,
)
from ..aws.records import (
    put_photo_record,
    get_photo_record,
    list_photo_records,
    delete_photo_record,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["photos"])

# Acceptable upload types; everything is re-encoded to WebP
ALLOWED_IMAGE_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
CTYPE_TO_EXTS = {
    "image/jpeg": {".jpg", ".jpeg"},
    "image/png": {".png"},
    "image/webp": {".webp"},
    "image/gif": {".gif"},
}

# Ids become directory names under the upload root
_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _check_id(value: str) -> str:
    if not _ID_PATTERN.match(value or ""):
        raise ValueError("invalid_id")
    return value


def _discard_upload(upload_dir, *paths):
    # A rejected upload must not leave an empty memory directory behind
    delete_files(list(paths))
    remove_dir_if_empty(upload_dir)


@router.post(
    "/memories/{memory_id}/photos",
    response_model=PhotoResponse,
    status_code=201,
    summary="Upload a photo to a memory",
    description=(
        "Select a JPG/PNG/WebP/GIF file to upload using multipart form-data.\n\n"
        "Fields:\n"
        "- `user_id` (required): owner of the photo.\n"
        "- `file` (required): the image file.\n\n"
        "The upload is staged under the temporary photos directory, resized to fit "
        "the configured bounds and stored as WebP."
    ),
)
def upload_photo(
    memory_id: str,
    user_id: str = Form(...),
    file: UploadFile = File(...),
):
    upload_dir = None
    staged_path = None
    processed_path = None
    try:
        _check_id(memory_id)
        _check_id(user_id)

        content_type = file.content_type or "application/octet-stream"
        name_lower = (file.filename or "").lower()
        # Require a supported content-type with a matching extension
        expected_exts = CTYPE_TO_EXTS.get(content_type, set())
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES or not any(
            name_lower.endswith(e) for e in expected_exts
        ):
            raise ValueError("unsupported_image_type")

        data = file.file.read()
        if not data:
            raise ValueError("empty_file")

        upload_dir = get_upload_dir(user_id, memory_id)
        staged_path = os.path.join(upload_dir, generate_unique_filename(file.filename))
        with open(staged_path, "wb") as fh:
            fh.write(data)
        logger.info(f"Staged upload for user {user_id} memory {memory_id}: {staged_path}")

        processed = process_image(
            staged_path,
            target_dir=upload_dir,
            base_name=uuid.uuid4().hex,
            width=settings.image_max_width,
            height=settings.image_max_height,
            quality=settings.image_quality,
        )
        processed_path = processed.processed_path

        item = put_photo_record(
            user_id=user_id,
            memory_id=memory_id,
            filename=file.filename,
            processed=processed,
        )
        return PhotoResponse(
            photo_id=item["photo_id"],
            url=f"/photos/{item['photo_id']}",
            metadata=processed.metadata,
        )
    except UnidentifiedImageError:
        _discard_upload(upload_dir, staged_path, processed_path)
        raise HTTPException(status_code=400, detail="invalid_image")
    except ValueError as e:
        _discard_upload(upload_dir, staged_path, processed_path)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Upload failed for memory {memory_id}: {e}")
        _discard_upload(upload_dir, staged_path, processed_path)
        raise HTTPException(status_code=500, detail=f"upload_failed {e}")


@router.get(
    "/memories/{memory_id}/photos",
    response_model=ListResponse,
    summary="List the photos of a memory",
    description=(
        "Returns the photo records of a memory, oldest first.\n\n"
        "Query params:\n"
        "- `user_id`: return only photos uploaded by this user."
    ),
)
def list_photos(
    memory_id: str,
    user_id: Optional[str] = Query(None, description="Filter by owner user id"),
):
    try:
        items = list_photo_records(memory_id, user_id=user_id)
        return ListResponse(count=len(items), items=items)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"list_failed {e}")


@router.get(
    "/photos/{photo_id}",
    summary="Fetch a processed photo",
    description="Serves the WebP file of a photo. Returns 404 if the photo or its file is gone.",
)
def get_photo(photo_id: str):
    try:
        item = get_photo_record(photo_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"fetch_failed {e}")

    path = item["path"]
    if not os.path.isfile(path):
        logger.warning(f"Photo {photo_id} has a record but no file at {path}")
        raise HTTPException(status_code=404, detail="not_found")
    return FileResponse(path, media_type=item.get("content_type", "image/webp"))


@router.delete(
    "/photos/{photo_id}",
    summary="Delete a photo",
    description=(
        "Removes the processed file and its record. The memory directory is removed "
        "as well once it holds no more files.\n"
        "Returns 404 if the photo id does not exist."
    ),
)
def delete_photo(photo_id: str):
    try:
        item = get_photo_record(photo_id)
        delete_file_and_empty_parent(item["path"])
        delete_photo_record(photo_id)
        return {"deleted": photo_id}
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"delete_failed {e}")
