"""Filesystem helpers for staged photo uploads.

Uploads land under the temporary-photos directory as
``user_<id>/memory_<id>/<uuid><ext>``. ``process_image`` turns a staged
upload into ``<base_name>.webp`` next to it and removes the original; the
delete helpers remove files again and prune memory directories that end up
empty.
"""

import logging
import os
import uuid
from typing import Iterable, List, Optional, Union

from PIL import Image, UnidentifiedImageError

from ..core.config import settings
from ..core.models import DirectoryStats, ImageMetadata, ProcessedImage

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _is_path(value) -> bool:
    return isinstance(value, (str, os.PathLike)) and bool(os.fspath(value))


def ensure_dir(dir_path: PathLike) -> PathLike:
    """Create `dir_path` (and parents) when missing and return it unchanged."""
    if not os.path.exists(dir_path):
        os.makedirs(dir_path, exist_ok=True)
    return dir_path


def ensure_directories_exist(
    directories: Iterable[PathLike] = (),
    silent: bool = False,
    recursive: bool = True,
) -> DirectoryStats:
    """Make sure every directory in `directories` exists.

    Failures are counted rather than raised so a single unwritable path
    does not stop the rest from being provisioned.
    """
    stats = DirectoryStats()

    if not silent:
        logger.info("Ensuring required directories exist...")

    for directory in directories:
        try:
            if not os.path.exists(directory):
                if recursive:
                    os.makedirs(directory)
                else:
                    os.mkdir(directory)
                stats.created += 1
                if not silent:
                    logger.info(f"Created directory: {directory}")
            else:
                stats.existing += 1
                if not silent:
                    logger.info(f"Directory already exists: {directory}")
        except (OSError, TypeError, ValueError) as e:
            stats.failed += 1
            if not silent:
                logger.error(f"Failed to create directory: {directory}: {e}")

    if not silent:
        logger.info("Directory check completed.")
    return stats


def get_upload_dir(user_id, memory_id) -> str:
    """Return (and create) the staging directory for one memory's uploads."""
    base_upload_dir = settings.upload_dir or settings.temp_photos_dir
    memory_dir = os.path.join(base_upload_dir, f"user_{user_id}", f"memory_{memory_id}")
    return ensure_dir(memory_dir)


def generate_unique_filename(original_name: str) -> str:
    _, ext = os.path.splitext(original_name or "")
    return f"{uuid.uuid4()}{ext.lower()}"


def _webp_ready(img: Image.Image) -> Image.Image:
    # WebP only encodes RGB and RGBA
    if img.mode in ("RGB", "RGBA"):
        return img
    if img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        return img.convert("RGBA")
    return img.convert("RGB")


def _write_webp(img: Image.Image, path: str, quality: int) -> None:
    img.save(path, format="WEBP", quality=quality)


def process_image(
    input_path: PathLike,
    target_dir: Optional[PathLike] = None,
    base_name: Optional[str] = None,
    width: int = 2000,
    height: int = 2000,
    quality: int = 85,
) -> ProcessedImage:
    """Resize `input_path` into `<target_dir>/<base_name>.webp`.

    The image is scaled to fit inside `width` x `height` without ever being
    enlarged. On success the original is deleted. On failure a partially
    written output is deleted, the original is left alone and the error is
    re-raised.

    The returned metadata carries the source dimensions and format along
    with the size of the written WebP file.
    """
    logger.debug(
        f"process_image called with input_path={input_path} target_dir={target_dir} "
        f"base_name={base_name} width={width} height={height} quality={quality}"
    )

    if not target_dir or not base_name:
        logger.error("process_image requires target_dir and base_name")
        raise ValueError("target_dir_and_base_name_required")

    optimized_path = os.path.join(os.fspath(target_dir), f"{base_name}.webp")
    if os.path.abspath(os.fspath(input_path)) == os.path.abspath(optimized_path):
        logger.error(f"Refusing to overwrite the source image in place: {input_path}")
        raise ValueError("input_path_is_output_path")

    ensure_dir(target_dir)
    logger.debug(f"Optimized path will be: {optimized_path}")

    try:
        try:
            img = Image.open(input_path)
        except Exception as e:
            logger.error(f"Error retrieving metadata for {input_path}: {e}")
            raise

        with img:
            try:
                img.load()
            except OSError as e:
                # Header parsed but the pixel data is truncated or corrupt
                logger.error(f"Error decoding {input_path}: {e}")
                raise UnidentifiedImageError(f"cannot decode image file {input_path}: {e}") from e

            original_width, original_height = img.size
            original_format = (img.format or "").lower() or None
            logger.debug(
                f"Read metadata for {input_path}: {original_width}x{original_height} {original_format}"
            )

            out = _webp_ready(img)
            out.thumbnail((width, height), Image.LANCZOS)
            _write_webp(out, optimized_path, quality)
        logger.info(f"Processed {input_path} into {optimized_path}")

        if os.path.exists(input_path):
            logger.debug(f"Deleting original temporary file: {input_path}")
            os.remove(input_path)

        new_size = os.stat(optimized_path).st_size
        logger.debug(f"New file size: {new_size} bytes")

        return ProcessedImage(
            processed_path=optimized_path,
            metadata=ImageMetadata(
                width=original_width,
                height=original_height,
                format="webp",
                original_format=original_format,
                size=new_size,
            ),
        )
    except Exception as e:
        logger.error(f"Error during image processing for {input_path}: {e}")
        if os.path.exists(optimized_path):
            logger.info(f"Cleaning up partially created file: {optimized_path}")
            os.remove(optimized_path)
        raise


def delete_files(files: Union[PathLike, List[PathLike], None]) -> None:
    """Best-effort removal of one path or a list of paths.

    Entries that are not paths are skipped and errors are only logged.
    """
    if not isinstance(files, (list, tuple)):
        files = [files]

    for file_path in files:
        if not _is_path(file_path):
            continue
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
        except OSError as e:
            logger.error(f"Error deleting file {file_path}: {e}")


def delete_file(file_path: Optional[PathLike]) -> bool:
    """Delete a single file.

    Returns True when a file was removed and False when there was nothing
    to remove. Errors from the removal itself propagate.
    """
    if not _is_path(file_path):
        return False
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            return True
        return False
    except OSError as e:
        logger.error(f"Error deleting file {file_path}: {e}")
        raise


def delete_file_and_empty_parent(file_path: Optional[PathLike]) -> None:
    """Delete `file_path`, then its parent directory if nothing is left in it."""
    if not _is_path(file_path):
        return
    try:
        if not os.path.exists(file_path):
            return

        try:
            os.remove(file_path)
            logger.info(f"File deleted successfully: {file_path}")
        except OSError as e:
            logger.error(f"Failed to delete file: {file_path}: {e}")
            raise

        parent_dir = os.path.dirname(os.fspath(file_path))
        logger.debug(f"Checking parent directory: {parent_dir}")
        try:
            remaining = os.listdir(parent_dir)
        except OSError as e:
            logger.error(f"Failed to read directory contents: {parent_dir}: {e}")
            raise
        logger.debug(f"Remaining files in {parent_dir}: {remaining}")

        if not remaining:
            try:
                os.rmdir(parent_dir)
            except OSError as e:
                logger.error(f"Failed to delete folder: {parent_dir}: {e}")
                raise
            logger.info(f"Removed empty directory: {parent_dir}")
    except OSError as e:
        logger.error(f"Error deleting file or directory {file_path}: {e}")
        raise


def remove_dir_if_empty(dir_path: Optional[PathLike]) -> bool:
    """Best-effort removal of `dir_path` when it holds no entries.

    Returns True when the directory was removed. Errors are only logged.
    """
    if not _is_path(dir_path):
        return False
    try:
        if os.path.isdir(dir_path) and not os.listdir(dir_path):
            os.rmdir(dir_path)
            logger.info(f"Removed empty directory: {dir_path}")
            return True
    except OSError as e:
        logger.warning(f"Could not remove directory {dir_path}: {e}")
    return False
