"""
app/services/avatar_service.py

Purpose: Avatar upload processing

- Spools the upload into TMP_DIR
- Resizes it to a square AVATAR_SIZE image (Pillow)
- Moves the result into the public avatars directory
- Points the user's avatarURL at it
"""

import asyncio
import shutil
from pathlib import Path
from typing import Any, Dict

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.services import user_service
from utils.avatar_utils import build_avatar_filename
from utils.constants import AVATARS_URL_PATH, UNSUPPORTED_IMAGE, UPLOAD_CHUNK_SIZE

logger = get_logger(__name__)


def ensure_storage_dirs():
    """
    Creates the temp and public avatar directories if missing.
    """
    Path(settings.TMP_DIR).mkdir(parents=True, exist_ok=True)
    Path(settings.AVATARS_DIR).mkdir(parents=True, exist_ok=True)


async def _spool_upload(upload: UploadFile, destination: Path):
    with destination.open("wb") as out:
        while True:
            chunk = await upload.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            out.write(chunk)


def resize_image(path: Path, size: int):
    """
    Resizes the image at path to size x size in place, keeping its format.

    Raises:
        UnidentifiedImageError: If the file is not a decodable image
    """
    with Image.open(path) as image:
        image_format = image.format
        resized = image.resize((size, size))
    resized.save(path, format=image_format)


async def replace_avatar(user: Dict[str, Any], upload: UploadFile) -> str:
    """
    Stores an uploaded avatar for the user and returns its public URL.

    Raises:
        BadRequestError: If the upload is not an image
        ResourceNotFoundError: If the user disappeared mid-request
    """
    user_id = str(user["_id"])

    with LogContext(user_id=user_id):
        if upload.content_type and not upload.content_type.startswith("image/"):
            logger.warning(f"Rejected avatar with content type {upload.content_type}")
            raise BadRequestError(UNSUPPORTED_IMAGE)

        ensure_storage_dirs()
        filename = build_avatar_filename(user_id, upload.filename)
        tmp_path = Path(settings.TMP_DIR) / filename
        final_path = Path(settings.AVATARS_DIR) / filename

        try:
            await _spool_upload(upload, tmp_path)
            try:
                await asyncio.to_thread(resize_image, tmp_path, settings.AVATAR_SIZE)
            except (UnidentifiedImageError, OSError, ValueError) as e:
                logger.warning(f"Could not process avatar upload: {e}")
                raise BadRequestError(UNSUPPORTED_IMAGE) from e

            # shutil.move handles TMP_DIR and AVATARS_DIR on different filesystems
            await asyncio.to_thread(shutil.move, str(tmp_path), str(final_path))
        finally:
            # Gone after a successful move; otherwise a partial upload
            tmp_path.unlink(missing_ok=True)

        avatar_url = f"{AVATARS_URL_PATH}/{filename}"
        updated = await user_service.update_avatar_url(user["_id"], avatar_url)
        if updated is None:
            final_path.unlink(missing_ok=True)
            raise ResourceNotFoundError("User not found")

        logger.info(f"Avatar stored as {filename}")
        return updated["avatarURL"]
