"""
Local attachment store for story cover images.

Files live under UPLOAD_DIR/covers and are served by main.py at
/static/covers. The database only keeps the relative locator.
"""

import os
import uuid
from pathlib import Path

from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)

COVERS_SUBDIR = "covers"
ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
MAX_COVER_BYTES = 5 * 1024 * 1024


def covers_dir() -> Path:
    path = Path(settings.upload_dir) / COVERS_SUBDIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_cover(story_id: int, data: bytes, content_type: str) -> str:
    """Write the image and return its locator (e.g. "covers/story_1_ab12.png")."""
    suffix = ALLOWED_CONTENT_TYPES[content_type]
    filename = f"story_{story_id}_{uuid.uuid4().hex[:8]}{suffix}"
    with open(covers_dir() / filename, "wb") as f:
        f.write(data)
    logger.info(f"Saved cover {filename} for story {story_id}")
    return f"{COVERS_SUBDIR}/{filename}"


def url_for(locator: str) -> str:
    return f"/static/{locator}"


def delete_file(locator: str) -> None:
    path = Path(settings.upload_dir) / locator
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning(f"Attachment already gone: {locator}")
