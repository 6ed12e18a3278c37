# utils/uploads.py
import logging
import random
import re
import time
from pathlib import Path

from fastapi import HTTPException, UploadFile

from config import settings

logger = logging.getLogger(__name__)

UPLOAD_DIR = Path(settings.UPLOAD_DIR)
# Public prefix under which UPLOAD_DIR is mounted
UPLOAD_URL_PREFIX = "/uploads"

ALLOWED_IMAGE_TYPES = re.compile(r"/(jpg|jpeg|png|gif)$")
CHUNK_SIZE = 64 * 1024


def ensure_upload_dir() -> Path:
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    return UPLOAD_DIR


def unique_filename(original_name: str) -> str:
    """product-<ms timestamp>-<random><ext>, same scheme for every upload."""
    ext = Path(original_name or "").suffix.lower()
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"product-{suffix}{ext}"


def save_product_image(file: UploadFile) -> str:
    """
    Store an uploaded image and return its public path (/uploads/<name>).

    Rejects non-image content types (400) and files over MAX_UPLOAD_BYTES (413).
    """
    if not file.content_type or not ALLOWED_IMAGE_TYPES.search(file.content_type):
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    ensure_upload_dir()
    filename = unique_filename(file.filename)
    save_path = UPLOAD_DIR / filename
    written = 0
    try:
        with open(save_path, "wb") as buffer:
            while True:
                chunk = file.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > settings.MAX_UPLOAD_BYTES:
                    break
                buffer.write(chunk)
    finally:
        file.file.close()

    if written > settings.MAX_UPLOAD_BYTES:
        save_path.unlink(missing_ok=True)
        raise HTTPException(status_code=413, detail="File too large (max 5MB)")

    logger.info("Stored product image %s (%s bytes)", filename, written)
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def remove_stored_file(photo_doc: str) -> None:
    """Delete the file behind an /uploads/... path; other values are left alone."""
    if not photo_doc or not photo_doc.startswith(UPLOAD_URL_PREFIX + "/"):
        return
    path = UPLOAD_DIR / Path(photo_doc).name
    if path.exists():
        path.unlink()
