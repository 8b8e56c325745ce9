"""Image uploads written to the local upload directory."""
import logging
import os
import time
import uuid
from contextlib import contextmanager
from typing import Optional

from fastapi import UploadFile

from errors import BadRequest

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

FIELD_PREFIXES = {
    "farmPhoto": "farmer",
    "profilePhoto": "user",
}


def has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


def upload_name(field: str, filename: str) -> str:
    prefix = FIELD_PREFIXES.get(field, "file")
    ext = os.path.splitext(filename)[1]
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"


def save_upload(upload: Optional[UploadFile], field: str, config) -> str:
    """Store an uploaded image and return its path, or ``""`` if nothing was sent."""
    if not has_file(upload):
        return ""
    if not (upload.content_type or "").startswith("image/"):
        raise BadRequest("Only image uploads are allowed")

    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    path = os.path.join(config.UPLOAD_DIR, upload_name(field, upload.filename))
    written = 0
    try:
        with open(path, "wb") as out:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > config.MAX_UPLOAD_BYTES:
                    raise BadRequest("File too large")
                out.write(chunk)
    except Exception:
        discard_upload(path)
        raise
    log.debug("Stored %s upload at %s (%d bytes)", field, path, written)
    return path


def discard_upload(path: Optional[str]):
    if path and os.path.exists(path):
        os.remove(path)
        log.info("Removed orphaned upload %s", path)


@contextmanager
def stored_upload(upload: Optional[UploadFile], field: str, config):
    """Yield the stored path; remove the file again if the block raises."""
    path = save_upload(upload, field, config)
    try:
        yield path
    except Exception:
        discard_upload(path)
        raise
