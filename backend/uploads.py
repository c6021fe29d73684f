import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from .config import settings
from .errors import NotFound, PayloadTooLarge

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
_CHUNK = 64 * 1024


@dataclass
class StoredFile:
    stored_name: str
    original_name: str
    public_url: str
    size: int


def secure_filename(filename: str) -> str:
    """Sanitizes a filename to be safe for storage."""
    # Remove directory traversal attempts
    filename = Path(filename.replace("\\", "/")).name.lstrip("./\\")
    # Keep only-safe characters
    return re.sub(r"[^a-zA-Z0-9_.-]", "_", filename) or "file"


def generate_stored_name(original_name: str) -> str:
    """``<epoch millis>-<9 random digits>-<sanitized original>``"""
    suffix = secrets.randbelow(10**9)
    # keep the tail so the extension survives truncation
    safe = secure_filename(original_name)[-200:]
    return f"{int(time.time() * 1000)}-{suffix:09d}-{safe}"


def uploads_dir() -> Path:
    path = settings.uploads_dir
    path.mkdir(parents=True, exist_ok=True)
    return path


def public_url(stored_name: str) -> str:
    return f"{settings.backend_url}{PUBLIC_PREFIX}/{stored_name}"


async def read_limited(upload: UploadFile, limit: int) -> bytes:
    """Read at most ``limit + 1`` bytes so an oversize file is detected without buffering it all."""
    data = bytearray()
    while len(data) <= limit:
        chunk = await upload.read(min(_CHUNK, limit + 1 - len(data)))
        if not chunk:
            break
        data.extend(chunk)
    return bytes(data)


async def store(data: bytes, original_name: str, size_limit: int | None = None) -> StoredFile:
    """Persist ``data`` under a fresh collision-resistant name.

    Nothing is written when the payload exceeds ``size_limit``.
    """
    limit = settings.max_upload_bytes if size_limit is None else size_limit
    if len(data) > limit:
        logger.info("Rejected upload %r: %d bytes exceeds %d", original_name, len(data), limit)
        raise PayloadTooLarge(f"File exceeds the {limit} byte limit")

    directory = uploads_dir()
    stored_name = generate_stored_name(original_name)
    file_path = directory / stored_name
    while file_path.exists():
        stored_name = generate_stored_name(original_name)
        file_path = directory / stored_name

    try:
        async with aiofiles.open(file_path, "wb") as out_file:
            await out_file.write(data)
    except OSError:
        file_path.unlink(missing_ok=True)
        raise

    logger.info("Stored upload %s (%d bytes)", stored_name, len(data))
    return StoredFile(
        stored_name=stored_name,
        original_name=original_name[:255],
        public_url=public_url(stored_name),
        size=len(data),
    )


def discard(stored_name: str) -> None:
    """Remove a stored artifact whose metadata never got committed."""
    (settings.uploads_dir / secure_filename(stored_name)).unlink(missing_ok=True)


def resolve(stored_name: str) -> Path:
    """Path of a previously stored file, for static serving."""
    safe = secure_filename(stored_name)
    file_path = settings.uploads_dir / safe
    if safe != stored_name or not file_path.is_file():
        raise NotFound("File not found")
    return file_path
