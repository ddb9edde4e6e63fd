"""
Image upload handling.

Uploads arrive as base64 strings (optionally a full data: URL) in a JSON body,
are validated, and are written to the uploads directory under a generated
name.
"""
import base64
import binascii
import logging
import os
import random
import re
import time
from typing import Optional

import aiofiles

from govivid.shared.config import MAX_UPLOAD_BYTES
from govivid.shared.errors import BadRequest, InternalError, PayloadTooLarge, log_and_sanitize_error

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "webp", "gif", "svg"}
DEFAULT_EXTENSION = "png"

DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?:;[^,]*)?,", re.IGNORECASE)
UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9.-]")
URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def split_data_url(data: str) -> tuple[Optional[str], str]:
    """Strip a data: URL header, returning (mime type or None, base64 payload)."""
    match = DATA_URL_RE.match(data)
    if not match:
        return None, data
    return (match.group("mime") or None), data[match.end():]


def decode_base64(payload: str) -> bytes:
    """
    Strictly decode standard or URL-safe base64.

    Whitespace and missing padding are tolerated; any other character outside
    the alphabet raises binascii.Error.
    """
    compact = "".join(payload.split()).translate(URLSAFE_TO_STANDARD)
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact, validate=True)


def sanitize_filename(filename: Optional[str]) -> str:
    return UNSAFE_FILENAME_CHARS.sub("-", (filename or "").lower())


def extension_from_filename(filename: str) -> Optional[str]:
    _, ext = os.path.splitext(filename)
    return ext[1:] or None


def extension_from_mime(mime_type: Optional[str]) -> Optional[str]:
    if not mime_type or "/" not in mime_type:
        return None
    subtype = mime_type.split("/", 1)[1].split(";", 1)[0].strip().lower()
    # image/svg+xml -> svg
    subtype = subtype.split("+", 1)[0]
    return subtype or None


def choose_extension(filename: Optional[str], mime_type: Optional[str]) -> str:
    """Filename extension first, then the MIME subtype, then png; whitelisted."""
    ext = (
        extension_from_filename(sanitize_filename(filename))
        or extension_from_mime(mime_type)
        or DEFAULT_EXTENSION
    )
    return ext if ext in ALLOWED_EXTENSIONS else DEFAULT_EXTENSION


def generate_filename(ext: str) -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}.{ext}"


class UploadHandler:
    def __init__(self, upload_dir: str, base_url: str = "/uploads", max_bytes: int = MAX_UPLOAD_BYTES):
        self.upload_dir = upload_dir
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def decode(self, data, mime_type: Optional[str] = None) -> tuple[bytes, Optional[str]]:
        """
        Validate an upload payload and return (image bytes, mime type).

        Checks run in a fixed order: data present, image MIME type,
        decodable base64, size limit.
        """
        if not isinstance(data, str) or not data.strip():
            raise BadRequest("Image data is required")

        url_mime, payload = split_data_url(data.strip())
        mime_type = mime_type or url_mime
        if mime_type and not mime_type.lower().startswith("image/"):
            raise BadRequest("Only image uploads are allowed")

        try:
            contents = decode_base64(payload)
        except (binascii.Error, ValueError):
            raise BadRequest("Invalid image data")
        if not contents:
            raise BadRequest("Invalid image data")

        if len(contents) > self.max_bytes:
            raise PayloadTooLarge(
                f"Image exceeds {self.max_bytes // (1024 * 1024)} MB limit"
            )

        return contents, mime_type

    async def save(self, data, filename: Optional[str] = None, mime_type: Optional[str] = None) -> dict:
        """Validate and store an upload. Returns {"ok", "url", "filename"}."""
        contents, mime_type = self.decode(data, mime_type)

        stored_name = generate_filename(choose_extension(filename, mime_type))
        filepath = os.path.join(self.upload_dir, stored_name)

        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            async with aiofiles.open(filepath, "wb") as f:
                await f.write(contents)
        except OSError as e:
            message, _ = log_and_sanitize_error(e, "Image upload", "Failed to save image")
            raise InternalError(message)

        logger.info(f"Uploaded image: {stored_name} ({len(contents)} bytes)")

        return {
            "ok": True,
            "url": f"{self.base_url}/{stored_name}",
            "filename": stored_name,
        }
