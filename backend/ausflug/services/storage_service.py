"""
Image upload storage on the local filesystem
"""

import base64
import binascii
import re
import secrets
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from loguru import logger

from ausflug.core.config import settings
from ausflug.core.errors import ValidationError

IMAGE_URL_PREFIX = "/uploads/images/"

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)


def images_dir() -> Path:
    path = Path(settings.UPLOAD_DIR) / "images"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _matches_signature(data: bytes, mime_type: str) -> bool:
    if mime_type == "image/jpeg":
        return data[:3] == b"\xff\xd8\xff"
    if mime_type == "image/png":
        return data[:4] == b"\x89PNG"
    if mime_type == "image/gif":
        return data[:3] == b"GIF"
    if mime_type == "image/webp":
        return data[:4] == b"RIFF" and data[8:12] == b"WEBP"
    return False


def validate_image(data: bytes, mime_type: str) -> None:
    """Raise ValidationError unless data is an allowed image within the size limit"""
    if not data:
        raise ValidationError("Leere Datei")
    if len(data) > settings.MAX_IMAGE_SIZE:
        max_mb = settings.MAX_IMAGE_SIZE / (1024 * 1024)
        raise ValidationError(f"Datei ist zu gross (max. {max_mb:.0f} MB)")
    if mime_type not in settings.ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Dateityp {mime_type} ist nicht erlaubt")
    if not _matches_signature(data, mime_type):
        raise ValidationError("Dateiinhalt entspricht nicht dem angegebenen Bildtyp")


def sanitize_filename(filename: Optional[str], mime_type: str) -> str:
    """Lowercase, replace unsafe characters and prefix a random token"""
    extension = _EXTENSIONS.get(mime_type, "jpg")
    token = secrets.token_hex(8)
    if not filename:
        return f"image-{token}.{extension}"
    name = re.sub(r"[^a-z0-9.-]", "_", Path(filename).name.lower()).lstrip(".")
    if not name:
        return f"image-{token}.{extension}"
    if "." not in name:
        name = f"{name}.{extension}"
    return f"{token}-{name}"


def _write(data: bytes, filename: str) -> dict:
    target = images_dir() / filename
    target.write_bytes(data)
    logger.info(f"🖼️ Image stored: {filename} ({len(data)} bytes)")
    return {"path": f"{IMAGE_URL_PREFIX}{filename}", "filename": filename}


def save_base64_image(data_url: str, filename: Optional[str] = None) -> dict:
    match = _DATA_URL.match(data_url.strip())
    if not match:
        raise ValidationError("Ungültige Bilddaten (data URL erwartet)")
    mime_type = match.group("mime").lower()
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Ungültige Base64-Daten")
    validate_image(data, mime_type)
    return _write(data, sanitize_filename(filename, mime_type))


async def save_upload(upload: UploadFile) -> dict:
    mime_type = (upload.content_type or "").lower()
    data = await upload.read(settings.MAX_IMAGE_SIZE + 1)
    validate_image(data, mime_type)
    return _write(data, sanitize_filename(upload.filename, mime_type))


def filename_from_url(url: Optional[str]) -> Optional[str]:
    if url and url.startswith(IMAGE_URL_PREFIX):
        return url[len(IMAGE_URL_PREFIX):]
    return None


def delete_image(filename: str) -> bool:
    """Delete a stored image; only names inside the image directory are accepted"""
    base = images_dir().resolve()
    target = (base / Path(filename).name).resolve()
    if target.parent != base:
        logger.warning(f"Refusing to delete file outside upload directory: {filename}")
        return False
    if not target.exists():
        logger.warning(f"Image to delete not found: {filename}")
        return False
    target.unlink()
    logger.info(f"🗑️ Image deleted: {target.name}")
    return True
