"""
Prescription image storage.

Files land in <UPLOAD_DIR>/prescriptions/<uuid4><ext>. The database keeps the
public path (/uploads/prescriptions/<file>); absolute paths never leave the
server.
"""
import logging
import os
import uuid
from pathlib import Path

from medbill.core.config import settings
from medbill.core.exceptions import NotFoundError, UploadError

logger = logging.getLogger(__name__)

PUBLIC_PREFIXES = {"prescription": "/uploads/prescriptions"}
SUBDIRS = {"prescription": "prescriptions"}
MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}


def _storage_dir(kind: str) -> Path:
    if kind not in SUBDIRS:
        raise ValueError(f"Invalid file type: {kind}")
    directory = Path(settings.UPLOAD_DIR) / SUBDIRS[kind]
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_public_file_path(filename: str, kind: str = "prescription") -> str:
    if kind not in PUBLIC_PREFIXES:
        raise ValueError(f"Invalid file type: {kind}")
    return f"{PUBLIC_PREFIXES[kind]}/{filename}"


def get_absolute_file_path(filename: str, kind: str = "prescription") -> Path:
    # basename() keeps a crafted name from escaping the upload directory
    return _storage_dir(kind) / os.path.basename(filename)


def resolve_public_path(public_path: str, kind: str = "prescription") -> Path:
    """Map a stored public path back to the file on disk."""
    path = get_absolute_file_path(public_path.rsplit("/", 1)[-1], kind)
    if not path.is_file():
        raise NotFoundError("File not found")
    return path


def save_prescription_image(content: bytes, content_type: str, original_filename: str = "") -> str:
    """
    Validate and store an uploaded prescription image.

    Returns:
        Public path of the stored file

    Raises:
        UploadError: wrong content type, empty file, or file over MAX_UPLOAD_BYTES
    """
    if content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise UploadError("Invalid file type. Only JPEG, PNG, JPG and GIF files are allowed.")
    if not content:
        raise UploadError("Uploaded file is empty")
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise UploadError(f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.")

    ext = Path(original_filename).suffix.lower()
    if ext not in IMAGE_EXTENSIONS:
        ext = MIME_EXTENSIONS[content_type]
    filename = f"{uuid.uuid4()}{ext}"
    destination = get_absolute_file_path(filename)
    destination.write_bytes(content)

    logger.info(f"[UPLOAD] Stored prescription image {filename} ({len(content)} bytes)")
    return get_public_file_path(filename)


def discard(public_path: str, kind: str = "prescription") -> None:
    """Remove a stored file whose database record could not be written."""
    path = get_absolute_file_path(public_path.rsplit("/", 1)[-1], kind)
    path.unlink(missing_ok=True)
    logger.info(f"[UPLOAD] Discarded {path.name}")
