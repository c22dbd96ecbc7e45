"""File storage operations for document uploads."""

import hashlib
import re
import secrets
from datetime import datetime
from pathlib import Path

from alsader.errors import ValidationError


def get_extension(filename: str) -> str:
    """Lower-cased extension without the dot, empty string if there is none."""
    suffix = Path(filename).suffix
    return suffix[1:].lower() if suffix else ""


def validate_upload(filename: str, size: int, allowed_extensions: list[str], max_size: int) -> None:
    """Reject empty, oversized or disallowed uploads before anything is written.

    Raises:
        ValidationError: If the file cannot be accepted
    """
    if size == 0:
        raise ValidationError("Uploaded file is empty")
    if size > max_size:
        raise ValidationError(f"File size exceeds the maximum allowed size of {max_size} bytes")
    extension = get_extension(filename)
    if extension not in {ext.lower() for ext in allowed_extensions}:
        raise ValidationError(f"File type not allowed: '{extension or filename}'")


def build_storage_path(filename: str, at: datetime) -> str:
    """Random file name under a year/month directory, e.g. "2025/05/<32 hex>.pdf".

    The original name is kept only in the database.
    """
    extension = get_extension(filename)
    name = secrets.token_hex(16)
    if extension:
        name = f"{name}.{extension}"
    return f"{at:%Y}/{at:%m}/{name}"


def compute_content_hash(content: bytes) -> str:
    return hashlib.sha512(content).hexdigest()


def get_document_file_path(uploads_path: str, storage_path: str) -> Path:
    """Resolve a stored relative path, refusing anything that escapes uploads_path."""
    base = Path(uploads_path).resolve()
    file_path = (base / storage_path).resolve()
    if not file_path.is_relative_to(base):
        raise ValueError(f"Storage path escapes uploads directory: {storage_path}")
    return file_path


def write_document_file(uploads_path: str, storage_path: str, content: bytes) -> Path:
    """Write document file to disk and return its absolute path."""
    file_path = get_document_file_path(uploads_path, storage_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(content)
    return file_path


def remove_document_file(uploads_path: str, storage_path: str) -> None:
    get_document_file_path(uploads_path, storage_path).unlink(missing_ok=True)


def hash_file(file_path: Path) -> str:
    digest = hashlib.sha512()
    with file_path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def sanitize_filename(filename: str) -> str:
    """Make a user-supplied filename safe to echo back in a download.

    Drops directory components and leading dots, replaces characters outside
    word characters (Arabic letters included), spaces, dots and hyphens, and
    caps the length at 100 characters while keeping the extension.
    """
    filename = Path(filename.replace("\\", "/")).name.lstrip(".")

    sanitized = re.sub(r"[^\w\s.-]", "_", filename)
    sanitized = re.sub(r"_+", "_", sanitized)
    sanitized = re.sub(r"\s+", " ", sanitized).strip()

    if len(sanitized) > 100:
        name, dot, ext = sanitized.rpartition(".")
        if dot and len(ext) < 90:
            sanitized = f"{name[: 99 - len(ext)]}.{ext}"
        else:
            sanitized = sanitized[:100]

    if not re.sub(r"[\s._-]", "", sanitized):
        return "document"
    return sanitized
