"""Identity document uploads attached to appointments."""

from __future__ import annotations

import logging
import re
import secrets
from pathlib import Path

from fastapi import UploadFile, status

from src.core.exceptions import BusinessLogicError
from src.modules.appointments.models import DocumentFile

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png"})
CHUNK_SIZE = 64 * 1024

_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def ensure_allowed_type(upload: UploadFile) -> None:
    if upload.content_type not in ALLOWED_MIME_TYPES:
        logger.info("Rejected upload %r with type %s", upload.filename, upload.content_type)
        raise BusinessLogicError(
            "Invalid file type. Upload PDF or JPG/PNG image.",
            status.HTTP_400_BAD_REQUEST,
        )


def _stored_name(original_name: str) -> str:
    suffix = Path(original_name).suffix
    if not _SAFE_SUFFIX.match(suffix):
        suffix = ""
    return f"{secrets.token_hex(16)}{suffix.lower()}"


async def save_document(upload: UploadFile, uploads_dir: Path, max_bytes: int) -> DocumentFile:
    """Stream ``upload`` to a randomly named file, enforcing type and size."""
    ensure_allowed_type(upload)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    original_name = upload.filename or "document"
    target = uploads_dir / _stored_name(original_name)

    size = 0
    try:
        with open(target, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    logger.info("Rejected upload %r larger than %d bytes", original_name, max_bytes)
                    raise BusinessLogicError(
                        f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB.",
                        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    )
                out.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise

    return DocumentFile(
        original_name=original_name,
        file_name=target.name,
        mime_type=upload.content_type,
        size=size,
    )


def discard_document(document_file: DocumentFile, uploads_dir: Path) -> None:
    (uploads_dir / document_file.file_name).unlink(missing_ok=True)
