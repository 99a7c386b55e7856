"""
Multipart upload intake.

Reads FastAPI UploadFile parts into in-memory attachments after checking
type and size, so that a bad file is rejected before any remote call.
"""

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from src.services.media_store import Attachment
from src.utils.constants import config
from src.utils.errors import ValidationError

logger = logging.getLogger(__name__)


async def read_attachment(file: Optional[UploadFile], field_name: str) -> Optional[Attachment]:
    """
    Read one uploaded file.

    Args:
        file: Uploaded file part, or None when the part was not sent
        field_name: Multipart field name used in error messages

    Returns:
        Attachment, or None when no file was sent

    Raises:
        ValidationError: On unsupported type or oversized file
    """
    if file is None or not file.filename:
        return None

    extension = Path(file.filename).suffix.lower()
    content_type = (file.content_type or "").lower()

    if (
        extension not in config.ALLOWED_UPLOAD_EXTENSIONS
        or content_type not in config.ALLOWED_UPLOAD_CONTENT_TYPES
    ):
        raise ValidationError(
            f"Unsupported file type for '{field_name}': {file.filename}. Images and PDFs only"
        )

    data = await file.read()
    max_bytes = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(data) > max_bytes:
        raise ValidationError(
            f"File '{file.filename}' exceeds the {config.MAX_UPLOAD_SIZE_MB}MB limit"
        )

    logger.debug(f"Accepted upload {file.filename} ({len(data)} bytes) for {field_name}")
    return Attachment(data=data, filename=file.filename, content_type=content_type)


async def read_attachments(files: Optional[List[UploadFile]], field_name: str) -> List[Attachment]:
    """Read a repeated file part, skipping empty slots."""
    attachments = []
    for file in files or []:
        attachment = await read_attachment(file, field_name)
        if attachment is not None:
            attachments.append(attachment)
    return attachments
