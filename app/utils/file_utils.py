"""
Upload validation and temp file handling for images bound for the media host.
"""

import io
import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.config import get_settings
from app.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


class FileValidator:
    """Checks that an upload is a real, reasonably sized image."""

    SUPPORTED_FORMATS = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp'],
        'image/gif': ['.gif'],
    }

    PIL_FORMATS = {
        'image/jpeg': 'jpeg',
        'image/png': 'png',
        'image/webp': 'webp',
        'image/gif': 'gif',
    }

    @classmethod
    def validate_file_extension(cls, filename: str) -> str:
        if not filename:
            raise ValidationError("Filename is required")

        extension = Path(filename).suffix.lower()
        supported_extensions = [ext for exts in cls.SUPPORTED_FORMATS.values() for ext in exts]
        if extension not in supported_extensions:
            raise ValidationError(
                f"File extension '{extension or '(none)'}' not supported. "
                f"Supported extensions: {', '.join(supported_extensions)}"
            )
        return extension

    @classmethod
    def validate_mime_type(cls, mime_type: str) -> str:
        allowed = get_settings().allowed_file_types
        if mime_type not in allowed or mime_type not in cls.SUPPORTED_FORMATS:
            raise ValidationError(
                f"MIME type '{mime_type or '(none)'}' not supported. "
                f"Supported types: {', '.join(allowed)}"
            )
        return mime_type

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: Optional[int] = None) -> int:
        if file_size <= 0:
            raise ValidationError("File is empty")

        max_allowed = max_size or get_settings().max_file_size
        if file_size > max_allowed:
            max_mb = max_allowed / (1024 * 1024)
            actual_mb = file_size / (1024 * 1024)
            raise ValidationError(
                f"File size ({actual_mb:.1f}MB) exceeds maximum allowed size ({max_mb:.1f}MB)"
            )
        return file_size

    @classmethod
    async def read_and_validate(cls, file: UploadFile) -> Tuple[bytes, str]:
        """
        Read an upload and verify it.

        Returns:
            Tuple of (file bytes, lowercase extension)

        Raises:
            ValidationError: If any check fails
        """
        extension = cls.validate_file_extension(file.filename or "")
        mime_type = cls.validate_mime_type(file.content_type or "")

        if extension not in cls.SUPPORTED_FORMATS[mime_type]:
            raise ValidationError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )

        await file.seek(0)
        content = await file.read()
        await file.seek(0)

        cls.validate_file_size(len(content))

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                pil_format = (img.format or "").lower()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

        if pil_format != cls.PIL_FORMATS[mime_type]:
            raise ValidationError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        return content, extension


async def write_temp_file(content: bytes, suffix: str, directory: Optional[str] = None) -> Path:
    """
    Write bytes to a uniquely named file in the temp upload directory.
    A partially written file is removed before the error propagates.
    """
    base_dir = Path(directory or get_settings().upload_temp_dir)
    base_dir.mkdir(parents=True, exist_ok=True)
    file_path = base_dir / f"{uuid.uuid4().hex}{suffix}"

    try:
        async with aiofiles.open(file_path, 'wb') as f:
            await f.write(content)
    except Exception:
        remove_temp_file(file_path)
        raise

    return file_path


def remove_temp_file(file_path: Path) -> bool:
    """Delete a temp file if present. Failures are logged, not raised."""
    try:
        if file_path.exists():
            file_path.unlink()
            return True
        return False
    except OSError as e:
        logger.warning(f"Could not remove temp file {file_path}: {e}")
        return False
