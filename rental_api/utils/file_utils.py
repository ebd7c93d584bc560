"""
File upload utilities for validating images and documents before storage.
"""

import io
import uuid
from pathlib import Path
from typing import List, Optional
from PIL import Image, UnidentifiedImageError

from rental_api.config import get_settings
from rental_api.utils.exceptions import (
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

settings = get_settings()

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp"}


class FileValidator:
    """Utility class for file validation operations."""

    @staticmethod
    def validate_file_extension(filename: Optional[str], allowed_extensions: List[str]) -> str:
        """
        Validate file extension against an allow-list.

        Args:
            filename: Name of the uploaded file
            allowed_extensions: Lowercase extensions including the dot

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If the filename or extension is missing
            UnsupportedFileTypeError: If extension is not allowed
        """
        if not filename:
            raise FileUploadError("Filename is required")

        extension = Path(filename).suffix.lower()
        if not extension:
            raise FileUploadError("File must have an extension")

        if extension not in allowed_extensions:
            raise UnsupportedFileTypeError(extension, allowed_extensions)

        return extension

    @staticmethod
    def validate_file_size(file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            FileUploadError: If the file is empty
            FileSizeExceededError: If file size exceeds limit
        """
        if file_size <= 0:
            raise FileUploadError("File is empty")

        max_allowed = max_size or settings.max_file_size
        if file_size > max_allowed:
            raise FileSizeExceededError(file_size, max_allowed)

        return file_size

    @staticmethod
    def validate_image_content(content: bytes) -> None:
        """
        Make sure the bytes decode as an image.

        Raises:
            FileUploadError: If Pillow cannot identify the image
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file: {str(e)}")

    @staticmethod
    def generate_unique_filename(original_filename: str) -> str:
        """
        Generate a unique filename while preserving the extension.

        Args:
            original_filename: Original filename

        Returns:
            Unique filename with UUID
        """
        extension = Path(original_filename).suffix.lower()
        return f"{uuid.uuid4()}{extension}"
