"""
File storage service for property images, payment slips and generated documents.
Files live under the configured storage root and are addressed as /storage/<folder>/<name>.
"""

from pathlib import Path
from typing import List, Optional
import logging

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from rental_api.config import settings
from rental_api.utils.exceptions import FileUploadError
from rental_api.utils.file_utils import FileValidator, IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/storage"


class FileStorageService:
    """
    Stores uploaded and generated files on local disk.
    """

    IMAGE_FOLDER = "images"
    DOCUMENT_FOLDER = "documents"
    LEASE_FOLDER = "leases"

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.storage_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def to_public_path(self, folder: str, filename: str) -> str:
        return f"{PUBLIC_PREFIX}/{folder}/{filename}"

    def resolve(self, public_path: str) -> Path:
        """
        Map a stored path back to a location on disk.

        Args:
            public_path: Path returned by one of the save methods

        Returns:
            Absolute path inside the storage root

        Raises:
            FileUploadError: If the path escapes the storage root
        """
        relative = public_path
        if relative.startswith(PUBLIC_PREFIX + "/"):
            relative = relative[len(PUBLIC_PREFIX) + 1:]
        full_path = (self.base_dir / relative.lstrip("/")).resolve()
        if self.base_dir not in full_path.parents:
            raise FileUploadError("Invalid file path")
        return full_path

    async def save_upload(self, file: UploadFile, folder: str, allowed_extensions: List[str]) -> str:
        """
        Validate and store an uploaded file under a fresh unique name.

        Args:
            file: FastAPI UploadFile object
            folder: Target folder below the storage root
            allowed_extensions: Accepted file extensions

        Returns:
            Public path of the stored file

        Raises:
            FileUploadError: If the file is invalid or cannot be written
        """
        extension = FileValidator.validate_file_extension(file.filename, allowed_extensions)

        await file.seek(0)
        content = await file.read()
        FileValidator.validate_file_size(len(content))

        if extension in IMAGE_EXTENSIONS:
            FileValidator.validate_image_content(content)

        filename = FileValidator.generate_unique_filename(file.filename)
        return await self.save_bytes(content, folder, filename)

    async def save_image(self, file: UploadFile) -> str:
        return await self.save_upload(file, self.IMAGE_FOLDER, settings.allowed_image_extensions)

    async def save_document(self, file: UploadFile) -> str:
        return await self.save_upload(file, self.DOCUMENT_FOLDER, settings.allowed_document_extensions)

    async def save_bytes(self, content: bytes, folder: str, filename: str) -> str:
        """
        Write raw bytes to the storage root, replacing any existing file of the same name.

        Returns:
            Public path of the stored file
        """
        public_path = self.to_public_path(folder, filename)
        file_path = self.resolve(public_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            raise FileUploadError(f"Failed to save file: {str(e)}")

        logger.info(f"Stored file {public_path} ({len(content)} bytes)")
        return public_path

    async def delete_file(self, public_path: Optional[str]) -> bool:
        """
        Delete a stored file.

        Returns:
            True if file was deleted, False if it did not exist
        """
        if not public_path:
            return False
        file_path = self.resolve(public_path)
        if not await aiofiles.os.path.exists(file_path):
            return False
        await aiofiles.os.remove(file_path)
        logger.info(f"Deleted file {public_path}")
        return True

    async def get_file_bytes(self, public_path: Optional[str]) -> Optional[bytes]:
        """Read a stored file, or None if it does not exist."""
        if not public_path:
            return None
        file_path = self.resolve(public_path)
        if not await aiofiles.os.path.exists(file_path):
            return None
        async with aiofiles.open(file_path, "rb") as f:
            return await f.read()
