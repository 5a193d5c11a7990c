"""Local file storage for uploaded documents"""

import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from leasedocs.errors import NotFoundError, ValidationError
from leasedocs.utils.config import get_settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"pdf", "doc", "docx"}

URL_PREFIX = "/uploads/"


class FileStorage:
    """Stores uploaded bytes under a directory and hands back a URL.

    URLs look like /uploads/<id>.<ext>; only the file name part is ever used
    to locate the file, so a URL cannot point outside the storage root.
    """

    def __init__(self, root: Optional[str] = None, max_bytes: Optional[int] = None):
        settings = get_settings()
        self.root = Path(root or settings.storage_path)
        self.max_bytes = max_bytes or settings.max_upload_bytes
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def extension(filename: str) -> str:
        return Path(filename).suffix.lstrip(".").lower()

    def _path(self, file_url: str) -> Path:
        return self.root / Path(file_url).name

    def save(self, filename: str, data: bytes) -> str:
        """Validate and store an upload. Returns its URL."""
        ext = self.extension(filename)
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"Invalid file type: .{ext or '?'}. Only PDF, DOC and DOCX files are allowed.",
                field="file",
            )
        if not data:
            raise ValidationError("Uploaded file is empty", field="file")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File is {len(data)} bytes; the limit is {self.max_bytes} bytes",
                field="file",
            )

        stored_name = f"{uuid4()}.{ext}"
        (self.root / stored_name).write_bytes(data)
        logger.info(f"Stored upload {filename} as {stored_name} ({len(data)} bytes)")
        return f"{URL_PREFIX}{stored_name}"

    def exists(self, file_url: str) -> bool:
        return self._path(file_url).is_file()

    def read(self, file_url: str) -> bytes:
        path = self._path(file_url)
        if not path.is_file():
            raise NotFoundError(f"File not found in storage: {file_url}")
        return path.read_bytes()

    def delete(self, file_url: str) -> bool:
        path = self._path(file_url)
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Deleted stored file {path.name}")
        return True
