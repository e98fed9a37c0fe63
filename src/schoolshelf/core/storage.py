"""Local file storage for uploaded PDFs and images.

Files live under ``<root>/pdfs`` and ``<root>/images`` and are served back
at ``/uploads/pdfs/...`` and ``/uploads/images/...``.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from schoolshelf.core.errors import BadRequestError

logger = structlog.get_logger(__name__)

URL_PREFIX = "/uploads"


class UploadKind(str, Enum):
    """Upload category; the value is the storage subdirectory."""

    PDF = "pdfs"
    IMAGE = "images"

    def accepts(self, content_type: str | None) -> bool:
        content_type = (content_type or "").lower()
        if self is UploadKind.PDF:
            return content_type == "application/pdf"
        return content_type.startswith("image/")


@dataclass
class StoredFile:
    filename: str
    original_name: str
    size: int
    url: str


class FileStorage:
    """Writes uploads under a root directory with collision-resistant names."""

    def __init__(self, root: str | Path, max_bytes: int):
        self.root = Path(root)
        self.max_bytes = max_bytes

    def ensure_dirs(self) -> None:
        for kind in UploadKind:
            (self.root / kind.value).mkdir(parents=True, exist_ok=True)

    def save(
        self,
        kind: UploadKind,
        field_name: str,
        original_name: str,
        content_type: str | None,
        data: bytes,
    ) -> StoredFile:
        """Validate and write one uploaded file.

        Raises:
            BadRequestError: If the content type is not accepted or the file
                is empty or too large
        """
        if not kind.accepts(content_type):
            expected = "PDF" if kind is UploadKind.PDF else "image"
            raise BadRequestError(f"Unsupported file type: only {expected} files are allowed")
        if not data:
            raise BadRequestError("No file uploaded")
        if len(data) > self.max_bytes:
            raise BadRequestError(f"File exceeds the maximum size of {self.max_bytes} bytes")

        suffix = Path(original_name).suffix.lower()
        filename = f"{field_name}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

        target_dir = self.root / kind.value
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(data)

        url = f"{URL_PREFIX}/{kind.value}/{filename}"
        logger.info("storage.saved", url=url, size=len(data))
        return StoredFile(filename=filename, original_name=original_name, size=len(data), url=url)

    def delete(self, url: str | None) -> bool:
        """Remove a stored file by its URL path.

        URLs outside the uploads prefix (external covers, empty values) are
        ignored. Returns True if a file was removed.
        """
        if not url or not url.startswith(f"{URL_PREFIX}/"):
            return False

        relative = url[len(URL_PREFIX) + 1:]
        path = (self.root / relative).resolve()
        if not path.is_relative_to(self.root.resolve()):
            logger.warning("storage.delete_outside_root", url=url)
            return False

        if not path.is_file():
            return False

        try:
            path.unlink()
        except OSError as e:
            logger.error("storage.delete_failed", url=url, error=str(e))
            return False

        logger.info("storage.deleted", url=url)
        return True
