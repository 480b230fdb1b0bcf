"""
File Upload Handler - material attachments on local disk

- Stored under UPLOAD_DIR with a random name (never the client's filename)
- Referenced publicly as UPLOAD_URL_PREFIX/<name>; that URL is what the
  material row keeps as fileUrl
- Deletions are best-effort: failures are logged, never raised

Usage:
    handler = FileUploadHandler(settings.UPLOAD_PATH)

    stored = await handler.save(upload)        # StoredFile(name, path, url, size)
    await handler.discard(stored.path)         # validation failed afterwards
    await handler.remove_by_url(material.file_url)
"""

import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    StorageError,
    UploadedFileNotFoundError,
)
from app.core.logging_config import logger

CHUNK_SIZE = 64 * 1024


@dataclass
class StoredFile:
    name: str
    path: Path
    url: str
    size: int


class FileUploadHandler:
    """Writes, resolves and removes uploaded files inside one directory"""

    def __init__(
        self,
        upload_dir: Path,
        url_prefix: str = settings.UPLOAD_URL_PREFIX,
        max_size: int = settings.MAX_UPLOAD_SIZE,
        allowed_extensions: Optional[Iterable[str]] = None,
    ):
        self.upload_dir = Path(upload_dir).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_size = max_size
        if allowed_extensions is None:
            allowed_extensions = settings.ALLOWED_EXTENSIONS
        self.allowed_extensions = sorted({ext.lower().lstrip(".") for ext in allowed_extensions})

    def ensure_directory(self) -> None:
        """Create the upload directory on first use"""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def url_for(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    def _extension(self, filename: Optional[str]) -> str:
        suffix = PurePosixPath(filename or "").suffix
        return suffix.lower().lstrip(".")

    def check_extension(self, filename: Optional[str]) -> str:
        """Return the lowercased extension or raise InvalidFileTypeError"""
        ext = self._extension(filename)
        if self.allowed_extensions and ext not in self.allowed_extensions:
            raise InvalidFileTypeError(ext or "(none)", self.allowed_extensions)
        return ext

    async def save(self, upload: UploadFile) -> StoredFile:
        """
        Stream ``upload`` to disk under a collision-resistant name.

        Raises InvalidFileTypeError / FileTooLargeError (400) for rejected
        files and StorageError (500) when the write itself fails. A partially
        written file is removed before raising.
        """
        ext = self.check_extension(upload.filename)
        name = uuid.uuid4().hex + (f".{ext}" if ext else "")
        path = self.upload_dir / name

        self.ensure_directory()
        size = 0
        try:
            async with aiofiles.open(path, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise FileTooLargeError(self.max_size)
                    await out.write(chunk)
        except FileTooLargeError:
            await self.discard(path)
            raise
        except OSError as e:
            logger.error(f"[Upload] Failed to write {name}: {e}")
            await self.discard(path)
            raise StorageError("Failed to store uploaded file") from e

        logger.info(
            f"[Upload] Stored {upload.filename!r} as {name} ({size} bytes)",
            extra={"upload_name": name, "upload_size": size},
        )
        return StoredFile(name=name, path=path, url=self.url_for(name), size=size)

    async def discard(self, path: Path) -> bool:
        """Best-effort delete; returns True if a file was removed"""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"[Upload] Could not delete {path}: {e}")
            return False
        logger.info(f"[Upload] Deleted {path.name}")
        return True

    def is_upload_url(self, url: Optional[str]) -> bool:
        """True for URLs under the upload prefix, which only save() may mint"""
        return bool(url) and url.startswith(self.url_prefix + "/")

    def path_for_url(self, url: Optional[str]) -> Optional[Path]:
        """Map a fileUrl back to its file, None for external or foreign URLs"""
        if not self.is_upload_url(url):
            return None
        name = url[len(self.url_prefix) + 1:]
        try:
            return self.resolve(name)
        except UploadedFileNotFoundError:
            return None

    async def remove_by_url(self, url: Optional[str]) -> bool:
        """Best-effort removal of the file behind a material's fileUrl"""
        path = self.path_for_url(url)
        if path is None:
            return False
        return await self.discard(path)

    def resolve(self, name: str) -> Path:
        """
        Path of an uploaded file, confined to the upload directory.

        Raises UploadedFileNotFoundError for separators, traversal or any
        name that would resolve outside the directory. Existence is not
        checked here.
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise UploadedFileNotFoundError(name)
        path = (self.upload_dir / name).resolve()
        if path.parent != self.upload_dir:
            raise UploadedFileNotFoundError(name)
        return path


def build_upload_handler() -> FileUploadHandler:
    return FileUploadHandler(
        settings.UPLOAD_PATH,
        url_prefix=settings.UPLOAD_URL_PREFIX,
        max_size=settings.MAX_UPLOAD_SIZE,
        allowed_extensions=settings.ALLOWED_EXTENSIONS,
    )
