"""
Upload storage for scan artifacts.

Files are stored flat under one directory as ``<epoch-ms>-<basename>``.
Downloads resolve names strictly inside that directory.
"""
from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class UploadError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UploadStorage:
    def __init__(self, directory: str | os.PathLike, max_bytes: int):
        self.directory = Path(directory)
        self.max_bytes = max_bytes

    @staticmethod
    def _basename(filename: Optional[str]) -> str:
        return os.path.basename((filename or "").replace("\\", "/")).strip()

    def save(self, filename: Optional[str], stream: BinaryIO) -> Tuple[str, Path]:
        """Copy ``stream`` to a new file and return ``(stored_name, path)``.

        Raises UploadError for a missing name (400) or an oversize body (413);
        a partially written file is removed, also when reading or writing fails.
        """
        base = self._basename(filename)
        if not base or base in (".", ".."):
            raise UploadError("No file uploaded", 400)
        self.directory.mkdir(parents=True, exist_ok=True)
        stored_name = f"{int(time.time() * 1000)}-{base}"
        target = self.directory / stored_name
        written = 0
        try:
            with open(target, "wb") as out:
                while True:
                    chunk = stream.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        break
                    out.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        if written > self.max_bytes:
            target.unlink(missing_ok=True)
            logger.warning("upload_rejected: name=%s limit=%d", base, self.max_bytes)
            raise UploadError("File too large", 413)
        logger.info("upload_stored: name=%s bytes=%d", stored_name, written)
        return stored_name, target

    def resolve(self, name: str) -> Optional[Path]:
        """Path of a stored file, or None when it is missing or outside the directory."""
        if not name or self._basename(name) != name or name in (".", ".."):
            return None
        candidate = (self.directory / name).resolve()
        root = self.directory.resolve()
        if candidate.parent != root or not candidate.is_file():
            return None
        return candidate
