# tree_catalog/storage.py
import logging
import os
import threading
from pathlib import Path
from typing import List
from urllib.parse import unquote

from .exceptions import ImageNotFoundError, ServerError, StorageWriteError, UploadError

logger = logging.getLogger(__name__)


def safe_filename(filename: str) -> str:
    """Strip any directory part from an uploaded file name."""
    name = Path((filename or "").replace("\\", "/")).name
    if not name or name.startswith("."):
        raise UploadError(f"Invalid image filename: {filename!r}")
    return name


class ImageStore:
    """Image files kept directly under one directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def _resolve(self, filename: str) -> Path:
        root = self.directory.resolve()
        path = (root / filename).resolve()
        if path.parent != root:
            raise ImageNotFoundError(filename)
        return path

    def list(self) -> List[str]:
        # os.listdir keeps the order the filesystem hands back.
        try:
            names = os.listdir(self.directory)
        except OSError as exc:
            raise ServerError(f"Cannot list images in {self.directory}: {exc}") from exc
        return [
            name
            for name in names
            if not name.startswith(".") and (self.directory / name).is_file()
        ]

    def read(self, filename: str) -> bytes:
        name = unquote(filename)
        path = self._resolve(name)
        try:
            return path.read_bytes()
        except OSError as exc:
            logger.debug("Cannot read image %s: %s", path, exc)
            raise ImageNotFoundError(name) from exc

    def write(self, filename: str, data: bytes) -> Path:
        name = safe_filename(filename)
        path = self.directory / name
        with self._lock:
            try:
                path.write_bytes(data)
            except OSError as exc:
                raise StorageWriteError(str(path), str(exc)) from exc
        logger.info("Stored image %s (%d bytes)", name, len(data))
        return path
