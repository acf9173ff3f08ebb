"""Local-disk file storage for receipts and uploaded assets."""

from __future__ import annotations

import os
from pathlib import Path

from kasir.app.core.config import settings


class FileStorageService:
    """Store and retrieve files on the configured storage backend."""

    def __init__(self, root: str | None = None) -> None:
        self._root = Path(root or settings.FILE_STORAGE_PATH)
        self._root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, relative_path: str) -> Path:
        path = (self._root / relative_path).resolve()
        if self._root.resolve() not in path.parents:
            raise ValueError(f"Invalid storage path: {relative_path}")
        return path

    def save(self, relative_path: str, data: bytes) -> str:
        """Persist *data* under *relative_path* and return the full path."""
        dest = self._resolve(relative_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        return str(dest)

    def read(self, relative_path: str) -> bytes:
        """Return the raw bytes for the given *relative_path*."""
        return self._resolve(relative_path).read_bytes()

    def exists(self, relative_path: str) -> bool:
        return self._resolve(relative_path).exists()

    def delete(self, relative_path: str) -> None:
        path = self._resolve(relative_path)
        if path.exists():
            os.remove(path)
