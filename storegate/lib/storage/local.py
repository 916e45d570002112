"""Local filesystem storage reader."""

from __future__ import annotations

import asyncio
from pathlib import Path

from storegate.lib.exceptions import InvalidStoragePath, StorageFileNotFound
from storegate.lib.storage.base import StoredBlob


class LocalStorageReader:
    """Read files below a fixed root directory. Never writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def resolve(self, segments: list[str]) -> str:
        return str(self._segments_to_path(segments))

    async def read(self, segments: list[str]) -> StoredBlob:
        path = self._segments_to_path(segments)
        return await asyncio.to_thread(self._read_file, path)

    # -- internal helpers --

    def _segments_to_path(self, segments: list[str]) -> Path:
        """Join *segments* onto the root and ensure the result stays inside it."""
        base = self._base_path.resolve()
        candidate = base.joinpath(*segments)
        try:
            resolved = candidate.resolve()
        except (OSError, ValueError) as exc:
            raise InvalidStoragePath("/".join(segments), "Unresolvable path") from exc

        if not resolved.is_relative_to(base):
            raise InvalidStoragePath("/".join(segments), "Path escapes storage root")
        return resolved

    @staticmethod
    def _read_file(path: Path) -> StoredBlob:
        if not path.is_file():
            raise StorageFileNotFound(str(path))
        try:
            data = path.read_bytes()
            stat = path.stat()
        except FileNotFoundError as exc:
            # Removed between the check and the read
            raise StorageFileNotFound(str(path)) from exc
        return StoredBlob(data=data, size=stat.st_size, modified_at=stat.st_mtime)
