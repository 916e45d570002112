"""Storage reader protocol and common types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class StoredBlob:
    """Bytes read from storage plus the file metadata used for validators."""

    data: bytes
    size: int
    modified_at: float  # seconds since the epoch


@runtime_checkable
class StorageReader(Protocol):
    """Read-only access to a storage tree."""

    def resolve(self, segments: list[str]) -> str:
        """Return where *segments* live in the tree, without reading it.

        Raises ``InvalidStoragePath`` when the path resolves outside the tree.
        """
        ...

    async def read(self, segments: list[str]) -> StoredBlob:
        """Return the file at *segments*.

        Raises ``StorageFileNotFound`` when the file is absent and
        ``InvalidStoragePath`` when the path resolves outside the tree.
        """
        ...
