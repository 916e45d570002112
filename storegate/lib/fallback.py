"""Default asset substitution for missing profile photos."""

from __future__ import annotations

from dataclasses import dataclass

from storegate.lib.exceptions import StorageFileNotFound
from storegate.lib.storage.base import StorageReader


@dataclass(frozen=True)
class FallbackAsset:
    body: bytes
    headers: dict[str, str]


class FallbackResolver:
    """Serve a fixed default image when a user photo is missing.

    Args:
        reader: Storage reader used to load the default asset.
        namespace: Directory segment that marks user-photo requests.
        asset_name: Filename of the default asset inside ``namespace``.
        content_type: MIME type the default asset is always served as.
        max_age: Cache lifetime in seconds for the default asset.
    """

    def __init__(
        self,
        reader: StorageReader,
        namespace: str = "user_dp",
        asset_name: str = "default_DP.png",
        content_type: str = "image/png",
        max_age: int = 3600,
    ) -> None:
        self.reader = reader
        self.namespace = namespace
        self.asset_name = asset_name
        self.content_type = content_type
        self.max_age = max_age

    @property
    def asset_segments(self) -> list[str]:
        return [self.namespace, self.asset_name]

    def applies(self, segments: list[str]) -> bool:
        """Whether *segments* name a file directly inside the user-photo namespace."""
        return len(segments) >= 2 and segments[-2] == self.namespace

    async def resolve(self) -> FallbackAsset | None:
        """Load the default asset, or return None if it is absent too."""
        try:
            blob = await self.reader.read(self.asset_segments)
        except StorageFileNotFound:
            return None
        return FallbackAsset(
            body=blob.data,
            headers={
                "Content-Type": self.content_type,
                "Cache-Control": f"public, max-age={self.max_age}",
                "X-Content-Type-Options": "nosniff",
            },
        )
