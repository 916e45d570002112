"""Extension to MIME type mapping and cache classification."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


@dataclass(frozen=True)
class ContentType:
    """A MIME type plus whether it is safe to cache downstream."""

    mime_type: str
    is_image: bool


OCTET_STREAM = ContentType("application/octet-stream", is_image=False)

CONTENT_TYPES: dict[str, ContentType] = {
    ".jpg": ContentType("image/jpeg", is_image=True),
    ".jpeg": ContentType("image/jpeg", is_image=True),
    ".png": ContentType("image/png", is_image=True),
    ".webp": ContentType("image/webp", is_image=True),
    ".gif": ContentType("image/gif", is_image=True),
    ".pdf": ContentType("application/pdf", is_image=False),
    ".xlsx": ContentType(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", is_image=False
    ),
    ".xls": ContentType("application/vnd.ms-excel", is_image=False),
}

# Documents may be replaced in place under the same name, so downstream
# caches must revalidate every time.
NO_STORE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def resolve_content_type(filename: str) -> ContentType:
    """Return the content type for *filename* based on its lowercase extension."""
    ext = PurePosixPath(filename).suffix.lower()
    return CONTENT_TYPES.get(ext, OCTET_STREAM)


def cache_headers(content_type: ContentType, image_max_age: int) -> dict[str, str]:
    """Return the cache directive headers for a content type's class."""
    if content_type.is_image:
        return {"Cache-Control": f"public, max-age={image_max_age}"}
    return dict(NO_STORE_HEADERS)
