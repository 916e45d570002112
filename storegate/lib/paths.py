"""Request path parsing and validation for the storage gateway."""

from __future__ import annotations

from urllib.parse import unquote

from storegate.lib.exceptions import InvalidStoragePath

_SEPARATORS = ("/", "\\")


def split_segments(raw: str) -> list[str]:
    """Split a raw (still percent-encoded) path into decoded segments.

    Each segment is decoded on its own, so an encoded ``%2F`` stays inside
    its segment instead of creating a new one. Empty segments are dropped.
    """
    return [unquote(part) for part in raw.split("/") if part]


def join_segments(segments: list[str]) -> str:
    return "/".join(segments)


def validate_segments(segments: list[str]) -> None:
    """Reject paths that could reach outside the storage root.

    Raises:
        InvalidStoragePath: if the filename carries a parent-directory marker
            or a path separator, if any directory segment is ``..``, or if any
            segment contains a NUL byte.
    """
    joined = join_segments(segments)
    if not segments:
        raise InvalidStoragePath(joined, "Empty path")

    filename = segments[-1]
    if ".." in filename or any(sep in filename for sep in _SEPARATORS):
        raise InvalidStoragePath(joined, "Directory traversal attempt")

    for segment in segments[:-1]:
        if segment == "..":
            raise InvalidStoragePath(joined, "Directory traversal attempt")

    if any("\x00" in segment for segment in segments):
        raise InvalidStoragePath(joined, "Null byte in path")
