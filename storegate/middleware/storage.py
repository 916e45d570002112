"""ASGI middleware serving uploaded files from the storage root."""

from __future__ import annotations

import traceback
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from email.utils import formatdate

from starlette.types import ASGIApp, Receive, Scope, Send

from storegate.lib.audit import AuditAction, AuditLog
from storegate.lib.client_ip import Requester
from storegate.lib.content_types import cache_headers, resolve_content_type
from storegate.lib.exceptions import InvalidStoragePath, StorageFileNotFound
from storegate.lib.fallback import FallbackResolver
from storegate.lib.paths import join_segments, split_segments, validate_segments
from storegate.lib.response_cache import CacheEntry, ResponseCache
from storegate.lib.storage.base import StorageReader, StoredBlob
from storegate.middleware.helpers import send_bytes, send_not_found, send_text


ALLOWED_METHODS = ("GET",)


@dataclass(frozen=True)
class GatewayResponse:
    status: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def text(cls, status: int, text: str) -> GatewayResponse:
        return cls(status, text.encode(), {"Content-Type": "text/plain; charset=utf-8"})


BAD_REQUEST = GatewayResponse.text(400, "Invalid file path")
NOT_FOUND = GatewayResponse.text(404, "File not found")
SERVER_ERROR = GatewayResponse.text(500, "Internal server error")


def build_file_headers(filename: str, blob: StoredBlob, image_max_age: int) -> dict[str, str]:
    """Assemble the response headers for a freshly read file."""
    content_type = resolve_content_type(filename)
    headers = {"Content-Type": content_type.mime_type}
    headers.update(cache_headers(content_type, image_max_age))
    headers["X-Content-Type-Options"] = "nosniff"
    headers["Last-Modified"] = formatdate(blob.modified_at, usegmt=True)
    headers["ETag"] = f'"{blob.size}-{int(blob.modified_at * 1000)}"'
    return headers


class StorageGateway:
    """Serve files from the storage root at ``{mount_prefix}{path...}``.

    Only ``GET`` is implemented; every other verb on the mount prefix gets a
    fixed 405. Requests outside the prefix pass through to the wrapped app.

    Args:
        app: The ASGI application to wrap.
        reader: Read-only storage collaborator.
        cache: Response cache shared by all requests.
        fallback: Default asset resolver for missing user photos.
        audit: Audit log collaborator.
        mount_prefix: URL prefix the gateway owns.
        image_max_age: Cache lifetime in seconds for image responses.
    """

    def __init__(
        self,
        app: ASGIApp,
        reader: StorageReader,
        cache: ResponseCache,
        fallback: FallbackResolver,
        audit: AuditLog,
        mount_prefix: str = "/storage/",
        image_max_age: int = 86400,
    ) -> None:
        self.app = app
        self.reader = reader
        self.cache = cache
        self.fallback = fallback
        self.audit = audit
        self.mount_prefix = mount_prefix if mount_prefix.endswith("/") else f"{mount_prefix}/"
        self.image_max_age = image_max_age
        self._handlers: dict[str, Callable[[Scope, Send], Awaitable[None]]] = {
            "GET": self._handle_get,
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope["path"].startswith(self.mount_prefix):
            await self.app(scope, receive, send)
            return

        handler = self._handlers.get(scope["method"], self._method_not_allowed)
        await handler(scope, send)

    async def _method_not_allowed(self, scope: Scope, send: Send) -> None:
        await send_text(send, 405, "Method not allowed", {"Allow": ", ".join(ALLOWED_METHODS)})

    def _segments(self, scope: Scope) -> list[str]:
        raw = scope.get("raw_path")
        if raw:
            raw_str = raw.decode("latin-1").split("?", 1)[0]
            if raw_str.startswith(self.mount_prefix):
                return split_segments(raw_str[len(self.mount_prefix):])
        # scope["path"] is already decoded
        rest = scope["path"][len(self.mount_prefix):]
        return [part for part in rest.split("/") if part]

    async def _handle_get(self, scope: Scope, send: Send) -> None:
        segments = self._segments(scope)
        if not segments:
            await send_not_found(send)
            return

        requester = Requester.from_scope(scope)
        response = await self.serve(segments, requester)
        await send_bytes(send, response.status, response.body, response.headers)

    async def serve(self, segments: list[str], requester: Requester) -> GatewayResponse:
        """Run one read request through validation, cache, storage and fallback."""
        filename = segments[-1]
        requested_path = join_segments(segments)

        try:
            self.audit.event(
                "debug",
                "Storage file access request initiated",
                action=AuditAction.STARTED,
                requester=requester,
                task_name="FileStorageAccess",
                details=f"File access attempt: {requested_path}",
                filename=filename,
            )

            try:
                validate_segments(segments)
            except InvalidStoragePath as exc:
                return self._reject(exc, requester, filename)

            self.cache.maybe_sweep()
            cached = self.cache.lookup(requested_path)
            if cached is not None:
                self.audit.event(
                    "debug",
                    "Serving from request cache",
                    action=AuditAction.REQUEST_CACHED,
                    requester=requester,
                    task_name="FileCache",
                    details=f"Cache hit: {requested_path}",
                    filename=filename,
                    requested_path=requested_path,
                )
                return GatewayResponse(200, cached.body, cached.headers)

            try:
                location = self.reader.resolve(segments)
            except InvalidStoragePath as exc:
                return self._reject(exc, requester, filename)

            self.audit.event(
                "debug",
                "Resolving storage file path",
                action=AuditAction.PATH_RESOLVED,
                requester=requester,
                task_name="FileResolution",
                details=f"Resolved file path: {location}",
                filename=filename,
                requested_path=requested_path,
            )

            try:
                blob = await self.reader.read(segments)
            except InvalidStoragePath as exc:
                return self._reject(exc, requester, filename)
            except StorageFileNotFound:
                return await self._not_found(segments, requester, filename)

            headers = build_file_headers(filename, blob, self.image_max_age)
            self.audit.event(
                "debug",
                "Successfully serving storage file",
                action=AuditAction.FILE_SERVED_SUCCESS,
                requester=requester,
                task_name="FileDelivery",
                details=f"Serving file: {filename} ({blob.size} bytes) as {headers['Content-Type']}",
                filename=filename,
                requested_path=requested_path,
                file_size=blob.size,
                content_type=headers["Content-Type"],
            )

            self.cache.store(requested_path, CacheEntry(blob.data, headers, created_at=self.cache.now()))
            return GatewayResponse(200, blob.data, headers)

        except Exception as exc:
            self.audit.event(
                "error",
                "Error serving storage file",
                action=AuditAction.FILE_SERVE_FAILED,
                requester=requester,
                task_name="FileServerError",
                details=f"Failed to serve file: {exc}",
                filename=filename,
                requested_path=requested_path,
                error=str(exc),
                stack=traceback.format_exc(),
            )
            return SERVER_ERROR

    def _reject(self, exc: InvalidStoragePath, requester: Requester, filename: str) -> GatewayResponse:
        self.audit.event(
            "warning",
            "Security violation: Directory traversal attempt detected",
            action=AuditAction.SECURITY_VIOLATION,
            requester=requester,
            task_name="SecurityCheck",
            details=f"{exc.reason}: {exc.path}",
            filename=filename,
        )
        return BAD_REQUEST

    async def _not_found(self, segments: list[str], requester: Requester, filename: str) -> GatewayResponse:
        requested_path = join_segments(segments)
        self.audit.event(
            "warning",
            "Requested file not found in storage",
            action=AuditAction.FILE_NOT_FOUND,
            requester=requester,
            task_name="FileNotFound",
            details=f"File not found at path: {requested_path}",
            filename=filename,
            requested_path=requested_path,
        )

        if not self.fallback.applies(segments):
            return NOT_FOUND

        asset = await self.fallback.resolve()
        if asset is None:
            return NOT_FOUND

        self.audit.event(
            "info",
            "Serving default profile photo as fallback",
            action=AuditAction.DEFAULT_IMAGE_SERVED,
            requester=requester,
            task_name="DefaultFallback",
            details="Original file not found, serving default image",
            filename=filename,
            requested_path=requested_path,
        )
        return GatewayResponse(200, asset.body, asset.headers)
