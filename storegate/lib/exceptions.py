import logging

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from storegate.lib import observability

logger = logging.getLogger(__name__)


class StoregateError(Exception):
    """Base class for gateway errors."""


class InvalidStoragePath(StoregateError):
    """Raised when a requested path is malformed or escapes the storage root."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path!r}")
        self.path = path
        self.reason = reason


class StorageFileNotFound(StoregateError):
    """Raised when a requested file is absent from the storage root."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP exceptions as JSON."""
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        {"status_code": status_code, "detail": detail},
        status_code=status_code,
        headers=exc.headers,
    )


async def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions and return a generic JSON 500."""
    method = request.method
    path = request.url.path
    if not observability.exception("Unhandled exception on {method} {path}", method=method, path=path):
        logger.error("Unhandled exception on %s %s", method, path, exc_info=exc)

    return JSONResponse(
        {"status_code": HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Internal Server Error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
    )


EXCEPTION_HANDLERS = {
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}
