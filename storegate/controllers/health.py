"""Liveness endpoint for the storage gateway."""

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route


async def healthz(request: Request) -> JSONResponse:
    """Report process liveness and the current response cache population."""
    cache = request.app.state.response_cache
    return JSONResponse({"status": "ok", "cached_entries": len(cache)})


routes = [
    Route("/healthz", healthz, methods=["GET"]),
]
