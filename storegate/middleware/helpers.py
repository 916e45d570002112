"""Shared helpers for ASGI middleware."""

from collections.abc import Mapping

from starlette.types import Send


async def send_bytes(send: Send, status: int, body: bytes, headers: Mapping[str, str]) -> None:
    """Send a complete response with a content-length header."""
    raw_headers = [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers.items()]
    raw_headers.append((b"content-length", str(len(body)).encode()))
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": raw_headers,
    })
    await send({"type": "http.response.body", "body": body})


async def send_text(send: Send, status: int, text: str, extra_headers: Mapping[str, str] | None = None) -> None:
    """Send a plain-text response."""
    headers = {"Content-Type": "text/plain; charset=utf-8"}
    if extra_headers:
        headers.update(extra_headers)
    await send_bytes(send, status, text.encode(), headers)


async def send_not_found(send: Send) -> None:
    """Send a plain-text 404 response."""
    await send_text(send, 404, "File not found")
