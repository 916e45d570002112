"""Requester identification from an ASGI scope."""

from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import HTTPConnection
from starlette.types import Scope

LOOPBACK = "127.0.0.1"
UNKNOWN = "Unknown"


def _headers(scope: Scope) -> dict[bytes, bytes]:
    return {name.lower(): value for name, value in scope.get("headers", [])}


def get_client_ip(scope: Scope) -> str:
    """Extract client IP: x-forwarded-for first, then x-real-ip, then loopback."""
    headers = _headers(scope)
    forwarded = headers.get(b"x-forwarded-for")
    if forwarded:
        first = forwarded.decode("latin-1").split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get(b"x-real-ip")
    if real_ip:
        return real_ip.decode("latin-1").strip()
    return LOOPBACK


@dataclass(frozen=True)
class Requester:
    """Who asked for a file. Recorded for audit only, never for authorization."""

    ip_address: str = LOOPBACK
    session_id: str = UNKNOWN
    eid: str = UNKNOWN
    user_id: str = UNKNOWN

    @classmethod
    def from_scope(cls, scope: Scope) -> Requester:
        cookies = HTTPConnection(scope).cookies
        return cls(
            ip_address=get_client_ip(scope),
            session_id=cookies.get("sessionId") or UNKNOWN,
            eid=cookies.get("eid") or UNKNOWN,
            user_id=cookies.get("socPortalId") or UNKNOWN,
        )
