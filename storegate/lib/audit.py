"""Structured audit events for storage file access.

Every gateway branch hands one event to the logging collaborator through
:meth:`AuditLog.log`. Events are not buffered or retried, and a failing sink
never affects the response.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from storegate.lib import observability
from storegate.lib.client_ip import Requester

logger = logging.getLogger(__name__)

audit_logger = logging.getLogger("storegate.audit")

AuditSink = Callable[[str, str, dict[str, Any]], None]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# logfire spells warning as "warn"
_LOGFIRE_LEVELS = {"warning": "warn"}


class AuditAction(str, Enum):
    STARTED = "started"
    SECURITY_VIOLATION = "security_violation"
    REQUEST_CACHED = "request_cached"
    PATH_RESOLVED = "path_resolved"
    FILE_NOT_FOUND = "file_not_found"
    DEFAULT_IMAGE_SERVED = "default_image_served"
    FILE_SERVED_SUCCESS = "file_served_success"
    FILE_SERVE_FAILED = "file_serve_failed"


def logging_sink(level: str, message: str, meta: dict[str, Any]) -> None:
    """Write an audit event to the ``storegate.audit`` logger and logfire."""
    audit_logger.log(_LEVELS.get(level, logging.INFO), message, extra={"meta": meta})
    observability.log(_LOGFIRE_LEVELS.get(level, level), message, **meta)


class AuditLog:
    """Adapter between the gateway and the logging collaborator."""

    def __init__(self, sink: AuditSink | None = None) -> None:
        self._sink = sink or logging_sink

    def log(self, level: str, message: str, meta: dict[str, Any]) -> None:
        try:
            self._sink(level, message, meta)
        except Exception:
            logger.warning("Audit sink failed for %r", message, exc_info=True)

    def event(
        self,
        level: str,
        message: str,
        *,
        action: AuditAction,
        requester: Requester,
        task_name: str,
        details: str,
        filename: str,
        **extra: Any,
    ) -> None:
        """Build the standard metadata block for *requester* and log it."""
        meta: dict[str, Any] = {
            "eid": requester.eid,
            "sid": requester.session_id,
            "task_name": task_name,
            "details": details,
            "filename": filename,
            "user_id": requester.user_id,
            "ip_address": requester.ip_address,
            "action": action.value,
        }
        meta.update(extra)
        self.log(level, message, meta)
