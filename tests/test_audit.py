"""Tests for audit event construction and the logging sink."""

import logging
from unittest.mock import patch

from storegate.lib import observability
from storegate.lib.audit import AuditAction, AuditLog, logging_sink
from storegate.lib.client_ip import Requester

REQUESTER = Requester(ip_address="203.0.113.5", session_id="sid-1", eid="E42", user_id="1001")


class TestAuditEvent:
    def test_event_builds_standard_metadata(self, audit, audit_events):
        audit.event(
            "warning",
            "Requested file not found in storage",
            action=AuditAction.FILE_NOT_FOUND,
            requester=REQUESTER,
            task_name="FileNotFound",
            details="File not found at path: user_dp/u1.png",
            filename="u1.png",
            requested_path="user_dp/u1.png",
        )

        assert audit_events == [(
            "warning",
            "Requested file not found in storage",
            {
                "eid": "E42",
                "sid": "sid-1",
                "task_name": "FileNotFound",
                "details": "File not found at path: user_dp/u1.png",
                "filename": "u1.png",
                "user_id": "1001",
                "ip_address": "203.0.113.5",
                "action": "file_not_found",
                "requested_path": "user_dp/u1.png",
            },
        )]

    def test_action_values(self):
        assert {action.value for action in AuditAction} == {
            "started",
            "security_violation",
            "request_cached",
            "path_resolved",
            "file_not_found",
            "default_image_served",
            "file_served_success",
            "file_serve_failed",
        }

    def test_failing_sink_does_not_raise(self, caplog):
        def broken_sink(level, message, meta):
            raise RuntimeError("log backend down")

        audit = AuditLog(sink=broken_sink)
        with caplog.at_level(logging.WARNING, logger="storegate.lib.audit"):
            audit.log("info", "anything", {})

        assert "Audit sink failed" in caplog.text


class TestLoggingSink:
    def test_writes_to_audit_logger_with_meta(self, caplog):
        with patch.object(observability, "log", return_value=False), \
             caplog.at_level(logging.DEBUG, logger="storegate.audit"):
            logging_sink("warning", "Security violation", {"action": "security_violation"})

        record = caplog.records[-1]
        assert record.name == "storegate.audit"
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "Security violation"
        assert record.meta == {"action": "security_violation"}

    def test_mirrors_to_observability_with_logfire_level(self):
        with patch.object(observability, "log", return_value=True) as mock_log:
            logging_sink("warning", "Security violation", {"action": "security_violation"})

        mock_log.assert_called_once_with("warn", "Security violation", action="security_violation")

    def test_default_audit_log_uses_logging_sink(self, caplog):
        with patch.object(observability, "log", return_value=False), \
             caplog.at_level(logging.INFO, logger="storegate.audit"):
            AuditLog().log("info", "Serving default profile photo as fallback", {"action": "default_image_served"})

        assert caplog.records[-1].meta["action"] == "default_image_served"
