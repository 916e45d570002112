"""Shared pytest fixtures."""

from pathlib import Path

import pytest
import yaml

from storegate.config import get_settings
from storegate.lib.audit import AuditLog
from storegate.lib.storage import LocalStorageReader

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"user-photo"
DEFAULT_PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"default-avatar"
PDF_BYTES = b"%PDF-1.4 notice"
XLSX_BYTES = b"PK\x03\x04 roster"


@pytest.fixture
def storage_root(tmp_path) -> Path:
    """A storage tree with a user photo, the default avatar and some documents."""
    root = tmp_path / "storage"
    (root / "user_dp").mkdir(parents=True)
    (root / "notice_board").mkdir()
    (root / "roster").mkdir()
    (root / "user_dp" / "u100.png").write_bytes(PNG_BYTES)
    (root / "user_dp" / "default_DP.png").write_bytes(DEFAULT_PNG_BYTES)
    (root / "notice_board" / "memo.pdf").write_bytes(PDF_BYTES)
    (root / "roster" / "march.xlsx").write_bytes(XLSX_BYTES)
    (root / "roster" / "notes.bin").write_bytes(b"\x00\x01\x02")
    return root


class SpyReader:
    """Storage reader that records every read before delegating."""

    def __init__(self, inner):
        self.inner = inner
        self.calls: list[list[str]] = []

    def resolve(self, segments):
        return self.inner.resolve(segments)

    async def read(self, segments):
        self.calls.append(list(segments))
        return await self.inner.read(segments)


@pytest.fixture
def spy_reader(storage_root) -> SpyReader:
    return SpyReader(LocalStorageReader(storage_root))


@pytest.fixture
def audit_events():
    """List that captures (level, message, meta) audit tuples."""
    return []


@pytest.fixture
def audit(audit_events) -> AuditLog:
    return AuditLog(sink=lambda level, message, meta: audit_events.append((level, message, meta)))


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


@pytest.fixture
def clean_settings():
    """Clear the cached settings around a test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
