"""
Tests for the virtualblobs.audit module.
"""

import logging

import pytest

from virtualblobs.audit import AUDIT_LOGGER_NAME, AuditLogger
from virtualblobs.config import StorageConfig


@pytest.fixture
def audit_file_config(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    return StorageConfig(root_directory=root, log_file_path=tmp_path / "logs" / "audit.log")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_message_format(self, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)
        audit = AuditLogger(StorageConfig(root_directory=tmp_path))

        audit.log_operation("rename_file", "a.txt", False, {"error": "NOT_FOUND"})

        assert caplog.records[-1].name == AUDIT_LOGGER_NAME
        assert caplog.records[-1].getMessage() == "FAILURE - rename_file - 'a.txt' - error=NOT_FOUND"

    def test_root_path_logged_as_empty(self, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)
        audit = AuditLogger(StorageConfig(root_directory=tmp_path))

        audit.log_operation("list_files", None, True)

        assert caplog.records[-1].getMessage() == "SUCCESS - list_files - ''"

    def test_disabled(self, tmp_path, caplog):
        """Test that nothing is logged when auditing is disabled."""
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)
        audit = AuditLogger(StorageConfig(root_directory=tmp_path, enable_audit_logging=False))

        audit.log_operation("create_file", "a.txt", True)

        assert [r for r in caplog.records if r.name == AUDIT_LOGGER_NAME] == []

    def test_file_logging(self, audit_file_config):
        """Test that records are written to the configured file."""
        audit = AuditLogger(audit_file_config)
        try:
            audit.log_operation("create_folder", "reports", True)
        finally:
            audit.close()

        content = audit_file_config.log_file_path.read_text()
        assert "SUCCESS - create_folder - 'reports'" in content

    def test_shared_file_handler(self, audit_file_config):
        """Test that two loggers on the same file share one handler."""
        first = AuditLogger(audit_file_config)
        second = AuditLogger(audit_file_config)
        try:
            assert first._file_handler is second._file_handler
        finally:
            first.close()

    def test_close_detaches_handler(self, audit_file_config):
        audit = AuditLogger(audit_file_config)
        handler = audit._file_handler

        audit.close()

        assert handler not in logging.getLogger(AUDIT_LOGGER_NAME).handlers
        assert audit._file_handler is None

    def test_close_without_file_is_noop(self, tmp_path):
        AuditLogger(StorageConfig(root_directory=tmp_path)).close()
