"""
Audit trail for storage operations.

Each provider call ends in one record on the ``virtualblobs.audit`` logger:

    SUCCESS - create_folder - 'reports/2024'
    FAILURE - delete_file - 'old.txt' - error=NOT_FOUND

When ``StorageConfig.log_file_path`` is set, the records are also appended to
that file.
"""

import logging
import os
from typing import Any, Dict, Optional

from .config import StorageConfig

AUDIT_LOGGER_NAME = "virtualblobs.audit"

_AUDIT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _format_record(operation: str, path: Optional[str], success: bool,
                   details: Optional[Dict[str, Any]]) -> str:
    fields = ["SUCCESS" if success else "FAILURE", operation, f"'{path or ''}'"]
    if details:
        fields.append(", ".join(f"{key}={value}" for key, value in details.items()))
    return " - ".join(fields)


class AuditLogger:
    """Records provider operations on the audit logger."""

    def __init__(self, config: StorageConfig):
        self.config = config
        self.logger = logging.getLogger(AUDIT_LOGGER_NAME)
        self._file_handler: Optional[logging.FileHandler] = None

        if config.log_file_path:
            self._file_handler = self._attach_file_handler()

    def _attach_file_handler(self) -> logging.FileHandler:
        """Return the handler writing to the audit file, creating it on first use."""
        log_file = self.config.log_file_path
        target = os.path.abspath(log_file)
        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
                return handler

        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(_AUDIT_FORMAT))
        self.logger.addHandler(handler)
        self.logger.setLevel(logging.INFO)
        return handler

    def log_operation(
        self,
        operation: str,
        path: Optional[str],
        success: bool,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Record the outcome of one provider operation.

        Args:
            operation: Provider operation name
            path: Relative path the operation was called with
            success: Whether the operation completed
            details: Extra key/value pairs appended to the record
        """
        if self.config.enable_audit_logging:
            self.logger.info(_format_record(operation, path, success, details))

    def close(self):
        """Detach and close the audit file handler, if any."""
        if self._file_handler is None:
            return
        self.logger.removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None
