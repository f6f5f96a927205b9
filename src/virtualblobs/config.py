"""
Configuration for storage providers.

This module defines the configuration class that fixes the provider root and
controls stream copying, path casing and audit logging.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional, Union


DEFAULT_COPY_BUFFER_SIZE = 8192

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def default_case_insensitive() -> bool:
    """Return whether path containment ignores case on this platform."""
    return sys.platform.startswith("win") or sys.platform == "darwin"


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value, got {value!r}")


@dataclass
class StorageConfig:
    """
    Configuration for a storage provider.

    The root directory is fixed for the lifetime of the provider built from
    this configuration. Everything else only tunes behavior around it.
    """

    root_directory: Union[str, Path]
    """Base directory of the provider. All relative paths are resolved against it."""

    create_root: bool = False
    """
    Whether to create the root directory if it is missing.
    If False, a missing root is a configuration error.
    """

    copy_buffer_size: int = DEFAULT_COPY_BUFFER_SIZE
    """Size in bytes of the reusable buffer used when saving streams."""

    case_insensitive_paths: Optional[bool] = None
    """
    Whether path containment compares paths case-insensitively.
    None selects the platform default (insensitive on Windows and macOS).
    """

    default_shared_access_expiration: Optional[datetime] = None
    """
    Initial value of the provider's shared-access expiration setting.
    Has no effect on the filesystem provider; kept for backends that sign URLs.
    """

    # === Logging ===

    enable_audit_logging: bool = True
    """Whether to record every provider operation on the audit logger."""

    log_file_path: Optional[Union[str, Path]] = None
    """Path to an audit log file. If None, audit records go to standard logging only."""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.root_directory is None or str(self.root_directory) == "":
            raise ValueError("root_directory must be provided")

        self.root_directory = Path(self.root_directory).expanduser().resolve()

        if self.log_file_path is not None and not isinstance(self.log_file_path, Path):
            self.log_file_path = Path(self.log_file_path)

        if self.copy_buffer_size <= 0:
            raise ValueError("copy_buffer_size must be positive")

        if self.case_insensitive_paths is None:
            self.case_insensitive_paths = default_case_insensitive()

        if not self.root_directory.exists():
            if not self.create_root:
                raise ValueError(f"Root directory does not exist: {self.root_directory}")
            self.root_directory.mkdir(parents=True, exist_ok=True)
        elif not self.root_directory.is_dir():
            raise ValueError(f"Root directory is not a directory: {self.root_directory}")

    @classmethod
    def from_env(
        cls,
        prefix: str = "VIRTUALBLOBS_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "StorageConfig":
        """
        Build a configuration from environment variables.

        Recognized variables (with the default prefix):
        - VIRTUALBLOBS_ROOT (required)
        - VIRTUALBLOBS_CREATE_ROOT
        - VIRTUALBLOBS_COPY_BUFFER_SIZE
        - VIRTUALBLOBS_CASE_INSENSITIVE_PATHS
        - VIRTUALBLOBS_AUDIT_LOG

        Args:
            prefix: Prefix of the variable names
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            StorageConfig

        Raises:
            ValueError: If the root is missing or a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        root = env.get(f"{prefix}ROOT")
        if not root:
            raise ValueError(f"{prefix}ROOT is not set")

        kwargs = {"root_directory": root}

        create_root = env.get(f"{prefix}CREATE_ROOT")
        if create_root is not None:
            kwargs["create_root"] = _parse_bool(f"{prefix}CREATE_ROOT", create_root)

        buffer_size = env.get(f"{prefix}COPY_BUFFER_SIZE")
        if buffer_size is not None:
            try:
                kwargs["copy_buffer_size"] = int(buffer_size)
            except ValueError as exc:
                raise ValueError(
                    f"{prefix}COPY_BUFFER_SIZE must be an integer, got {buffer_size!r}"
                ) from exc

        case_insensitive = env.get(f"{prefix}CASE_INSENSITIVE_PATHS")
        if case_insensitive is not None:
            kwargs["case_insensitive_paths"] = _parse_bool(
                f"{prefix}CASE_INSENSITIVE_PATHS", case_insensitive
            )

        audit_log = env.get(f"{prefix}AUDIT_LOG")
        if audit_log:
            kwargs["log_file_path"] = audit_log

        return cls(**kwargs)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"StorageConfig(root={self.root_directory}, "
            f"buffer={self.copy_buffer_size}, "
            f"case_insensitive={self.case_insensitive_paths})"
        )
