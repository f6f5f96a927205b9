"""
Tests for the virtualblobs.config module.

This module tests:
- StorageConfig validation and normalization
- Root creation
- Loading configuration from environment variables
"""

import sys
from pathlib import Path

import pytest

from virtualblobs.config import (
    DEFAULT_COPY_BUFFER_SIZE,
    StorageConfig,
    default_case_insensitive,
)


# =============================================================================
# StorageConfig Tests
# =============================================================================

class TestStorageConfig:
    """Tests for StorageConfig construction."""

    def test_defaults(self, tmp_path):
        """Test default values."""
        config = StorageConfig(root_directory=tmp_path)

        assert config.root_directory == tmp_path.resolve()
        assert config.create_root is False
        assert config.copy_buffer_size == DEFAULT_COPY_BUFFER_SIZE
        assert config.case_insensitive_paths == default_case_insensitive()
        assert config.default_shared_access_expiration is None
        assert config.enable_audit_logging is True
        assert config.log_file_path is None

    def test_string_root_becomes_path(self, tmp_path):
        config = StorageConfig(root_directory=str(tmp_path))

        assert isinstance(config.root_directory, Path)

    def test_relative_root_is_made_absolute(self, tmp_path, monkeypatch):
        """Test that a relative root is resolved against the working directory."""
        (tmp_path / "store").mkdir()
        monkeypatch.chdir(tmp_path)

        config = StorageConfig(root_directory="store")

        assert config.root_directory == (tmp_path / "store").resolve()
        assert config.root_directory.is_absolute()

    @pytest.mark.parametrize("root", [None, ""])
    def test_missing_root_rejected(self, root):
        with pytest.raises(ValueError, match="root_directory"):
            StorageConfig(root_directory=root)

    def test_nonexistent_root_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            StorageConfig(root_directory=tmp_path / "absent")

    def test_create_root(self, tmp_path):
        """Test that create_root creates the root and its parents."""
        root = tmp_path / "a" / "b"

        config = StorageConfig(root_directory=root, create_root=True)

        assert root.is_dir()
        assert config.root_directory == root.resolve()

    def test_root_is_a_file_rejected(self, tmp_path):
        file = tmp_path / "file.txt"
        file.write_bytes(b"")

        with pytest.raises(ValueError, match="not a directory"):
            StorageConfig(root_directory=file, create_root=True)

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_buffer_size(self, tmp_path, size):
        with pytest.raises(ValueError, match="copy_buffer_size"):
            StorageConfig(root_directory=tmp_path, copy_buffer_size=size)

    def test_explicit_case_policy_kept(self, tmp_path):
        assert StorageConfig(root_directory=tmp_path, case_insensitive_paths=True).case_insensitive_paths is True
        assert StorageConfig(root_directory=tmp_path, case_insensitive_paths=False).case_insensitive_paths is False

    def test_log_file_path_becomes_path(self, tmp_path):
        config = StorageConfig(root_directory=tmp_path, log_file_path=str(tmp_path / "audit.log"))

        assert config.log_file_path == tmp_path / "audit.log"

    def test_repr(self, tmp_path):
        config = StorageConfig(root_directory=tmp_path, copy_buffer_size=1024)

        assert "buffer=1024" in repr(config)


class TestDefaultCaseInsensitive:
    """Tests for the platform casing default."""

    def test_matches_platform(self):
        expected = sys.platform.startswith("win") or sys.platform == "darwin"

        assert default_case_insensitive() is expected

    @pytest.mark.parametrize("platform,expected", [
        ("linux", False),
        ("win32", True),
        ("darwin", True),
    ])
    def test_per_platform(self, monkeypatch, platform, expected):
        monkeypatch.setattr(sys, "platform", platform)

        assert default_case_insensitive() is expected


# =============================================================================
# from_env Tests
# =============================================================================

class TestFromEnv:
    """Tests for StorageConfig.from_env."""

    def test_root_only(self, tmp_path):
        config = StorageConfig.from_env(environ={"VIRTUALBLOBS_ROOT": str(tmp_path)})

        assert config.root_directory == tmp_path.resolve()

    def test_all_variables(self, tmp_path):
        """Test that every recognized variable is applied."""
        environ = {
            "VIRTUALBLOBS_ROOT": str(tmp_path / "new"),
            "VIRTUALBLOBS_CREATE_ROOT": "yes",
            "VIRTUALBLOBS_COPY_BUFFER_SIZE": "65536",
            "VIRTUALBLOBS_CASE_INSENSITIVE_PATHS": "true",
            "VIRTUALBLOBS_AUDIT_LOG": str(tmp_path / "audit.log"),
        }

        config = StorageConfig.from_env(environ=environ)

        assert (tmp_path / "new").is_dir()
        assert config.copy_buffer_size == 65536
        assert config.case_insensitive_paths is True
        assert config.log_file_path == tmp_path / "audit.log"

    def test_custom_prefix(self, tmp_path):
        config = StorageConfig.from_env(prefix="APP_", environ={"APP_ROOT": str(tmp_path)})

        assert config.root_directory == tmp_path.resolve()

    def test_reads_process_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("VIRTUALBLOBS_ROOT", str(tmp_path))

        assert StorageConfig.from_env().root_directory == tmp_path.resolve()

    def test_missing_root(self):
        with pytest.raises(ValueError, match="VIRTUALBLOBS_ROOT is not set"):
            StorageConfig.from_env(environ={})

    def test_invalid_buffer_size(self, tmp_path):
        environ = {
            "VIRTUALBLOBS_ROOT": str(tmp_path),
            "VIRTUALBLOBS_COPY_BUFFER_SIZE": "big",
        }

        with pytest.raises(ValueError, match="must be an integer"):
            StorageConfig.from_env(environ=environ)

    def test_invalid_boolean(self, tmp_path):
        environ = {
            "VIRTUALBLOBS_ROOT": str(tmp_path),
            "VIRTUALBLOBS_CREATE_ROOT": "maybe",
        }

        with pytest.raises(ValueError, match="boolean"):
            StorageConfig.from_env(environ=environ)
