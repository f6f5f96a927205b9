"""
Storage capability interfaces.

This module defines the interfaces every storage backend implements, so that
callers can work with files and folders through relative paths without
knowing where the bytes live. The filesystem backend in
``virtualblobs.providers.filesystem`` is one conforming implementation.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, BinaryIO, List, Optional

from .data_models import EntryInfo

logger = logging.getLogger(__name__)


async def swallow_errors(operation: Awaitable[object], name: str, path: Optional[str]) -> bool:
    """
    Await a strict operation and reduce its outcome to a boolean.

    Every ``Exception`` is converted to False, including invalid paths and
    unexpected errors. Cancellation is not an ``Exception`` and still propagates.

    Args:
        operation: Awaitable returned by a strict provider operation
        name: Operation name for logging
        path: Relative path the operation was called with

    Returns:
        True if the operation completed, False otherwise
    """
    try:
        await operation
    except Exception as e:
        logger.debug(f"{name} failed for '{path}': {e!r}")
        return False
    return True


class StorageFile(ABC):
    """Read-only view of a file, re-read from the backend on every query."""

    @property
    @abstractmethod
    def path(self) -> str:
        """Relative path of the file inside the provider."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Last path segment."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Current size in bytes."""

    @property
    @abstractmethod
    def last_updated(self) -> datetime:
        """Current last-modified timestamp."""

    @property
    @abstractmethod
    def file_type(self) -> str:
        """Extension including the leading dot, or '' if there is none."""

    @abstractmethod
    def open_read(self) -> BinaryIO:
        """Open the file content for reading."""

    @abstractmethod
    def open_write(self) -> BinaryIO:
        """Open the file for writing without truncating it."""

    @abstractmethod
    def create_file(self) -> BinaryIO:
        """Truncate the file and open it for writing."""

    @abstractmethod
    def to_info(self) -> EntryInfo:
        """Snapshot the current metadata."""


class StorageFolder(ABC):
    """Read-only view of a folder, re-read from the backend on every query."""

    @property
    @abstractmethod
    def path(self) -> str:
        """Relative path of the folder inside the provider ('' for the root)."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Last path segment."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Total size in bytes of all files below this folder."""

    @property
    @abstractmethod
    def last_updated(self) -> datetime:
        """Current last-modified timestamp."""

    @abstractmethod
    def get_parent(self) -> "StorageFolder":
        """
        Return the parent folder.

        Raises:
            NoParentError: If this folder is the provider root
        """

    @abstractmethod
    def to_info(self) -> EntryInfo:
        """Snapshot the current metadata."""


class StorageProvider(ABC):
    """
    Path-based storage operations.

    Strict operations raise ``VirtualBlobsError`` subclasses on violated
    pre-conditions. ``try_*`` operations and ``file_exists`` never raise.
    """

    @property
    @abstractmethod
    def default_shared_access_expiration(self) -> Optional[datetime]:
        """Default expiration for shared-access URLs issued by the backend."""

    @default_shared_access_expiration.setter
    @abstractmethod
    def default_shared_access_expiration(self, value: Optional[datetime]) -> None:
        pass

    @abstractmethod
    async def get_file(self, path: str) -> StorageFile:
        """Retrieve an existing file. Raises NotFoundError if absent."""

    @abstractmethod
    async def list_files(self, path: str) -> List[StorageFile]:
        """List the files directly inside a folder; empty if the folder is absent."""

    @abstractmethod
    async def list_folders(self, path: str) -> List[StorageFolder]:
        """List the folders directly inside a folder, creating it if absent."""

    @abstractmethod
    async def try_create_folder(self, path: str) -> bool:
        """Create a folder, returning False instead of raising."""

    @abstractmethod
    async def create_folder(self, path: str) -> None:
        """Create a folder. Raises AlreadyExistsError if it exists."""

    @abstractmethod
    async def delete_folder(self, path: str) -> None:
        """Delete a folder and its content. Raises NotFoundError if absent."""

    @abstractmethod
    async def rename_folder(self, old_path: str, new_path: str) -> None:
        """Move a folder. Raises NotFoundError or AlreadyExistsError."""

    @abstractmethod
    async def delete_file(self, path: str) -> None:
        """Delete a file. Raises NotFoundError if absent."""

    @abstractmethod
    async def rename_file(self, old_path: str, new_path: str) -> None:
        """Move a file. Raises NotFoundError or AlreadyExistsError."""

    @abstractmethod
    async def create_file(self, path: str) -> StorageFile:
        """Create an empty file. Raises AlreadyExistsError if it exists."""

    @abstractmethod
    async def try_save_stream(self, path: str, input_stream: BinaryIO) -> bool:
        """Save a stream into a new file, returning False instead of raising."""

    @abstractmethod
    async def save_stream(self, path: str, input_stream: BinaryIO) -> None:
        """Save a stream into a new file."""

    @abstractmethod
    async def file_exists(self, path: str) -> bool:
        """Return whether a file exists. Never raises."""

    @abstractmethod
    async def create_or_replace_file(self, path: str) -> StorageFile:
        """Create an empty file, deleting any existing one first."""
