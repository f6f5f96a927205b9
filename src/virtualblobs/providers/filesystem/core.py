"""
Filesystem storage provider.

Maps the StorageProvider interface onto a local directory tree. Every
operation resolves its relative path(s) through PathResolver first, so no
operation can reach outside the configured root, then runs the blocking
filesystem calls in a worker thread.
"""

import asyncio
import logging
import os
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, List, Optional, Tuple, Type, Union

from ...audit import AuditLogger
from ...config import StorageConfig
from ...exceptions import (
    AlreadyExistsError,
    InvalidOperationError,
    NotFoundError,
    VirtualBlobsError,
)
from ...interfaces import StorageProvider, swallow_errors
from ...paths import PathResolver, ResolvedPath, combine_paths
from ...utils.streams import copy_stream
from .entries import FileSystemFile, FileSystemFolder

logger = logging.getLogger(__name__)


@contextmanager
def _io_errors(
    operation: str,
    path: Optional[str],
    message: str,
    errors: Tuple[Type[BaseException], ...] = (OSError,),
) -> Iterator[None]:
    """Wrap low-level failures into InvalidOperationError, keeping the cause."""
    try:
        yield
    except errors as exc:
        logger.error(f"{operation} failed for '{path}': {exc}")
        raise InvalidOperationError(
            f"{message}: {exc}",
            inner_exception=exc,
            operation=operation,
            path=path,
        ) from exc


def _child_entries(directory: Path, want_folders: bool) -> List[Tuple[str, Path]]:
    """Names and host paths of the direct children of one kind, sorted by name.

    Symbolic links are skipped: a link could point outside the root.
    """
    children = []
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_symlink():
                continue
            if want_folders and entry.is_dir(follow_symlinks=False):
                children.append((entry.name, Path(entry.path)))
            elif not want_folders and entry.is_file(follow_symlinks=False):
                children.append((entry.name, Path(entry.path)))
    children.sort(key=lambda child: child[0])
    return children


class FileSystemStorageProvider(StorageProvider):
    """
    Storage provider backed by a local directory.

    Example:
        >>> provider = FileSystemStorageProvider.local("/data")
        >>> await provider.create_folder("reports/2024")
        >>> with open("q1.csv", "rb") as stream:
        ...     await provider.save_stream("reports/2024/q1.csv", stream)
        >>> [f.name for f in await provider.list_files("reports/2024")]
        ['q1.csv']
    """

    def __init__(self, config: StorageConfig):
        """
        Initialize the provider.

        Args:
            config: Storage configuration; its root is fixed for the provider lifetime
        """
        self.config = config
        self.resolver = PathResolver(
            config.root_directory,
            case_insensitive=config.case_insensitive_paths,
        )
        self.audit = AuditLogger(config)
        self._default_shared_access_expiration = config.default_shared_access_expiration

        logger.info(f"FileSystemStorageProvider initialized at {self.resolver.root}")

    @classmethod
    def local(cls, root: Union[str, Path], **config_overrides: Any) -> "FileSystemStorageProvider":
        """
        Create a provider rooted at the given directory.

        Args:
            root: Root directory
            **config_overrides: Any other StorageConfig field

        Returns:
            A configured FileSystemStorageProvider
        """
        return cls(StorageConfig(root_directory=root, **config_overrides))

    @property
    def root(self) -> Path:
        return self.resolver.root

    @property
    def default_shared_access_expiration(self) -> Optional[datetime]:
        return self._default_shared_access_expiration

    @default_shared_access_expiration.setter
    def default_shared_access_expiration(self, value: Optional[datetime]) -> None:
        self._default_shared_access_expiration = value

    def combine(self, path1: Optional[str], path2: Optional[str]) -> str:
        """Combine two relative paths with '/'."""
        return combine_paths(path1, path2)

    def close(self) -> None:
        """Release the audit log file, if one was opened."""
        self.audit.close()

    # ========== Execution helpers ==========

    async def _run(self, operation: str, path: Optional[str], func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking implementation in a worker thread and audit the outcome."""
        try:
            result = await asyncio.to_thread(func, *args)
        except VirtualBlobsError as e:
            if e.operation is None:
                e.operation = operation
            self.audit.log_operation(operation, path, False, {"error": e.error_code})
            raise
        except Exception as e:
            self.audit.log_operation(operation, path, False, {"error": type(e).__name__})
            raise
        self.audit.log_operation(operation, path, True)
        return result

    def _resolve(self, path: Optional[str]) -> ResolvedPath:
        return self.resolver.resolve(path)

    # ========== File operations ==========

    async def get_file(self, path: str) -> FileSystemFile:
        """
        Retrieve a file.

        Raises:
            InvalidPathError: If the path escapes the root
            NotFoundError: If no regular file exists at the path
        """
        return await self._run("get_file", path, self._get_file, path)

    def _get_file(self, path: str) -> FileSystemFile:
        resolved = self._resolve(path)
        if not resolved.host_path.is_file():
            raise NotFoundError(f"File {path} does not exist", entry_type="file", path=path)
        return FileSystemFile(resolved.relative_path, resolved.host_path)

    async def list_files(self, path: str) -> List[FileSystemFile]:
        """
        List the files directly inside a folder.

        Returns an empty list if the folder does not exist.
        """
        return await self._run("list_files", path, self._list_files, path)

    def _list_files(self, path: str) -> List[FileSystemFile]:
        resolved = self._resolve(path)
        if not resolved.host_path.is_dir():
            return []
        with _io_errors("list_files", path, f"The folder {path} could not be listed"):
            children = _child_entries(resolved.host_path, want_folders=False)
        return [
            FileSystemFile(combine_paths(resolved.relative_path, name), host_path)
            for name, host_path in children
        ]

    async def delete_file(self, path: str) -> None:
        """
        Delete a file.

        Raises:
            NotFoundError: If the file does not exist
        """
        await self._run("delete_file", path, self._delete_file, path)

    def _delete_file(self, path: str) -> None:
        resolved = self._resolve(path)
        if not resolved.host_path.is_file():
            raise NotFoundError(f"File {path} does not exist", entry_type="file", path=path)
        with _io_errors("delete_file", path, f"The file {path} could not be deleted"):
            resolved.host_path.unlink()
        logger.debug(f"Deleted file {resolved.host_path}")

    async def rename_file(self, old_path: str, new_path: str) -> None:
        """
        Move a file to a new path.

        Raises:
            NotFoundError: If the source file does not exist
            AlreadyExistsError: If something already exists at the destination
        """
        await self._run("rename_file", old_path, self._rename_file, old_path, new_path)

    def _rename_file(self, old_path: str, new_path: str) -> None:
        source = self._resolve(old_path)
        target = self._resolve(new_path)
        if not source.host_path.is_file():
            raise NotFoundError(f"File {old_path} does not exist", entry_type="file", path=old_path)
        if target.host_path.exists():
            raise AlreadyExistsError(f"File {new_path} already exists", entry_type="file", path=new_path)
        with _io_errors("rename_file", old_path, f"The file {old_path} could not be moved to {new_path}"):
            source.host_path.rename(target.host_path)
        logger.debug(f"Renamed file {source.host_path} -> {target.host_path}")

    async def create_file(self, path: str) -> FileSystemFile:
        """
        Create an empty file, creating missing parent folders.

        Raises:
            AlreadyExistsError: If something already exists at the path
            InvalidOperationError: If the parent folders or the file cannot be created
        """
        return await self._run("create_file", path, self._create_file, path)

    def _create_file(self, path: str) -> FileSystemFile:
        resolved = self._resolve(path)
        host_path = resolved.host_path
        if host_path.exists():
            raise AlreadyExistsError(f"File {host_path.name} already exists", entry_type="file", path=path)

        with _io_errors("create_file", path, f"The parent folder of {path} could not be created"):
            host_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with host_path.open("xb"):
                pass
        except FileExistsError as exc:
            raise AlreadyExistsError(
                f"File {host_path.name} already exists", entry_type="file", path=path
            ) from exc
        except OSError as exc:
            logger.error(f"create_file failed for '{path}': {exc}")
            raise InvalidOperationError(
                f"The file {path} could not be created: {exc}",
                inner_exception=exc,
                operation="create_file",
                path=path,
            ) from exc

        logger.debug(f"Created file {host_path}")
        return FileSystemFile(resolved.relative_path, host_path)

    async def create_or_replace_file(self, path: str) -> FileSystemFile:
        """Create an empty file, deleting an existing file at the path first."""
        return await self._run("create_or_replace_file", path, self._create_or_replace_file, path)

    def _create_or_replace_file(self, path: str) -> FileSystemFile:
        if self._file_exists(path):
            self._delete_file(path)
        return self._create_file(path)

    async def file_exists(self, path: str) -> bool:
        """Return whether a regular file exists at the path. Never raises."""
        try:
            return await self._run("file_exists", path, self._file_exists, path)
        except Exception as e:
            logger.debug(f"file_exists failed for '{path}': {e!r}")
            return False

    def _file_exists(self, path: str) -> bool:
        return self._resolve(path).host_path.is_file()

    # ========== Stream operations ==========

    async def save_stream(self, path: str, input_stream: BinaryIO) -> None:
        """
        Create a file and copy a stream into it.

        The stream is read in chunks of ``config.copy_buffer_size`` bytes until
        exhausted. It is left open; the output file is always closed.

        Raises:
            AlreadyExistsError: If the file already exists
            InvalidOperationError: If the file cannot be created or written
        """
        await self._run("save_stream", path, self._save_stream, path, input_stream)

    def _save_stream(self, path: str, input_stream: BinaryIO) -> None:
        file = self._create_file(path)
        with _io_errors(
            "save_stream", path, f"The stream could not be saved to {path}",
            errors=(OSError, ValueError),
        ):
            with file.open_write() as output_stream:
                copied = copy_stream(input_stream, output_stream, self.config.copy_buffer_size)
        logger.debug(f"Saved {copied} bytes to {file.host_path}")

    async def try_save_stream(self, path: str, input_stream: BinaryIO) -> bool:
        """Like save_stream, but returns False instead of raising."""
        return await swallow_errors(self.save_stream(path, input_stream), "try_save_stream", path)

    # ========== Folder operations ==========

    async def list_folders(self, path: str) -> List[FileSystemFolder]:
        """
        List the folders directly inside a folder.

        The folder is created, with missing parents, if it does not exist.
        Kept for compatibility with existing callers; do not rely on a listing
        call to create folders in new code.

        Raises:
            InvalidOperationError: If the folder has to be created and cannot be
        """
        return await self._run("list_folders", path, self._list_folders, path)

    def _list_folders(self, path: str) -> List[FileSystemFolder]:
        resolved = self._resolve(path)
        if not resolved.host_path.is_dir():
            with _io_errors("list_folders", path, f"The folder could not be created at path: {path}"):
                resolved.host_path.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created folder {resolved.host_path} while listing")
        with _io_errors("list_folders", path, f"The folder {path} could not be listed"):
            children = _child_entries(resolved.host_path, want_folders=True)
        return [
            FileSystemFolder(combine_paths(resolved.relative_path, name), host_path)
            for name, host_path in children
        ]

    async def try_create_folder(self, path: str) -> bool:
        """
        Like create_folder, but returns False instead of raising.

        An already existing folder also yields False.
        """
        return await swallow_errors(self.create_folder(path), "try_create_folder", path)

    async def create_folder(self, path: str) -> None:
        """
        Create a folder and any missing parents.

        Raises:
            AlreadyExistsError: If something already exists at the path
            InvalidOperationError: If the folder cannot be created
        """
        await self._run("create_folder", path, self._create_folder, path)

    def _create_folder(self, path: str) -> None:
        resolved = self._resolve(path)
        if resolved.host_path.exists():
            raise AlreadyExistsError(f"Directory {path} already exists", entry_type="folder", path=path)
        with _io_errors("create_folder", path, f"The folder could not be created at path: {path}"):
            resolved.host_path.mkdir(parents=True)
        logger.debug(f"Created folder {resolved.host_path}")

    async def delete_folder(self, path: str) -> None:
        """
        Delete a folder and everything in it.

        Raises:
            NotFoundError: If the folder does not exist
        """
        await self._run("delete_folder", path, self._delete_folder, path)

    def _delete_folder(self, path: str) -> None:
        resolved = self._resolve(path)
        if not resolved.host_path.is_dir():
            raise NotFoundError(f"Directory {path} does not exist", entry_type="folder", path=path)
        with _io_errors("delete_folder", path, f"The folder {path} could not be deleted"):
            shutil.rmtree(resolved.host_path)
        logger.debug(f"Deleted folder {resolved.host_path}")

    async def rename_folder(self, old_path: str, new_path: str) -> None:
        """
        Move a folder to a new path.

        Raises:
            NotFoundError: If the source folder does not exist
            AlreadyExistsError: If something already exists at the destination
        """
        await self._run("rename_folder", old_path, self._rename_folder, old_path, new_path)

    def _rename_folder(self, old_path: str, new_path: str) -> None:
        source = self._resolve(old_path)
        target = self._resolve(new_path)
        if not source.host_path.is_dir():
            raise NotFoundError(f"Directory {old_path} does not exist", entry_type="folder", path=old_path)
        if target.host_path.exists():
            raise AlreadyExistsError(f"Directory {new_path} already exists", entry_type="folder", path=new_path)
        with _io_errors("rename_folder", old_path, f"The folder {old_path} could not be moved to {new_path}"):
            source.host_path.rename(target.host_path)
        logger.debug(f"Renamed folder {source.host_path} -> {target.host_path}")

    def __repr__(self) -> str:
        return f"FileSystemStorageProvider(root={self.resolver.root})"


def create_storage_provider(
    config: Optional[StorageConfig] = None,
    root: Optional[Union[str, Path]] = None,
) -> FileSystemStorageProvider:
    """
    Create a filesystem storage provider.

    Args:
        config: Explicit configuration. Takes precedence over root.
        root: Root directory, used when no config is given. If both are None,
            the configuration is read from VIRTUALBLOBS_* environment variables.

    Returns:
        FileSystemStorageProvider

    Example:
        >>> provider = create_storage_provider(root="/data")
        >>> await provider.file_exists("reports/q1.csv")
        False
    """
    if config is None:
        config = StorageConfig.from_env() if root is None else StorageConfig(root_directory=root)
    return FileSystemStorageProvider(config)
