"""File and folder entries of the filesystem provider.

Entries hold a relative path and the matching host path, nothing else. Every
attribute access stats the host path again, so an entry always reports the
current state of the disk, and raises NotFoundError once the item is gone.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from ...data_models import EntryInfo
from ...exceptions import NoParentError, NotFoundError
from ...interfaces import StorageFile, StorageFolder


def _stat(host_path: Path, relative_path: str, entry_type: str) -> os.stat_result:
    try:
        return host_path.stat()
    except FileNotFoundError as exc:
        raise NotFoundError(
            f"{entry_type.capitalize()} {relative_path} does not exist",
            entry_type=entry_type,
            path=relative_path,
        ) from exc


def _timestamp(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime).astimezone()


def _directory_size(directory: Path) -> int:
    """Sum the sizes of all regular files below directory, without following links."""
    size = 0
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_file(follow_symlinks=False):
                size += entry.stat(follow_symlinks=False).st_size
            elif entry.is_dir(follow_symlinks=False):
                size += _directory_size(Path(entry.path))
    return size


class FileSystemFile(StorageFile):
    """A file under the provider root."""

    def __init__(self, relative_path: str, host_path: Path):
        self._path = relative_path
        self._host_path = host_path

    @property
    def path(self) -> str:
        return self._path

    @property
    def host_path(self) -> Path:
        return self._host_path

    @property
    def name(self) -> str:
        return self._host_path.name

    @property
    def size(self) -> int:
        return _stat(self._host_path, self._path, "file").st_size

    @property
    def last_updated(self) -> datetime:
        return _timestamp(_stat(self._host_path, self._path, "file"))

    @property
    def file_type(self) -> str:
        return self._host_path.suffix

    def _open(self, mode: str) -> BinaryIO:
        try:
            return self._host_path.open(mode)
        except FileNotFoundError as exc:
            raise NotFoundError(
                f"File {self._path} does not exist",
                entry_type="file",
                path=self._path,
            ) from exc

    def open_read(self) -> BinaryIO:
        return self._open("rb")

    def open_write(self) -> BinaryIO:
        return self._open("r+b")

    def create_file(self) -> BinaryIO:
        """Truncate the file to zero bytes and open it for reading and writing."""
        if not self._host_path.is_file():
            raise NotFoundError(
                f"File {self._path} does not exist",
                entry_type="file",
                path=self._path,
            )
        return self._open("w+b")

    def to_info(self) -> EntryInfo:
        st = _stat(self._host_path, self._path, "file")
        return EntryInfo(
            path=self._path,
            name=self.name,
            is_folder=False,
            size=st.st_size,
            last_updated=_timestamp(st),
            file_type=self.file_type,
        )

    def __repr__(self) -> str:
        return f"FileSystemFile(path='{self._path}')"


class FileSystemFolder(StorageFolder):
    """A folder under the provider root. The root itself has the path ''."""

    def __init__(self, relative_path: str, host_path: Path):
        self._path = relative_path
        self._host_path = host_path

    @property
    def path(self) -> str:
        return self._path

    @property
    def host_path(self) -> Path:
        return self._host_path

    @property
    def name(self) -> str:
        return self._host_path.name

    @property
    def last_updated(self) -> datetime:
        return _timestamp(_stat(self._host_path, self._path, "folder"))

    @property
    def size(self) -> int:
        """Recursive total of the file sizes below this folder."""
        _stat(self._host_path, self._path, "folder")
        return _directory_size(self._host_path)

    def get_parent(self) -> FileSystemFolder:
        if not self._path:
            raise NoParentError(
                f"Directory {self.name} does not have a parent directory",
                operation="get_parent",
                path=self._path,
            )
        parent_path = self._path.rpartition("/")[0]
        return FileSystemFolder(parent_path, self._host_path.parent)

    def to_info(self) -> EntryInfo:
        st = _stat(self._host_path, self._path, "folder")
        return EntryInfo(
            path=self._path,
            name=self.name,
            is_folder=True,
            size=_directory_size(self._host_path),
            last_updated=_timestamp(st),
        )

    def __repr__(self) -> str:
        return f"FileSystemFolder(path='{self._path}')"
