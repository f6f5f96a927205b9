"""Storage backends."""

from .filesystem import (
    FileSystemFile,
    FileSystemFolder,
    FileSystemStorageProvider,
    create_storage_provider,
)

__all__ = [
    "FileSystemStorageProvider",
    "create_storage_provider",
    "FileSystemFile",
    "FileSystemFolder",
]
