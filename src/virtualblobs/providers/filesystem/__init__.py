"""Local filesystem backend.

Example:
    >>> from virtualblobs.providers.filesystem import FileSystemStorageProvider
    >>> provider = FileSystemStorageProvider.local("/data")
    >>> await provider.create_folder("reports")
"""

from .core import FileSystemStorageProvider, create_storage_provider
from .entries import FileSystemFile, FileSystemFolder

__all__ = [
    "FileSystemStorageProvider",
    "create_storage_provider",
    "FileSystemFile",
    "FileSystemFolder",
]
