"""
virtualblobs - Path-scoped storage providers

Lets callers manipulate files and folders through relative, provider-scoped
paths without knowing the physical storage behind them. Relative paths are
always resolved inside a fixed root; anything that would escape it is
rejected with InvalidPathError.

License: Apache-2.0
"""

__version__ = "0.1.0"

# Configuration
from .config import StorageConfig

# Errors
from .exceptions import (
    VirtualBlobsError,
    InvalidPathError,
    StorageStateError,
    NotFoundError,
    AlreadyExistsError,
    InvalidOperationError,
    NoParentError,
)

# Interfaces and models
from .interfaces import StorageFile, StorageFolder, StorageProvider
from .data_models import EntryInfo

# Path containment
from .paths import PathResolver, ResolvedPath, combine_paths, resolve_path

# Filesystem backend
from .providers import (
    FileSystemFile,
    FileSystemFolder,
    FileSystemStorageProvider,
    create_storage_provider,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "StorageConfig",
    # Errors
    "VirtualBlobsError",
    "InvalidPathError",
    "StorageStateError",
    "NotFoundError",
    "AlreadyExistsError",
    "InvalidOperationError",
    "NoParentError",
    # Interfaces
    "StorageFile",
    "StorageFolder",
    "StorageProvider",
    "EntryInfo",
    # Paths
    "PathResolver",
    "ResolvedPath",
    "combine_paths",
    "resolve_path",
    # Filesystem backend
    "FileSystemStorageProvider",
    "create_storage_provider",
    "FileSystemFile",
    "FileSystemFolder",
]
