"""
Storage Exception Hierarchy

This module defines the exceptions raised by storage providers. Every error
carries the operation and the caller-supplied relative path that triggered it,
so a failure can be diagnosed without re-running the call.

Categories:
1. InvalidPathError - containment violations (never swallowed by strict operations)
2. NotFoundError / AlreadyExistsError - state pre-condition violations
3. InvalidOperationError - wrapped lower-level I/O failures
4. NoParentError - parent lookup on the root folder
"""

import time
from typing import Any, Dict, Optional


class VirtualBlobsError(Exception):
    """
    Base exception class for all storage errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        operation: Provider operation that failed (e.g. "create_file")
        path: Relative path the operation was called with
        timestamp: When the error occurred
        context: Additional context information
        user_message: User-friendly error message
        developer_message: Detailed technical error message
        suggestion: Suggested fix or next steps (if applicable)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "VIRTUALBLOBS_ERROR",
        operation: Optional[str] = None,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """
        Initialize storage error with rich context.

        Args:
            message: Technical error message for developers
            error_code: Unique error code for programmatic handling
            operation: Provider operation that failed
            path: Relative path the operation was called with
            context: Additional context information
            user_message: User-friendly error message
            suggestion: Suggested fix or next steps
        """
        super().__init__(message)
        self.error_code = error_code
        self.operation = operation
        self.path = path
        self.timestamp = time.time()
        self.context = context or {}
        self.user_message = user_message or message
        self.developer_message = message
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.developer_message,
            "user_message": self.user_message,
            "operation": self.operation,
            "path": self.path,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        """String representation with context."""
        parts = [f"[{self.error_code}]"]
        if self.operation:
            parts.append(f"Op:{self.operation}")
        if self.path is not None:
            parts.append(f"Path:'{self.path}'")
        parts.append(self.developer_message)
        return " ".join(parts)


# =============================================================================
# PATH CONTAINMENT ERRORS
# =============================================================================

class InvalidPathError(VirtualBlobsError):
    """
    Raised when a relative path resolves outside the provider root.

    Examples:
    - '..' segments climbing above the root
    - Absolute paths or drive prefixes overriding the root
    - Paths that cannot be canonicalized (symlink loops, NUL bytes)
    """

    def __init__(self, message: str, reason: Optional[str] = None, **kwargs):
        self.reason = reason

        context = kwargs.pop("context", {})
        if reason:
            context["reason"] = reason

        super().__init__(
            message,
            error_code="INVALID_PATH",
            context=context,
            user_message="The path is not valid for this storage.",
            suggestion="Use a relative path that stays inside the storage root.",
            **kwargs
        )


# =============================================================================
# STATE PRE-CONDITION ERRORS
# =============================================================================

class StorageStateError(VirtualBlobsError):
    """Base class for errors caused by the current state of the storage."""

    def __init__(self, message: str, **kwargs):
        error_code = kwargs.pop("error_code", "STORAGE_STATE_ERROR")
        super().__init__(message, error_code=error_code, **kwargs)


class NotFoundError(StorageStateError):
    """Raised when a file or folder required by an operation does not exist."""

    def __init__(self, message: str, entry_type: Optional[str] = None, **kwargs):
        self.entry_type = entry_type

        context = kwargs.pop("context", {})
        if entry_type:
            context["entry_type"] = entry_type

        super().__init__(
            message,
            error_code="NOT_FOUND",
            context=context,
            user_message=f"The {entry_type or 'entry'} does not exist.",
            suggestion="Check the path, or list the parent folder to see what exists.",
            **kwargs
        )


class AlreadyExistsError(StorageStateError):
    """Raised when an operation would overwrite an existing file or folder."""

    def __init__(self, message: str, entry_type: Optional[str] = None, **kwargs):
        self.entry_type = entry_type

        context = kwargs.pop("context", {})
        if entry_type:
            context["entry_type"] = entry_type

        super().__init__(
            message,
            error_code="ALREADY_EXISTS",
            context=context,
            user_message=f"The {entry_type or 'entry'} already exists.",
            suggestion="Delete the existing entry first or pick another path.",
            **kwargs
        )


# =============================================================================
# I/O AND STRUCTURE ERRORS
# =============================================================================

class InvalidOperationError(VirtualBlobsError):
    """
    Raised when the underlying filesystem call fails.

    The original exception is kept in ``inner_exception`` and is also chained
    as ``__cause__`` by the provider.

    Examples:
    - Permission denied
    - Disk full
    - A file sitting where a folder has to be created
    """

    def __init__(
        self,
        message: str,
        inner_exception: Optional[BaseException] = None,
        **kwargs
    ):
        self.inner_exception = inner_exception

        context = kwargs.pop("context", {})
        if inner_exception is not None:
            context["inner_exception"] = repr(inner_exception)

        super().__init__(
            message,
            error_code="INVALID_OPERATION",
            context=context,
            user_message="The storage operation could not be completed.",
            suggestion="Check permissions and free space on the storage root.",
            **kwargs
        )


class NoParentError(VirtualBlobsError):
    """Raised when the parent of the root folder is requested."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            error_code="NO_PARENT",
            user_message="The root folder has no parent.",
            **kwargs
        )
