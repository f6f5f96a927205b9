"""Root-scoped path resolution with traversal protection.

Caller-facing paths are relative POSIX-style strings ('/' separators, empty
string for the root). They are mapped onto host paths under a fixed root
directory and rejected when the canonical result would escape that root.

Example:
    >>> resolver = PathResolver(Path("/data"))
    >>> resolved = resolver.resolve("reports/2024/q1.csv")
    >>> resolved.relative_path
    'reports/2024/q1.csv'
    >>> resolved.host_path
    PosixPath('/data/reports/2024/q1.csv')
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from .config import default_case_insensitive
from .exceptions import InvalidPathError

logger = logging.getLogger(__name__)

_CANONICALIZATION_ERRORS = (OSError, RuntimeError, ValueError, TypeError)


@dataclass(frozen=True)
class ResolvedPath:
    """Result of resolving a relative path against a provider root.

    Attributes:
        relative_path: Canonical '/'-separated path relative to the root ('' for the root)
        host_path: Canonical absolute path on the host
    """

    relative_path: str
    host_path: Path

    @property
    def is_root(self) -> bool:
        return self.relative_path == ""


def combine_paths(*segments: Optional[str]) -> str:
    """Join relative path segments with '/', skipping empty ones.

    >>> combine_paths("reports", "", "2024/", "q1.csv")
    'reports/2024/q1.csv'
    """
    parts = []
    for segment in segments:
        if not segment:
            continue
        stripped = segment.strip("/")
        if stripped:
            parts.append(stripped)
    return "/".join(parts)


def _to_host_separators(relative_path: str) -> str:
    if os.sep != "/":
        return relative_path.replace("/", os.sep)
    return relative_path


def _comparable_parts(path: Path, case_insensitive: bool) -> Tuple[str, ...]:
    if case_insensitive:
        return tuple(part.casefold() for part in path.parts)
    return path.parts


def _canonicalize(path: Path) -> Path:
    return path.resolve(strict=False)


def _contained_relative(
    canonical_root: Path,
    canonical_candidate: Path,
    case_insensitive: bool,
) -> Optional[str]:
    """Return the '/'-joined remainder of candidate under root, or None if outside.

    A prefix that only matches the root when case is ignored is accepted only
    if it names the root directory itself; on a case-sensitive filesystem a
    sibling such as 'data' next to root 'Data' is a different directory.
    """
    depth = len(canonical_root.parts)
    prefix = canonical_candidate.parts[:depth]
    if prefix == canonical_root.parts:
        return "/".join(canonical_candidate.parts[depth:])
    if not case_insensitive:
        return None
    if _comparable_parts(Path(*prefix), True) != _comparable_parts(canonical_root, True):
        return None
    try:
        if not Path(*prefix).samefile(canonical_root):
            return None
    except OSError:
        return None
    return "/".join(canonical_candidate.parts[depth:])


def resolve_path(
    root: Union[str, Path],
    relative_path: Optional[str],
    case_insensitive: Optional[bool] = None,
) -> ResolvedPath:
    """Resolve a relative path within root.

    Args:
        root: Absolute root directory
        relative_path: '/'-separated relative path; empty or None means the root
        case_insensitive: Compare path components ignoring case. None selects
            the platform default.

    Returns:
        ResolvedPath pointing inside root

    Raises:
        InvalidPathError: If the canonical path is outside root, or if either
            path cannot be canonicalized
    """
    if case_insensitive is None:
        case_insensitive = default_case_insensitive()

    try:
        canonical_root = _canonicalize(Path(root))
    except _CANONICALIZATION_ERRORS as exc:
        raise InvalidPathError(
            f"Storage root cannot be canonicalized: {exc}",
            reason="root_unresolvable",
            path=relative_path,
        ) from exc

    return _resolve_under(canonical_root, relative_path, case_insensitive)


def _resolve_under(
    canonical_root: Path,
    relative_path: Optional[str],
    case_insensitive: bool,
) -> ResolvedPath:
    if relative_path and "\x00" in relative_path:
        logger.warning(f"Rejected path {relative_path!r}: contains NUL byte")
        raise InvalidPathError("Invalid path", reason="nul_byte", path=relative_path)

    try:
        if not relative_path:
            candidate = canonical_root
        else:
            candidate = canonical_root / _to_host_separators(relative_path)
        canonical = _canonicalize(candidate)
    except _CANONICALIZATION_ERRORS as exc:
        logger.warning(f"Rejected path {relative_path!r}: cannot canonicalize ({exc})")
        raise InvalidPathError(
            "Invalid path",
            reason="unresolvable",
            path=relative_path,
        ) from exc

    relative = _contained_relative(canonical_root, canonical, case_insensitive)
    if relative is None:
        logger.warning(f"Rejected path {relative_path!r}: resolves outside storage root")
        raise InvalidPathError(
            "Invalid path",
            reason="outside_root",
            path=relative_path,
        )

    return ResolvedPath(relative_path=relative, host_path=canonical)


class PathResolver:
    """Maps relative paths onto a fixed root directory.

    The root is canonicalized once at construction; it does not change for
    the lifetime of the resolver.
    """

    def __init__(self, root: Union[str, Path], case_insensitive: Optional[bool] = None) -> None:
        """Initialize the resolver.

        Args:
            root: Absolute root directory
            case_insensitive: Compare path components ignoring case. None selects
                the platform default.
        """
        self.root = _canonicalize(Path(root))
        self.case_insensitive = (
            default_case_insensitive() if case_insensitive is None else case_insensitive
        )

    def resolve(self, relative_path: Optional[str]) -> ResolvedPath:
        """Resolve a relative path within the root.

        Raises:
            InvalidPathError: If the path escapes the root
        """
        return _resolve_under(self.root, relative_path, self.case_insensitive)

    def __repr__(self) -> str:
        return f"PathResolver(root={self.root}, case_insensitive={self.case_insensitive})"
