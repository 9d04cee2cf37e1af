"""
Path confinement.

Untrusted path strings are normalised lexically and accepted only when they
sit on or under one of the allowed roots, compared segment by segment so a
root of ``~/dev`` never admits ``~/devtools``. Symlinks are not resolved:
the returned path is the one the caller named, and the filesystem may change
between validation and use.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from hostguard.config import normalize_root
from hostguard.errors import PathDenied

if TYPE_CHECKING:
    from hostguard.config import SandboxConfig

logger = logging.getLogger(__name__)


class PathSandbox:
    """
    Resolves paths against a fixed set of allowed roots.

    Example:
        >>> sandbox = PathSandbox(["/home/u/dev"])
        >>> sandbox.resolve("proj/src", base="/home/u/dev")
        PosixPath('/home/u/dev/proj/src')
        >>> sandbox.resolve("/home/u/dev/proj/../../etc/passwd")
        Traceback (most recent call last):
            ...
        hostguard.errors.PathDenied: Access denied: ...
    """

    def __init__(self, roots: Iterable[str | Path]) -> None:
        self._roots = tuple(dict.fromkeys(normalize_root(root) for root in roots))

    @classmethod
    def from_config(cls, config: SandboxConfig) -> PathSandbox:
        return cls(config.allowed_roots)

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    def resolve(self, path: str | Path, base: str | Path | None = None) -> Path:
        """
        Resolve a possibly relative path and check it against the allowed roots.

        Args:
            path: Relative or absolute path from an untrusted caller.
            base: Directory relative paths are joined to. Defaults to the
                process working directory.

        Returns:
            The absolute, normalised path.

        Raises:
            PathDenied: If the path is not equal to or under any allowed root.
        """
        start = os.fspath(base) if base is not None else os.getcwd()
        candidate = Path(os.path.normpath(os.path.join(start, os.fspath(path))))

        if not self.contains(candidate):
            logger.info(f"Denied path outside allowed roots: {candidate}")
            raise PathDenied(candidate, self._roots)
        return candidate

    def contains(self, path: Path) -> bool:
        """True if an absolute, normalised path is a root or lies beneath one."""
        return any(path == root or root in path.parents for root in self._roots)

    def is_directory(self, path: str | Path) -> bool:
        """Best-effort check; unreadable paths count as absent."""
        try:
            return Path(path).is_dir()
        except OSError:
            return False

    def is_file(self, path: str | Path) -> bool:
        """Best-effort check; unreadable paths count as absent."""
        try:
            return Path(path).is_file()
        except OSError:
            return False

    def find_marker_directories(
        self, root: str | Path, marker: str, max_depth: int
    ) -> Iterator[Path]:
        """
        Lazily yield directories under ``root`` that directly contain ``marker``.

        The walk is depth-first in name order. A directory holding the marker
        is yielded and not descended into, so nested repositories are not
        reported. Dot-directories and symlinked directories are skipped, and
        a directory that cannot be read is skipped without ending the search.
        ``root`` is depth 0; nothing deeper than ``max_depth`` is inspected.

        Args:
            root: Directory to search from, normally already resolved.
            marker: File or directory name to look for (e.g. ``".git"``).
            max_depth: Deepest level to inspect, counting root as 0.
        """
        return _walk_markers(Path(root), marker, max_depth, 0)


def _walk_markers(directory: Path, marker: str, max_depth: int, depth: int) -> Iterator[Path]:
    if depth > max_depth:
        return

    if os.path.exists(directory / marker):
        yield directory
        return

    try:
        with os.scandir(directory) as it:
            children = sorted(
                entry.name
                for entry in it
                if not entry.name.startswith(".") and entry.is_dir(follow_symlinks=False)
            )
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {directory}: {e}")
        return

    for name in children:
        yield from _walk_markers(directory / name, marker, max_depth, depth + 1)

