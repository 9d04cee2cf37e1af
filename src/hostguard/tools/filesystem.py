"""
Filesystem tools for listing, reading and writing files.

Every path argument is validated against the allowed roots before it is
touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hostguard._types import HostToolkit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """One entry of a directory listing."""

    name: str
    path: str
    is_dir: bool
    size: int | None = None
    modified: str | None = None


@dataclass(frozen=True, slots=True)
class FileReadResult:
    content: str
    truncated: bool = False
    encoding: str = "utf-8"


@dataclass(frozen=True, slots=True)
class FileWriteResult:
    bytes_written: int
    success: bool = True


async def list_directory(toolkit: HostToolkit, path: str | Path) -> list[DirectoryEntry]:
    """
    List a directory with size and modification time where available.

    Raises:
        PathDenied: If the path is outside the allowed roots.
        NotADirectoryError: If the path is not a directory.
        PermissionError: If the directory cannot be listed.
    """
    safe_path = toolkit.resolve_safe_path(path)
    if not toolkit.is_directory(safe_path):
        raise NotADirectoryError(f"Path is not a directory: {path}")

    entries: list[DirectoryEntry] = []
    try:
        children = sorted(safe_path.iterdir())
    except PermissionError as e:
        raise PermissionError(f"Permission denied: {path}") from e

    for child in children:
        is_dir = toolkit.is_directory(child)
        size: int | None = None
        modified: str | None = None
        try:
            stat = child.stat()
            size = None if is_dir else stat.st_size
            modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat()
        except OSError:
            # Broken symlinks and unreadable entries are listed without metadata
            logger.debug(f"Could not stat {child}")
        entries.append(
            DirectoryEntry(name=child.name, path=str(child), is_dir=is_dir, size=size, modified=modified)
        )
    return entries


async def read_file(
    toolkit: HostToolkit, path: str | Path, *, max_bytes: int | None = None
) -> FileReadResult:
    """
    Read a text file, keeping at most ``max_bytes`` from its start.

    Args:
        toolkit: Toolkit providing the path sandbox.
        path: File to read.
        max_bytes: Read limit. Defaults to the config's max_file_bytes.

    Raises:
        PathDenied: If the path is outside the allowed roots.
        FileNotFoundError: If the path is not a file.
        PermissionError: If the file cannot be read.
    """
    limit = max_bytes or toolkit.config.max_file_bytes
    safe_path = toolkit.resolve_safe_path(path)
    if not toolkit.is_file(safe_path):
        raise FileNotFoundError(f"Path is not a file: {path}")

    size = safe_path.stat().st_size
    try:
        with safe_path.open("rb") as f:
            data = f.read(limit)
    except PermissionError as e:
        raise PermissionError(f"Permission denied: {path}") from e

    if size <= limit:
        return FileReadResult(content=data.decode("utf-8", errors="replace"))
    content = data.decode("utf-8", errors="replace")
    content += f"\n\n... [File truncated: showing {limit} of {size} bytes] ..."
    return FileReadResult(content=content, truncated=True)


async def write_file(
    toolkit: HostToolkit, path: str | Path, content: str, *, overwrite: bool = True
) -> FileWriteResult:
    """
    Write a text file, creating parent directories if needed.

    Raises:
        PathDenied: If the path is outside the allowed roots.
        FileExistsError: If the file exists and ``overwrite`` is False.
    """
    safe_path = toolkit.resolve_safe_path(path)
    if not overwrite and toolkit.is_file(safe_path):
        raise FileExistsError(f"File already exists and overwrite=False: {path}")

    safe_path.parent.mkdir(parents=True, exist_ok=True)
    safe_path.write_text(content, encoding="utf-8")
    return FileWriteResult(bytes_written=len(content.encode("utf-8")))


async def append_file(toolkit: HostToolkit, path: str | Path, content: str) -> FileWriteResult:
    """
    Append text to a file, creating it and its parents if needed.

    Raises:
        PathDenied: If the path is outside the allowed roots.
    """
    safe_path = toolkit.resolve_safe_path(path)
    safe_path.parent.mkdir(parents=True, exist_ok=True)
    with safe_path.open("a", encoding="utf-8") as f:
        f.write(content)
    return FileWriteResult(bytes_written=len(content.encode("utf-8")))
