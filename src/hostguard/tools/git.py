"""
Git tools: status, history, commit and push for repositories under the
allowed roots.

Commands go through the guarded executor like any other, with every
caller-supplied argument shell-quoted. Output is returned raw.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from hostguard._types import CommandRequest
from hostguard.tools.projects import REPOSITORY_MARKER

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hostguard._types import CommandResult, HostToolkit

PUSH_TIMEOUT_SECONDS = 30.0

LOG_FORMAT = "%H|%an|%aI|%s"
"""One line per commit: hash, author, ISO date and subject."""


def _ensure_repository(toolkit: HostToolkit, repo: str | Path) -> Path:
    safe_repo = toolkit.resolve_safe_path(repo)
    marker = safe_repo / REPOSITORY_MARKER
    # Worktrees and submodules use a .git file instead of a directory
    if not (toolkit.is_directory(marker) or toolkit.is_file(marker)):
        raise ValueError(f"Not a git repository: {repo}")
    return safe_repo


async def _git(
    toolkit: HostToolkit, repo: Path, args: str, *, timeout_seconds: float | None = None
) -> CommandResult:
    return await toolkit.execute(
        CommandRequest(
            command=f"git {args}",
            working_directory=repo,
            timeout_seconds=timeout_seconds,
        )
    )


async def git_status(toolkit: HostToolkit, repo: str | Path) -> CommandResult:
    """
    Short status with branch info (``git status -sb``).

    Raises:
        PathDenied: If ``repo`` is outside the allowed roots.
        ValueError: If ``repo`` is not a git repository.
    """
    safe_repo = _ensure_repository(toolkit, repo)
    return await _git(toolkit, safe_repo, "status -sb")


async def git_log(toolkit: HostToolkit, repo: str | Path, *, max_commits: int = 10) -> CommandResult:
    """
    Recent commits, newest first, one ``hash|author|date|subject`` line each.

    Raises:
        PathDenied: If ``repo`` is outside the allowed roots.
        ValueError: If ``repo`` is not a git repository or ``max_commits``
            is not positive.
    """
    if max_commits <= 0:
        raise ValueError(f"max_commits must be positive, got {max_commits}")
    safe_repo = _ensure_repository(toolkit, repo)
    return await _git(
        toolkit, safe_repo, f"log -n {int(max_commits)} --pretty=format:{shlex.quote(LOG_FORMAT)}"
    )


async def git_commit(
    toolkit: HostToolkit,
    repo: str | Path,
    message: str,
    *,
    add_all: bool = True,
    files: Iterable[str | Path] = (),
) -> CommandResult:
    """
    Stage changes and create a commit.

    Args:
        toolkit: Toolkit providing the path sandbox and executor.
        repo: Repository root.
        message: Commit message, passed to git as a single argument.
        add_all: Stage every change (``git add -A``) before committing.
        files: Paths to stage, relative to ``repo`` or absolute. Each one
            must lie inside the allowed roots.

    Returns:
        The result of the first step that failed, or of ``git commit``.

    Raises:
        PathDenied: If ``repo`` or one of ``files`` is outside the allowed roots.
        ValueError: If ``repo`` is not a git repository or ``message`` is empty.
    """
    if not message.strip():
        raise ValueError("Commit message must not be empty")
    safe_repo = _ensure_repository(toolkit, repo)
    paths = [toolkit.resolve_safe_path(path, base=safe_repo) for path in files]

    if add_all:
        result = await _git(toolkit, safe_repo, "add -A")
        if not result.success:
            return result
    if paths:
        quoted = " ".join(shlex.quote(str(path)) for path in paths)
        result = await _git(toolkit, safe_repo, f"add -- {quoted}")
        if not result.success:
            return result

    return await _git(toolkit, safe_repo, f"commit -m {shlex.quote(message)}")


async def git_push(
    toolkit: HostToolkit, repo: str | Path, *, remote: str = "origin", branch: str = "main"
) -> CommandResult:
    """
    Push ``branch`` to ``remote``.

    Raises:
        PathDenied: If ``repo`` is outside the allowed roots.
        ValueError: If ``repo`` is not a git repository, or ``remote`` or
            ``branch`` is empty or looks like an option.
    """
    for name in (remote, branch):
        if not name or name.startswith("-"):
            raise ValueError(f"Invalid remote or branch name: {name!r}")
    safe_repo = _ensure_repository(toolkit, repo)
    return await _git(
        toolkit,
        safe_repo,
        f"push {shlex.quote(remote)} {shlex.quote(branch)}",
        timeout_seconds=PUSH_TIMEOUT_SECONDS,
    )
