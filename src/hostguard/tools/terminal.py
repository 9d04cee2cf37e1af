"""Shell command tool."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from hostguard._types import CommandRequest

if TYPE_CHECKING:
    from hostguard._types import CommandResult, HostToolkit


async def run_command(
    toolkit: HostToolkit,
    command: str,
    *,
    cwd: str | Path | None = None,
    timeout_seconds: float | None = None,
    max_output_chars: int | None = None,
    dry_run: bool = False,
) -> CommandResult:
    """
    Run a shell command in a directory inside the allowed roots.

    Dangerous commands are blocked, output is truncated and long-running
    commands are killed at the timeout. ``dry_run`` previews the command
    without running it.

    Raises:
        PathDenied: If ``cwd`` is outside the allowed roots.
        SpawnFailure: If the shell could not be started.
    """
    working_directory = toolkit.resolve_safe_path(cwd) if cwd is not None else None
    return await toolkit.execute(
        CommandRequest(
            command=command,
            working_directory=working_directory,
            timeout_seconds=timeout_seconds,
            max_output_chars=max_output_chars,
            dry_run=dry_run,
        )
    )
