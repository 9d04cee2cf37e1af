"""
Main entry point: create_host_toolkit factory function.

Tool handlers receive a HostToolkit and go through it for every path they
touch and every command they run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hostguard._types import HostToolkit
from hostguard.config import SandboxConfig
from hostguard.paths import PathSandbox
from hostguard.safe_exec import SafeExec

if TYPE_CHECKING:
    from hostguard.sandbox._base import Executor


def create_host_toolkit(
    config: SandboxConfig | None = None,
    *,
    executor: Executor | None = None,
) -> HostToolkit:
    """
    Create the path sandbox and guarded executor for tool handlers.

    Args:
        config: Sandbox policy. Defaults to SandboxConfig.from_env().
        executor: Executor backend. Defaults to a LocalExecutor using the
                  config's timeout and output cap.

    Returns:
        HostToolkit exposing resolve_safe_path, is_directory, is_file,
        find_marker_directories and execute.

    Example:
        >>> toolkit = create_host_toolkit(SandboxConfig.for_roots("/home/u/dev"))
        >>> repo = toolkit.resolve_safe_path("/home/u/dev/project")
        >>> result = await toolkit.execute(CommandRequest("git status", working_directory=repo))
    """
    config = config or SandboxConfig.from_env()
    return HostToolkit(
        config=config,
        paths=PathSandbox.from_config(config),
        executor=SafeExec.from_config(config, executor=executor),
    )
