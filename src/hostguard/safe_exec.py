"""
Guarded command execution.

SafeExec is the only way tool handlers run commands: the deny-list is checked
first, and a blocked command never reaches the executor, not even as a
dry-run preview.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from hostguard._types import BLOCKED_EXIT_CODE, CommandRequest, CommandResult
from hostguard.sandbox.local import LocalExecutor
from hostguard.security.policy import CommandSafetyGuard

if TYPE_CHECKING:
    from hostguard.config import SandboxConfig
    from hostguard.sandbox._base import Executor

logger = logging.getLogger(__name__)


class SafeExec:
    """
    Composes a CommandSafetyGuard with an Executor.

    Example:
        >>> safe = SafeExec(CommandSafetyGuard(), LocalExecutor())
        >>> result = await safe.execute(CommandRequest("rm -rf /"))
        >>> result.blocked
        True
    """

    def __init__(self, guard: CommandSafetyGuard, executor: Executor) -> None:
        self.guard = guard
        self.executor = executor

    @classmethod
    def from_config(cls, config: SandboxConfig, *, executor: Executor | None = None) -> SafeExec:
        """Build a guard from the configured patterns and a LocalExecutor with its defaults."""
        return cls(
            CommandSafetyGuard(config.danger_patterns),
            executor
            or LocalExecutor(
                default_timeout=config.command_timeout,
                default_max_output_chars=config.max_output_chars,
            ),
        )

    async def execute(self, request: CommandRequest) -> CommandResult:
        """
        Check a command against the guard, then run it.

        Returns:
            A blocked result (exit code -1, warning set) if any danger pattern
            matches; otherwise whatever the executor returns.

        Raises:
            SpawnFailure: Propagated from the executor.
        """
        violation = self.guard.check(request.command)
        if violation is not None:
            logger.warning(f"Blocked command {request.command!r}: {violation.description}")
            cwd = request.working_directory
            return CommandResult(
                stdout="",
                stderr="",
                exit_code=BLOCKED_EXIT_CODE,
                working_directory=os.fspath(cwd) if cwd else os.getcwd(),
                warning=violation.message,
            )

        return await self.executor.run(request)
