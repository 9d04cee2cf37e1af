"""
Abstract base class for command executors.

Executors run a single command and report the outcome as a CommandResult.
They never raise for a command that failed, only for one that could not be
started.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hostguard._types import CommandRequest, CommandResult


class Executor(ABC):
    """Abstract base for all executor implementations."""

    @abstractmethod
    async def run(self, request: CommandRequest) -> CommandResult:
        """
        Run a command to completion or timeout.

        Args:
            request: The command, working directory and limits.

        Returns:
            CommandResult with stdout, stderr, exit_code and flags.

        Raises:
            SpawnFailure: If the command could not be started at all.
        """
        ...
