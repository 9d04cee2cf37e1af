"""
Exception hierarchy for hostguard.

Only two conditions are raised out of the core: a path outside every allowed
root (PathDenied) and a command that could not be started at all
(SpawnFailure). A blocked or failing command is a normal CommandResult.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class HostGuardError(Exception):
    """Base class for all hostguard errors."""


class ConfigurationError(HostGuardError):
    """Raised when sandbox configuration is missing or malformed."""


class PathDenied(HostGuardError):
    """
    Raised when a path resolves outside all allowed roots.

    The message is meant to be shown to the caller as-is.

    Attributes:
        path: The rejected absolute path.
        roots: The configured allowed roots.
    """

    def __init__(self, path: str | Path, roots: Sequence[str | Path]) -> None:
        self.path = str(path)
        self.roots = tuple(str(root) for root in roots)
        super().__init__(
            f'Access denied: Path "{self.path}" is outside allowed roots.\n'
            f"Allowed roots: {', '.join(self.roots)}"
        )


class SpawnFailure(HostGuardError):
    """
    Raised when the shell for a command could not be launched.

    Distinct from the command's own exit status.
    """

    def __init__(self, command: str, cause: BaseException) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Could not start command {command!r}: {cause}")


class CommandError(HostGuardError):
    """Raised by CommandResult.raise_for_status for unsuccessful results."""
