"""
Core type definitions for hostguard.

Uses frozen dataclasses for per-call values and a small toolkit object that
bundles the path sandbox and the safe executor for tool handlers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from hostguard.errors import CommandError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from hostguard.config import SandboxConfig
    from hostguard.paths import PathSandbox
    from hostguard.safe_exec import SafeExec

BLOCKED_EXIT_CODE = -1
"""Sentinel exit code for commands rejected by the safety guard."""


@dataclass(frozen=True, slots=True)
class CommandRequest:
    """A single command to run. Built per call and never persisted."""

    command: str
    working_directory: str | Path | None = None
    timeout_seconds: float | None = None
    max_output_chars: int | None = None
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and not (
            math.isfinite(self.timeout_seconds) and self.timeout_seconds > 0
        ):
            raise ValueError(f"timeout_seconds must be a positive finite number, got {self.timeout_seconds}")
        if self.max_output_chars is not None and self.max_output_chars <= 0:
            raise ValueError(f"max_output_chars must be positive, got {self.max_output_chars}")


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Immutable result from command execution."""

    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False
    working_directory: str = ""
    truncated: bool = False
    warning: str | None = None

    @property
    def success(self) -> bool:
        """Return True if command exited with code 0 and did not time out."""
        return self.exit_code == 0 and not self.timed_out

    @property
    def blocked(self) -> bool:
        """Return True if the safety guard refused to run the command."""
        return self.exit_code == BLOCKED_EXIT_CODE

    def raise_for_status(self) -> None:
        """Raise CommandError if the command was blocked, timed out or failed."""
        if self.blocked:
            raise CommandError(self.warning or "Command blocked")
        if self.timed_out:
            raise CommandError(self.stderr or "Command timed out")
        if self.exit_code != 0:
            raise CommandError(
                f"Command failed with exit code {self.exit_code}: {self.stderr or self.stdout}"
            )


@dataclass
class HostToolkit:
    """
    Everything a tool handler needs from the core.

    Attributes:
        config: The configuration the toolkit was built from.
        paths: Path sandbox enforcing the allowed roots.
        executor: Guarded command execution facade.
    """

    config: SandboxConfig
    paths: PathSandbox
    executor: SafeExec

    def resolve_safe_path(self, path: str | Path, base: str | Path | None = None) -> Path:
        """Resolve a path and raise PathDenied if it escapes the allowed roots."""
        return self.paths.resolve(path, base)

    def is_directory(self, path: str | Path) -> bool:
        return self.paths.is_directory(path)

    def is_file(self, path: str | Path) -> bool:
        return self.paths.is_file(path)

    def find_marker_directories(
        self, root: str | Path, marker: str, max_depth: int
    ) -> Iterator[Path]:
        """Lazily yield directories under root that directly contain marker."""
        return self.paths.find_marker_directories(root, marker, max_depth)

    async def execute(self, request: CommandRequest) -> CommandResult:
        """Run a command through the safety guard and executor."""
        return await self.executor.execute(request)
