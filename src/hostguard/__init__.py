"""
hostguard: path confinement and guarded command execution for tool servers.
"""

from hostguard._types import BLOCKED_EXIT_CODE, CommandRequest, CommandResult, HostToolkit
from hostguard.api import create_host_toolkit
from hostguard.config import SandboxConfig
from hostguard.errors import (
    CommandError,
    ConfigurationError,
    HostGuardError,
    PathDenied,
    SpawnFailure,
)
from hostguard.paths import PathSandbox
from hostguard.safe_exec import SafeExec
from hostguard.sandbox import Executor, LocalExecutor, truncate_output
from hostguard.security import DEFAULT_DANGER_PATTERNS, CommandSafetyGuard, DangerPattern, Violation

__all__ = [
    "BLOCKED_EXIT_CODE",
    "DEFAULT_DANGER_PATTERNS",
    "CommandError",
    "CommandRequest",
    "CommandResult",
    "CommandSafetyGuard",
    "ConfigurationError",
    "DangerPattern",
    "Executor",
    "HostGuardError",
    "HostToolkit",
    "LocalExecutor",
    "PathDenied",
    "PathSandbox",
    "SafeExec",
    "SandboxConfig",
    "SpawnFailure",
    "Violation",
    "create_host_toolkit",
    "truncate_output",
]
