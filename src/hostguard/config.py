"""
Sandbox configuration.

Allowed roots and danger patterns are loaded once, usually from the
environment, and passed explicitly to the sandbox, guard and executor so
tests can build isolated policies side by side.
"""

from __future__ import annotations

import math
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from hostguard.errors import ConfigurationError
from hostguard.security.policy import DEFAULT_DANGER_PATTERNS, DangerPattern

DEFAULT_COMMAND_TIMEOUT = 10.0
"""Default wall-clock limit for a command, in seconds."""

DEFAULT_MAX_OUTPUT_CHARS = 10_000
"""Default per-stream output cap, in characters."""

DEFAULT_MAX_FILE_BYTES = 100_000
"""Default cap for file reads done by the filesystem tools."""

ENV_ALLOWED_ROOTS = "HOSTGUARD_ALLOWED_ROOTS"
ENV_EXTRA_DANGER_PATTERNS = "HOSTGUARD_EXTRA_DANGER_PATTERNS"
ENV_COMMAND_TIMEOUT = "HOSTGUARD_COMMAND_TIMEOUT"
ENV_MAX_OUTPUT_CHARS = "HOSTGUARD_MAX_OUTPUT_CHARS"
ENV_MAX_FILE_BYTES = "HOSTGUARD_MAX_FILE_BYTES"

DEFAULT_ROOT_NAMES = ("dev", "projects", "code", "workspace", "Desktop", "Documents", "Downloads")


def normalize_root(root: str | Path) -> Path:
    """Expand ``~`` and make a root absolute without resolving symlinks."""
    return Path(os.path.abspath(os.path.expanduser(str(root).strip())))


def default_allowed_roots(home: str | Path | None = None) -> tuple[Path, ...]:
    """Common development directories under the user's home."""
    base = Path(home) if home is not None else Path.home()
    return tuple(normalize_root(base / name) for name in DEFAULT_ROOT_NAMES)


@dataclass(frozen=True)
class SandboxConfig:
    """
    Process-wide, immutable sandbox policy.

    Attributes:
        allowed_roots: Ordered directories every accepted path must live under.
        danger_patterns: Ordered deny-list consulted before running any command.
        command_timeout: Default timeout in seconds.
        max_output_chars: Default per-stream output cap.
        max_file_bytes: Default cap for file reads.
    """

    allowed_roots: tuple[Path, ...]
    danger_patterns: tuple[DangerPattern, ...] = field(default=DEFAULT_DANGER_PATTERNS)
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    max_output_chars: int = DEFAULT_MAX_OUTPUT_CHARS
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES

    def __post_init__(self) -> None:
        roots = tuple(dict.fromkeys(normalize_root(root) for root in self.allowed_roots))
        if not roots:
            raise ConfigurationError("At least one allowed root is required")
        object.__setattr__(self, "allowed_roots", roots)
        object.__setattr__(self, "danger_patterns", tuple(self.danger_patterns))

        if not math.isfinite(self.command_timeout) or self.command_timeout <= 0:
            raise ConfigurationError(
                f"command_timeout must be a positive finite number, got {self.command_timeout}"
            )
        if self.max_output_chars <= 0:
            raise ConfigurationError(f"max_output_chars must be positive, got {self.max_output_chars}")
        if self.max_file_bytes <= 0:
            raise ConfigurationError(f"max_file_bytes must be positive, got {self.max_file_bytes}")

    @classmethod
    def for_roots(cls, *roots: str | Path) -> SandboxConfig:
        """Create a config with the given roots and default everything else."""
        return cls(allowed_roots=tuple(Path(root) for root in roots))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SandboxConfig:
        """
        Load configuration from environment variables.

        ``HOSTGUARD_ALLOWED_ROOTS`` is a comma-separated list of directories;
        ``HOSTGUARD_EXTRA_DANGER_PATTERNS`` holds one regex per line and is
        appended to the default deny-list.

        Raises:
            ConfigurationError: If any value is malformed.
        """
        env = os.environ if environ is None else environ

        raw_roots = env.get(ENV_ALLOWED_ROOTS, "").strip()
        if raw_roots:
            roots = tuple(normalize_root(part) for part in raw_roots.split(",") if part.strip())
        else:
            roots = default_allowed_roots()

        patterns = DEFAULT_DANGER_PATTERNS + _parse_patterns(
            env.get(ENV_EXTRA_DANGER_PATTERNS, "").splitlines()
        )

        return cls(
            allowed_roots=roots,
            danger_patterns=patterns,
            command_timeout=_parse_number(env, ENV_COMMAND_TIMEOUT, float, DEFAULT_COMMAND_TIMEOUT),
            max_output_chars=_parse_number(env, ENV_MAX_OUTPUT_CHARS, int, DEFAULT_MAX_OUTPUT_CHARS),
            max_file_bytes=_parse_number(env, ENV_MAX_FILE_BYTES, int, DEFAULT_MAX_FILE_BYTES),
        )

    def with_patterns(self, *sources: str) -> SandboxConfig:
        """Return a copy with extra danger patterns appended."""
        return replace(self, danger_patterns=self.danger_patterns + _parse_patterns(sources))


def _parse_patterns(sources: Iterable[str]) -> tuple[DangerPattern, ...]:
    patterns = []
    for source in sources:
        source = source.strip()
        if not source:
            continue
        try:
            patterns.append(DangerPattern.compile(source))
        except re.error as e:
            raise ConfigurationError(f"Invalid danger pattern {source!r}: {e}") from e
    return tuple(patterns)


def _parse_number(env: Mapping[str, str], key: str, kind: type, default: float | int) -> float | int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{key} must be a positive finite number, got {raw!r}")
    return value
