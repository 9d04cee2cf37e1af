"""
Deny-list command guard.

The guard treats a command as an opaque string: any pattern that matches
anywhere blocks the whole command. It does not parse shell syntax, so quoted
or encoded variants can slip past and harmless commands that merely mention a
pattern are refused. It is one layer of defence, not a guarantee.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DangerPattern:
    """A compiled regex with a human-readable label."""

    regex: re.Pattern[str]
    description: str

    @classmethod
    def compile(cls, source: str, description: str | None = None) -> DangerPattern:
        """
        Compile a pattern from its regex source.

        Args:
            source: Regex source string.
            description: Label for error messages. Defaults to the source itself.

        Raises:
            re.error: If the source is not a valid regex.
        """
        return cls(re.compile(source), description or source)

    @property
    def source(self) -> str:
        return self.regex.pattern

    def matches(self, command: str) -> bool:
        return self.regex.search(command) is not None


DEFAULT_DANGER_PATTERNS: tuple[DangerPattern, ...] = (
    # Filesystem destruction; rm -rf /tmp/x stays allowed
    DangerPattern.compile(r"rm\s+-rf\s+/(?!\w)", "Recursive delete of root directory"),
    # Fork bomb
    DangerPattern.compile(r":\(\)\s*\{\s*:\|:&\s*\};:", "Fork bomb pattern"),
    # Direct disk access
    DangerPattern.compile(r"mkfs", "Filesystem creation/destruction"),
    DangerPattern.compile(r"dd\s+if=.*of=/dev", "Direct device write via dd"),
    DangerPattern.compile(r">\s*/dev/sd[a-z]", "Direct disk write"),
    # Remote code execution
    DangerPattern.compile(r"curl.*\|\s*(?:bash|sh)", "Remote code execution via curl|sh"),
    DangerPattern.compile(r"wget.*\|\s*(?:bash|sh)", "Remote code execution via wget|sh"),
)


@dataclass(frozen=True, slots=True)
class Violation:
    """
    A command that matched a danger pattern.

    Attributes:
        command: The command that was checked.
        pattern: The first pattern that matched it.
    """

    command: str
    pattern: DangerPattern

    @property
    def description(self) -> str:
        return self.pattern.description

    @property
    def message(self) -> str:
        """Caller-facing explanation, safe to surface verbatim."""
        return f"Command blocked: potentially dangerous pattern detected ({self.description})"


class CommandSafetyGuard:
    """
    Pure predicate over raw command strings.

    Example:
        >>> guard = CommandSafetyGuard()
        >>> guard.check("ls -la") is None
        True
        >>> guard.check("rm -rf /").description
        'Recursive delete of root directory'
    """

    def __init__(self, patterns: Iterable[DangerPattern] = DEFAULT_DANGER_PATTERNS) -> None:
        self._patterns = tuple(patterns)

    @property
    def patterns(self) -> tuple[DangerPattern, ...]:
        return self._patterns

    def check(self, command: str) -> Violation | None:
        """
        Validate a command against the deny-list.

        Args:
            command: The full command string, unparsed.

        Returns:
            The first Violation found, or None if no pattern matches.
        """
        for pattern in self._patterns:
            if pattern.matches(command):
                return Violation(command=command, pattern=pattern)
        return None

    def with_pattern(self, source: str, description: str | None = None) -> CommandSafetyGuard:
        """Return a new guard with one more blocked pattern appended."""
        return CommandSafetyGuard((*self._patterns, DangerPattern.compile(source, description)))
