"""Rendering of command results as text for language models."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hostguard._types import CommandResult


def render_result(result: CommandResult) -> str:
    """Turn a CommandResult into the string handed back to the model."""
    if result.blocked:
        return f"Blocked: {result.warning}"
    if result.warning:
        return result.warning
    if result.timed_out:
        return f"Error (Timed Out):\n{result.stderr}"
    if result.exit_code != 0:
        return f"Error (Exit Code {result.exit_code}):\n{result.stderr or result.stdout}"
    return result.stdout
