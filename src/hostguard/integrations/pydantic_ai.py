"""
PydanticAI integration for hostguard.

Provides helpers to create PydanticAI-compatible tools.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

try:
    from pydantic_ai import RunContext
except ImportError:
    raise ImportError(
        "PydanticAI integration requires 'pydantic-ai'. "
        "Install with `pip install hostguard[pydantic-ai]`"
    )

from hostguard.errors import PathDenied
from hostguard.integrations._format import render_result
from hostguard.tools.terminal import run_command

if TYPE_CHECKING:
    from hostguard._types import HostToolkit


def create_shell_tool(
    toolkit: HostToolkit,
    *,
    cwd: str | None = None,
    timeout: float | None = None,
) -> Callable[[RunContext[Any], str], Awaitable[str]]:
    """
    Create a PydanticAI tool function for guarded shell execution.

    Example:
        >>> from pydantic_ai import Agent
        >>> shell_tool = create_shell_tool(create_host_toolkit(), cwd="/home/u/dev/project")
        >>> agent = Agent("openai:gpt-4o", tools=[shell_tool])
    """

    async def shell_tool(ctx: RunContext[Any], command: str) -> str:
        """
        Execute a shell command safely.
        Dangerous commands are refused and output is truncated.
        """
        try:
            result = await run_command(toolkit, command, cwd=cwd, timeout_seconds=timeout)
        except PathDenied as e:
            return str(e)
        return render_result(result)

    return shell_tool
