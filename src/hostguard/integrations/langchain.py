"""LangChain integration for hostguard."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from hostguard.errors import PathDenied
from hostguard.integrations._format import render_result
from hostguard.tools.filesystem import list_directory, read_file
from hostguard.tools.terminal import run_command

if TYPE_CHECKING:
    from hostguard._types import HostToolkit

HAS_LANGCHAIN = False
_StructuredTool: Any = None

try:
    import langchain_core.tools

    _StructuredTool = langchain_core.tools.StructuredTool
    HAS_LANGCHAIN = True
except ImportError:
    pass


def create_langchain_tools(toolkit: HostToolkit) -> dict[str, Any]:
    """
    Create LangChain tools from a HostToolkit.

    Args:
        toolkit: The toolkit to wrap.

    Returns:
        Dictionary of LangChain StructuredTool instances.

    Raises:
        ImportError: If langchain-core is not installed.

    Example:
        >>> toolkit = create_host_toolkit()
        >>> tools = create_langchain_tools(toolkit)
        >>> agent = create_react_agent(llm, list(tools.values()))
    """
    if not HAS_LANGCHAIN:
        raise ImportError(
            "LangChain integration requires langchain-core. "
            "Install with: pip install hostguard[langchain]"
        )

    async def run_shell(command: str, cwd: str | None = None, dry_run: bool = False) -> str:
        """Execute a shell command inside the allowed directories."""
        try:
            result = await run_command(toolkit, command, cwd=cwd, dry_run=dry_run)
        except PathDenied as e:
            return str(e)
        return render_result(result)

    async def list_dir(path: str) -> str:
        """List a directory inside the allowed roots."""
        try:
            entries = await list_directory(toolkit, path)
        except (PathDenied, NotADirectoryError, PermissionError) as e:
            return str(e)
        return "\n".join(f"{entry.name}/" if entry.is_dir else entry.name for entry in entries)

    async def read(path: str) -> str:
        """Read a text file inside the allowed roots."""
        try:
            return (await read_file(toolkit, path)).content
        except (PathDenied, FileNotFoundError, PermissionError) as e:
            return str(e)

    roots = ", ".join(str(root) for root in toolkit.config.allowed_roots)

    return {
        "run_command": _StructuredTool.from_function(
            coroutine=run_shell,
            name="run_command",
            description=(
                "Execute a shell command with a timeout and output truncation. "
                f"Dangerous commands are blocked. Working directories must be under: {roots}"
            ),
        ),
        "list_directory": _StructuredTool.from_function(
            coroutine=list_dir,
            name="list_directory",
            description=f"List a directory. Paths must be under: {roots}",
        ),
        "read_file": _StructuredTool.from_function(
            coroutine=read,
            name="read_file",
            description=f"Read a text file. Paths must be under: {roots}",
        ),
    }
