"""
Project tools: repository discovery and test runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from hostguard._types import CommandRequest

if TYPE_CHECKING:
    from hostguard._types import CommandResult, HostToolkit

REPOSITORY_MARKER = ".git"

TEST_TIMEOUT_SECONDS = 300.0

# First matching marker file wins
TEST_COMMANDS: tuple[tuple[str, str], ...] = (
    ("Cargo.toml", "cargo test"),
    ("go.mod", "go test ./..."),
    ("pom.xml", "mvn test"),
    ("build.gradle", "gradle test"),
    ("package.json", "npm test"),
    ("manage.py", "python manage.py test"),
    ("pyproject.toml", "pytest"),
    ("requirements.txt", "pytest"),
)


@dataclass(frozen=True, slots=True)
class RepoInfo:
    path: str
    name: str


async def list_repositories(
    toolkit: HostToolkit, root: str | Path, *, max_depth: int = 3
) -> list[RepoInfo]:
    """
    Find git repositories under ``root``.

    Nested repositories inside a found repository are not reported.

    Raises:
        PathDenied: If ``root`` is outside the allowed roots.
    """
    safe_root = toolkit.resolve_safe_path(root)
    return [
        RepoInfo(path=str(repo), name=repo.name)
        for repo in toolkit.find_marker_directories(safe_root, REPOSITORY_MARKER, max_depth)
    ]


def detect_test_command(toolkit: HostToolkit, repo: str | Path) -> str | None:
    """Guess a test command from well-known build files, or None."""
    safe_repo = toolkit.resolve_safe_path(repo)
    for marker, command in TEST_COMMANDS:
        if toolkit.is_file(safe_repo / marker):
            return command
    return None


async def run_tests(
    toolkit: HostToolkit, repo: str | Path, *, test_command: str | None = None
) -> CommandResult:
    """
    Run a project's tests from its root directory.

    Raises:
        PathDenied: If ``repo`` is outside the allowed roots.
        ValueError: If no command was given and none could be detected.
    """
    safe_repo = toolkit.resolve_safe_path(repo)
    command = test_command or detect_test_command(toolkit, safe_repo)
    if not command:
        raise ValueError("Could not detect test command. Please provide test_command.")

    return await toolkit.execute(
        CommandRequest(
            command=command,
            working_directory=safe_repo,
            timeout_seconds=TEST_TIMEOUT_SECONDS,
        )
    )
