"""Tool handlers built on the path sandbox and guarded executor."""

from hostguard.tools.filesystem import (
    DirectoryEntry,
    FileReadResult,
    FileWriteResult,
    append_file,
    list_directory,
    read_file,
    write_file,
)
from hostguard.tools.git import git_commit, git_log, git_push, git_status
from hostguard.tools.projects import RepoInfo, detect_test_command, list_repositories, run_tests
from hostguard.tools.terminal import run_command

__all__ = [
    "DirectoryEntry",
    "FileReadResult",
    "FileWriteResult",
    "RepoInfo",
    "append_file",
    "detect_test_command",
    "git_commit",
    "git_log",
    "git_push",
    "git_status",
    "list_directory",
    "list_repositories",
    "read_file",
    "run_command",
    "run_tests",
    "write_file",
]
