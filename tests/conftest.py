"""Pytest configuration and fixtures for hostguard tests."""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from hostguard import (
    CommandRequest,
    CommandResult,
    Executor,
    HostToolkit,
    LocalExecutor,
    SandboxConfig,
    create_host_toolkit,
)


class RecordingExecutor(Executor):
    """Executor that records requests instead of spawning anything."""

    def __init__(self) -> None:
        self.requests: list[CommandRequest] = []

    async def run(self, request: CommandRequest) -> CommandResult:
        self.requests.append(request)
        return CommandResult(stdout="recorded", stderr="", exit_code=0)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="hostguard_test_") as tmp:
        yield Path(tmp)


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """An allowed root with a couple of files in it."""
    root = temp_dir / "dev"
    root.mkdir()
    (root / "test.txt").write_text("hello world")
    (root / "data.json").write_text('{"key": "value"}')
    return root


@pytest.fixture
def config(workspace: Path) -> SandboxConfig:
    return SandboxConfig.for_roots(workspace)


@pytest.fixture
def toolkit(config: SandboxConfig) -> HostToolkit:
    """Toolkit with a real LocalExecutor confined to the workspace."""
    return create_host_toolkit(config)


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def executor() -> LocalExecutor:
    return LocalExecutor(default_timeout=10.0, default_max_output_chars=10_000)
