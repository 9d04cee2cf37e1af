"""Tests for LocalExecutor."""

from __future__ import annotations

import asyncio
import os
import time
from pathlib import Path

import pytest

from hostguard import CommandRequest, LocalExecutor, SpawnFailure
from hostguard.sandbox.local import TRUNCATION_MARKER, _StreamCapture, truncate_output


class TestLocalExecutorExecution:
    """Tests for command execution."""

    async def test_execute_simple_command(self, executor: LocalExecutor, workspace: Path) -> None:
        """Should execute simple commands and return output."""
        result = await executor.run(CommandRequest("echo 'hello world'", working_directory=workspace))
        assert result.exit_code == 0
        assert result.stdout == "hello world\n"
        assert not result.timed_out
        assert not result.truncated
        assert result.warning is None

    async def test_execute_returns_exit_code(self, executor: LocalExecutor) -> None:
        """Non-zero exits are results, not exceptions."""
        result = await executor.run(CommandRequest("exit 42"))
        assert result.exit_code == 42
        assert not result.success

    async def test_execute_returns_stderr(self, executor: LocalExecutor) -> None:
        """Should capture stderr."""
        result = await executor.run(CommandRequest("echo 'error' >&2"))
        assert result.stderr == "error\n"
        assert result.stdout == ""

    async def test_execute_in_cwd(self, executor: LocalExecutor, workspace: Path) -> None:
        """Should execute commands in the working directory."""
        result = await executor.run(CommandRequest("cat test.txt", working_directory=workspace))
        assert result.exit_code == 0
        assert result.stdout == "hello world"
        assert result.working_directory == str(workspace)

    async def test_defaults_to_process_cwd(
        self, executor: LocalExecutor, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(workspace)
        result = await executor.run(CommandRequest("ls"))
        assert "test.txt" in result.stdout
        assert result.working_directory == os.getcwd()

    async def test_signal_death_is_reported_as_result(self, executor: LocalExecutor) -> None:
        """A command killed by a signal reports 128 + signal number."""
        result = await executor.run(CommandRequest("kill -9 $$"))
        assert result.exit_code == 137
        assert not result.timed_out

    async def test_stdin_is_not_inherited(self, executor: LocalExecutor) -> None:
        """Commands reading stdin see end-of-file instead of hanging."""
        result = await executor.run(CommandRequest("cat", timeout_seconds=5))
        assert not result.timed_out
        assert result.exit_code == 0

    async def test_custom_env(self, workspace: Path) -> None:
        executor = LocalExecutor(env={"PATH": os.environ.get("PATH", ""), "HG_VALUE": "42"})
        result = await executor.run(CommandRequest("echo $HG_VALUE"))
        assert result.stdout.strip() == "42"


class TestLocalExecutorTimeout:
    """Tests for the wall-clock limit."""

    async def test_execute_respects_timeout(self, executor: LocalExecutor) -> None:
        """Should kill the process and report a timeout."""
        start = time.monotonic()
        result = await executor.run(CommandRequest("sleep 30", timeout_seconds=0.5))
        elapsed = time.monotonic() - start

        assert elapsed < 5
        assert result.timed_out
        assert result.exit_code == 0
        assert result.stdout == ""
        assert "timed out after 0.5 seconds" in result.stderr.lower()

    async def test_infinite_loop_is_killed(self, executor: LocalExecutor) -> None:
        start = time.monotonic()
        result = await executor.run(CommandRequest("while true; do :; done", timeout_seconds=0.5))
        assert result.timed_out
        assert time.monotonic() - start < 5

    async def test_background_children_are_killed(
        self, executor: LocalExecutor, workspace: Path
    ) -> None:
        """The whole process group is killed, not just the shell."""
        result = await executor.run(
            CommandRequest(
                "sleep 30 & echo $! > child.pid; wait",
                working_directory=workspace,
                timeout_seconds=0.5,
            )
        )
        assert result.timed_out

        child_pid = int((workspace / "child.pid").read_text())
        # The killed child may linger briefly as a zombie; it must not keep running.
        for _ in range(50):
            try:
                with open(f"/proc/{child_pid}/stat") as f:
                    state = f.read().rsplit(")", 1)[1].split()[0]
            except FileNotFoundError:
                break
            if state in ("Z", "X"):
                break
            await asyncio.sleep(0.1)
        else:
            pytest.fail(f"child process {child_pid} still running")

    async def test_default_timeout_is_used(self) -> None:
        executor = LocalExecutor(default_timeout=0.3)
        result = await executor.run(CommandRequest("sleep 30"))
        assert result.timed_out
        assert "0.3 seconds" in result.stderr

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_timeout": float("nan")},
            {"default_timeout": float("inf")},
            {"default_timeout": 0},
            {"default_max_output_chars": 0},
        ],
    )
    def test_rejects_invalid_defaults(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LocalExecutor(**kwargs)

    async def test_cancellation_kills_process(self, executor: LocalExecutor, workspace: Path) -> None:
        """Cancelling the caller terminates the child before propagating."""
        task = asyncio.create_task(
            executor.run(
                CommandRequest("echo $$ > shell.pid; sleep 30", working_directory=workspace)
            )
        )
        pid_file = workspace / "shell.pid"
        for _ in range(50):
            if pid_file.exists() and pid_file.read_text().strip():
                break
            await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        shell_pid = int(pid_file.read_text())
        with pytest.raises(ProcessLookupError):
            os.kill(shell_pid, 0)


class TestLocalExecutorOutput:
    """Tests for output bounding and truncation."""

    async def test_truncates_long_output(self, executor: LocalExecutor) -> None:
        """Head and tail are kept around the marker."""
        result = await executor.run(CommandRequest("seq 1 1000", max_output_chars=100))
        assert result.truncated
        assert TRUNCATION_MARKER in result.stdout
        assert result.stdout.startswith("1\n2\n3\n")
        assert result.stdout.endswith("999\n1000\n")
        assert len(result.stdout) == 100 + len(TRUNCATION_MARKER)

    async def test_huge_output_is_bounded(self, executor: LocalExecutor) -> None:
        """Output far beyond the cap is drained without being kept."""
        result = await executor.run(
            CommandRequest(
                "head -c 5000000 /dev/zero | tr '\\0' a; echo END",
                max_output_chars=50,
                timeout_seconds=30,
            )
        )
        assert result.exit_code == 0
        assert result.truncated
        assert result.stdout.startswith("a" * 25)
        assert result.stdout.endswith("END\n")
        assert len(result.stdout) == 50 + len(TRUNCATION_MARKER)

    async def test_streams_truncate_independently(self, executor: LocalExecutor) -> None:
        result = await executor.run(
            CommandRequest("seq 1 1000; echo short >&2", max_output_chars=100)
        )
        assert result.truncated
        assert TRUNCATION_MARKER in result.stdout
        assert result.stderr == "short\n"

    async def test_non_ascii_output(self, executor: LocalExecutor) -> None:
        """Multi-byte characters survive capture and truncation."""
        result = await executor.run(
            CommandRequest("for i in $(seq 1 40); do printf 'é'; done", max_output_chars=30)
        )
        assert result.truncated
        head, tail = result.stdout.split(TRUNCATION_MARKER)
        assert head == "é" * 15
        assert tail == "é" * 15

    @pytest.mark.parametrize("char", ["日", "😀"])
    async def test_wide_characters_overflow(self, executor: LocalExecutor, char: str) -> None:
        """Overflowing multi-byte output keeps whole characters on both sides."""
        result = await executor.run(
            CommandRequest(f"for i in $(seq 1 200); do printf '{char}'; done", max_output_chars=30)
        )
        assert result.truncated
        assert len(result.stdout) == 30 + len(TRUNCATION_MARKER)
        head, tail = result.stdout.split(TRUNCATION_MARKER)
        assert head == char * 15
        assert tail == char * 15
        assert truncate_output(result.stdout, 30) == (result.stdout, False)

    async def test_short_output_untouched(self, executor: LocalExecutor) -> None:
        result = await executor.run(CommandRequest("printf 'héllo'", max_output_chars=5))
        assert result.stdout == "héllo"
        assert not result.truncated


class TestLocalExecutorDryRun:
    """Tests for dry-run previews."""

    async def test_dry_run_does_not_spawn(
        self, executor: LocalExecutor, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def fail(*args: object, **kwargs: object) -> None:
            raise AssertionError("process spawned during dry run")

        monkeypatch.setattr(asyncio, "create_subprocess_shell", fail)
        result = await executor.run(
            CommandRequest("touch created.txt", working_directory=workspace, dry_run=True)
        )
        assert result.exit_code == 0
        assert result.stdout == ""
        assert result.stderr == ""
        assert result.warning == f"[DRY RUN] Would execute: touch created.txt (in {workspace})"
        assert not (workspace / "created.txt").exists()


class TestLocalExecutorSpawnFailure:
    """Tests for the only raised failure."""

    async def test_missing_working_directory(self, executor: LocalExecutor, temp_dir: Path) -> None:
        with pytest.raises(SpawnFailure) as exc_info:
            await executor.run(CommandRequest("echo hi", working_directory=temp_dir / "missing"))
        assert exc_info.value.command == "echo hi"
        assert isinstance(exc_info.value.cause, OSError)


class TestTruncateOutput:
    """Tests for the truncation helper."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_output("abc", 10) == ("abc", False)

    def test_exact_limit_unchanged(self) -> None:
        assert truncate_output("a" * 10, 10) == ("a" * 10, False)

    def test_keeps_head_and_tail(self) -> None:
        text = "".join(str(i % 10) for i in range(100))
        truncated, was_truncated = truncate_output(text, 10)
        assert was_truncated
        assert truncated == text[:5] + TRUNCATION_MARKER + text[-5:]

    def test_length_is_deterministic(self) -> None:
        for size in (11, 50, 1000):
            truncated, _ = truncate_output("x" * size, 10)
            assert len(truncated) == 10 + len(TRUNCATION_MARKER)

    def test_odd_limit(self) -> None:
        truncated, _ = truncate_output("abcdefghijkl", 5)
        assert truncated == "ab" + TRUNCATION_MARKER + "kl"

    def test_retruncation_is_idempotent(self) -> None:
        """Truncating already-truncated output with the same limit is a no-op."""
        once, _ = truncate_output("0123456789" * 50, 40)
        twice, changed = truncate_output(once, 40)
        assert twice == once
        assert not changed

    def test_non_ascii_text(self) -> None:
        """Slicing happens on characters, so code points are never split."""
        truncated, was_truncated = truncate_output("日本語テキスト" * 10, 8)
        assert was_truncated
        assert truncated.startswith("日本語テ")
        assert truncated.endswith("テキスト")

    def test_limit_of_one(self) -> None:
        truncated, was_truncated = truncate_output("abc", 1)
        assert was_truncated
        assert truncated == TRUNCATION_MARKER


class TestStreamCapture:
    """Tests for the bounded pipe buffer."""

    def test_keeps_everything_under_limit(self) -> None:
        capture = _StreamCapture(10)
        capture.feed(b"hello ")
        capture.feed(b"world")
        assert capture.render(100) == ("hello world", False)
        assert not capture.dropped

    def test_drops_middle_beyond_twice_limit(self) -> None:
        capture = _StreamCapture(4)
        for chunk in (b"abcd", b"efgh", b"ijkl", b"mnop"):
            capture.feed(chunk)
        assert capture.dropped
        text, truncated = capture.render(4)
        assert truncated
        assert text == "ab" + TRUNCATION_MARKER + "op"

    def test_multibyte_split_across_reads(self) -> None:
        """A character split between two reads is reassembled."""
        capture = _StreamCapture(20)
        for byte in "héllo wörld".encode():
            capture.feed(bytes([byte]))
        assert capture.render(100) == ("héllo wörld", False)

    def test_limit_counts_characters(self) -> None:
        """Head and tail are bounded in characters, not bytes."""
        capture = _StreamCapture(3)
        data = ("日" * 10).encode()
        for i in range(0, len(data), 4):
            capture.feed(data[i : i + 4])
        assert capture.dropped
        text, truncated = capture.render(6)
        assert truncated
        assert text == "日" * 3 + TRUNCATION_MARKER + "日" * 3
        assert "\ufffd" not in text

    def test_invalid_bytes_become_replacement(self) -> None:
        capture = _StreamCapture(10)
        capture.feed(b"ok\xff")
        assert capture.render(10) == ("ok\ufffd", False)
