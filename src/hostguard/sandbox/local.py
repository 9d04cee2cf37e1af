"""
Local subprocess-based executor.

This is the default executor. It uses asyncio.subprocess for non-blocking
execution so one slow command never stalls other tool calls.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import math
import os
import signal

from hostguard._types import CommandRequest, CommandResult
from hostguard.config import DEFAULT_COMMAND_TIMEOUT, DEFAULT_MAX_OUTPUT_CHARS
from hostguard.errors import SpawnFailure
from hostguard.sandbox._base import Executor

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n... [output truncated] ...\n\n"

_READ_CHUNK = 64 * 1024


def truncate_output(text: str, max_chars: int) -> tuple[str, bool]:
    """
    Cut the middle out of text longer than ``max_chars``.

    The first and last ``max_chars // 2`` characters are kept around
    TRUNCATION_MARKER, so startup context and the final error lines both
    survive. Text already in that shape for the same limit comes back
    unchanged.

    Returns:
        The (possibly) shortened text and whether anything was removed.
    """
    if len(text) <= max_chars:
        return text, False
    half = max_chars // 2
    if _already_truncated(text, half):
        return text, False
    return _splice(text, text, half), True


def _already_truncated(text: str, half: int) -> bool:
    return (
        len(text) == 2 * half + len(TRUNCATION_MARKER)
        and text[half : half + len(TRUNCATION_MARKER)] == TRUNCATION_MARKER
    )


def _splice(head: str, tail: str, half: int) -> str:
    return head[:half] + TRUNCATION_MARKER + tail[max(len(tail) - half, 0) :]


class _StreamCapture:
    """
    Keeps at most ``limit`` characters from the start and ``limit``
    characters from the end of a stream, discarding the middle while the
    pipe keeps draining.

    Bytes are decoded incrementally as they arrive, so a UTF-8 sequence split
    across reads is reassembled and the kept head and tail are whole
    characters.
    """

    def __init__(self, limit: int) -> None:
        self._limit = limit
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._head = ""
        self._tail = ""
        self.dropped = False

    def feed(self, chunk: bytes) -> None:
        self._keep(self._decoder.decode(chunk))

    def _keep(self, text: str) -> None:
        room = self._limit - len(self._head)
        if room > 0:
            self._head += text[:room]
            text = text[room:]
        if not text:
            return
        self._tail += text
        excess = len(self._tail) - self._limit
        if excess > 0:
            self._tail = self._tail[excess:]
            self.dropped = True

    def render(self, max_chars: int) -> tuple[str, bool]:
        """Flush the decoder and apply head+tail truncation."""
        self._keep(self._decoder.decode(b"", final=True))
        if not self.dropped:
            return truncate_output(self._head + self._tail, max_chars)
        return _splice(self._head, self._tail, max_chars // 2), True


async def _drain(stream: asyncio.StreamReader, capture: _StreamCapture) -> None:
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return
        capture.feed(chunk)


def _kill_process_group(proc: asyncio.subprocess.Process) -> None:
    # The shell leads its own session, so this also reaches its children.
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def _exit_status(returncode: int) -> int:
    """Map asyncio's negative signal codes to the shell's 128+N convention."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class LocalExecutor(Executor):
    """
    Runs commands through the system shell on the host.

    Resource controls:
    - Wall-clock timeout that kills the whole process group
    - Per-stream capture bounded to about twice the output cap
    - Head+tail truncation of each stream
    - Dry-run previews that never spawn a process

    Example:
        >>> executor = LocalExecutor()
        >>> result = await executor.run(CommandRequest("ls -la", working_directory="."))
        >>> print(result.stdout)
    """

    def __init__(
        self,
        *,
        default_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        default_max_output_chars: int = DEFAULT_MAX_OUTPUT_CHARS,
        env: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize a local executor.

        Args:
            default_timeout: Seconds allowed when a request sets no timeout.
            default_max_output_chars: Per-stream cap when a request sets none.
            env: Environment variables for subprocesses. Defaults to ours.

        Raises:
            ValueError: If a default limit is not a positive finite number.
        """
        if not (math.isfinite(default_timeout) and default_timeout > 0):
            raise ValueError(f"default_timeout must be a positive finite number, got {default_timeout}")
        if default_max_output_chars <= 0:
            raise ValueError(
                f"default_max_output_chars must be positive, got {default_max_output_chars}"
            )
        self._default_timeout = default_timeout
        self._default_max_output_chars = default_max_output_chars
        self._env = env

    async def run(self, request: CommandRequest) -> CommandResult:
        """
        Run a shell command.

        Args:
            request: Command, working directory, limits and dry-run flag.

        Returns:
            CommandResult; non-zero exits, signals and timeouts are reported
            in the result rather than raised.

        Raises:
            SpawnFailure: If the shell could not be started (for example the
                working directory does not exist).
        """
        cwd = os.fspath(request.working_directory) if request.working_directory else os.getcwd()
        timeout = request.timeout_seconds or self._default_timeout
        max_chars = request.max_output_chars or self._default_max_output_chars

        if request.dry_run:
            return CommandResult(
                stdout="",
                stderr="",
                exit_code=0,
                working_directory=cwd,
                warning=f"[DRY RUN] Would execute: {request.command} (in {cwd})",
            )

        try:
            proc = await asyncio.create_subprocess_shell(
                request.command,
                cwd=cwd,
                env=self._env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            logger.error(f"Failed to start command {request.command!r} in {cwd}: {e}")
            raise SpawnFailure(request.command, e) from e

        stdout = _StreamCapture(max_chars)
        stderr = _StreamCapture(max_chars)
        completed = False
        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _drain(proc.stdout, stdout),
                    _drain(proc.stderr, stderr),
                    proc.wait(),
                ),
                timeout=timeout,
            )
            completed = True
        except TimeoutError:
            logger.warning(f"Command timed out after {timeout:g}s: {request.command!r}")
            return CommandResult(
                stdout="",
                stderr=f"Command timed out after {timeout:g} seconds",
                exit_code=0,
                timed_out=True,
                working_directory=cwd,
            )
        finally:
            if not completed:
                _kill_process_group(proc)
                await proc.wait()  # Ensure process is reaped

        stdout_text, stdout_truncated = stdout.render(max_chars)
        stderr_text, stderr_truncated = stderr.render(max_chars)

        return CommandResult(
            stdout=stdout_text,
            stderr=stderr_text,
            exit_code=_exit_status(proc.returncode),
            working_directory=cwd,
            truncated=stdout_truncated or stderr_truncated,
        )
