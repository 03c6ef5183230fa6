"""Process runner with concurrent stream capture and timeout enforcement.

proc-runner runtime module v0.1.0

This module provides:
- Launching a child process with optional stdout/stderr capture
- Concurrent line draining of every captured pipe (no pipe-buffer deadlock)
- A race between "process exited and all pipes closed" and a timeout
- Best-effort kill when the timeout wins

Key design points:
- One anyio.Event per completion source (exit, stdout closed, stderr closed)
- Readers start strictly after launch and never block the calling task
- The timeout deadline starts right before the wait, not at launch
- Accumulators are read only after the task group has exited
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

import anyio

from ..config import get_config
from .result import CommandResult, RunState, classify_status

__all__ = [
    "LaunchConfig",
    "ProcessRunner",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaunchConfig:
    """Launch configuration for one child process.

    A string ``arguments`` value is split with POSIX shell rules and is
    never passed through a shell; a sequence is passed verbatim.

    Attributes:
        executable: Path or name of the binary to run
        arguments: Single pre-joined string or ordered sequence of arguments
        capture_stdout: Redirect and buffer stdout (otherwise discarded)
        capture_stderr: Redirect and buffer stderr (otherwise discarded)
        working_directory: Working directory (None = inherit)
        environment: Environment variables (None = inherit parent)
        timeout: Seconds to wait before killing the process (None = unbounded)
    """

    executable: str
    arguments: str | Sequence[str] = ()
    capture_stdout: bool = True
    capture_stderr: bool = True
    working_directory: Path | None = None
    environment: Mapping[str, str] | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.executable:
            raise ValueError("executable must be a non-empty string")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout}")
        if isinstance(self.working_directory, str):
            object.__setattr__(self, "working_directory", Path(self.working_directory))

    @property
    def argv(self) -> tuple[str, ...]:
        """Full command line, executable first."""
        if isinstance(self.arguments, str):
            args = shlex.split(self.arguments)
        else:
            args = list(self.arguments)
        return (self.executable, *args)


def _strip_terminator(line: str) -> str:
    """Drop one trailing line terminator (``\\n`` or ``\\r\\n``)."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


@dataclass
class ProcessRunner:
    """Runs one child process to completion or timeout.

    Example:
        runner = ProcessRunner()
        config = LaunchConfig(
            executable="git",
            arguments=["status", "--short"],
            timeout=10.0,
        )

        result = await runner.run(config)
        if result.exit_code is None:
            ...  # timed out, or never started

    Attributes:
        encoding: Codec used to decode captured output
        errors: Decode error handler
        preserve_newlines: Join captured lines with ``\\n`` (False = no separator)
        stream_limit: Read buffer limit per pipe (longer lines are reassembled)
    """

    encoding: str = field(default_factory=lambda: get_config().encoding)
    errors: str = "replace"
    preserve_newlines: bool = field(default_factory=lambda: get_config().preserve_newlines)
    stream_limit: int = field(default_factory=lambda: get_config().stream_limit)

    async def run(
        self,
        config: LaunchConfig,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run the process described by ``config``.

        This method:
        1. Creates one completion signal for exit and one per captured stream
        2. Starts the process (a launch failure returns immediately)
        3. Drains captured streams and watches exit concurrently
        4. Races joint completion against the timeout
        5. Kills the process once if the timeout wins
        6. Assembles the result from the accumulated output

        Args:
            config: Launch configuration
            timeout: Overrides ``config.timeout`` when given

        Returns:
            CommandResult; ``exit_code`` is None when the process timed out
            or could not be started
        """
        started_at = time.perf_counter()
        effective_timeout = timeout if timeout is not None else config.timeout
        state = RunState.NOT_STARTED

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        exited = anyio.Event()
        stdout_closed = anyio.Event() if config.capture_stdout else None
        stderr_closed = anyio.Event() if config.capture_stderr else None
        signals = [s for s in (exited, stdout_closed, stderr_closed) if s is not None]

        try:
            process = await asyncio.create_subprocess_exec(
                *config.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE if config.capture_stdout else asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE if config.capture_stderr else asyncio.subprocess.DEVNULL,
                cwd=config.working_directory,
                env=dict(config.environment) if config.environment is not None else None,
                limit=self.stream_limit,
            )
        except OSError as e:
            state = RunState.START_FAILED
            logger.warning(f"Failed to start {config.executable}: {e}")
            return CommandResult(
                exit_code=None,
                stderr=str(e),
                execution_time_ms=self._elapsed_ms(started_at),
                status=classify_status(None, ""),
                started=False,
            )

        state = RunState.RUNNING
        logger.debug(
            f"Started subprocess pid={process.pid} "
            f"argv={config.argv[0]} timeout={effective_timeout}"
        )

        exit_code: int | None = None
        killed = False
        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._watch_exit, process, exited)
                if stdout_closed is not None and process.stdout is not None:
                    tg.start_soon(self._read_lines, process.stdout, stdout_lines, stdout_closed)
                if stderr_closed is not None and process.stderr is not None:
                    tg.start_soon(self._read_lines, process.stderr, stderr_lines, stderr_closed)

                with anyio.move_on_after(effective_timeout):
                    for completion in signals:
                        await completion.wait()
                    state = RunState.COMPLETED

                if state is RunState.COMPLETED:
                    exit_code = process.returncode
                else:
                    state = RunState.TIMED_OUT
                    logger.warning(
                        f"Subprocess timed out after {effective_timeout}s, "
                        f"killing pid={process.pid}"
                    )
                    killed = True
                    self._kill(process)

                # Readers left over after a timeout are abandoned
                tg.cancel_scope.cancel()
        finally:
            if not killed and process.returncode is None and state is not RunState.COMPLETED:
                self._kill(process)

        logger.debug(
            f"Subprocess finished pid={process.pid} state={state.value} "
            f"returncode={exit_code}"
        )

        stdout = self._join(stdout_lines)
        stderr = self._join(stderr_lines)
        return replace(
            CommandResult(),
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            execution_time_ms=self._elapsed_ms(started_at),
            status=classify_status(exit_code, stderr),
        )

    async def _watch_exit(
        self,
        process: asyncio.subprocess.Process,
        exited: anyio.Event,
    ) -> None:
        """Set ``exited`` when the OS reports process exit."""
        await process.wait()
        exited.set()

    async def _read_lines(
        self,
        stream: asyncio.StreamReader,
        lines: list[str],
        closed: anyio.Event,
    ) -> None:
        """Drain ``stream`` line by line until end-of-stream.

        Lines longer than ``stream_limit`` are read in chunks and
        reassembled, so no line length is rejected.

        Args:
            stream: Pipe reader of the child process
            lines: Accumulator, appended in arrival order (single writer)
            closed: Set on end-of-stream, even when no line was read
        """
        pending: list[bytes] = []
        while True:
            try:
                pending.append(await stream.readuntil(b"\n"))
            except asyncio.LimitOverrunError as e:
                # No terminator within the buffer limit: keep the chunk, read on
                pending.append(await stream.readexactly(e.consumed))
                continue
            except asyncio.IncompleteReadError as e:
                # End-of-stream; e.partial is an unterminated last line
                if e.partial:
                    pending.append(e.partial)
                if pending:
                    lines.append(self._decode_line(pending))
                break
            lines.append(self._decode_line(pending))
            pending = []
        closed.set()

    def _decode_line(self, chunks: list[bytes]) -> str:
        return _strip_terminator(b"".join(chunks).decode(self.encoding, self.errors))

    def _kill(self, process: asyncio.subprocess.Process) -> None:
        """Best-effort kill; any failure is logged and discarded."""
        try:
            process.kill()
        except ProcessLookupError:
            logger.debug(f"Subprocess already exited pid={process.pid}")
        except OSError as e:
            logger.debug(f"Ignoring kill failure pid={process.pid}: {e}")

    def _join(self, lines: list[str]) -> str:
        separator = "\n" if self.preserve_newlines else ""
        return separator.join(lines)

    @staticmethod
    def _elapsed_ms(started_at: float) -> int:
        return int((time.perf_counter() - started_at) * 1000)
