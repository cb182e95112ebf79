"""
External process runner

Runs a command with no usable standard input and collects stdout and stderr
completely. Each output pipe is drained by its own reader thread so that a
child blocked writing one pipe can never deadlock the caller waiting on the
other.
"""

import subprocess
import threading
import time
from dataclasses import dataclass
from typing import IO, Dict, List, Mapping, Optional, Sequence

from texforge.contexts.rendering.exceptions import ToolLaunchError, ToolTimeoutError


@dataclass(frozen=True)
class CommandResult:
    """
    Result of running an external command.

    Attributes:
        returncode: Exit status (0 on success; negative for signals on POSIX)
        stdout: Everything the command wrote to standard output
        stderr: Everything the command wrote to standard error
    """

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def log(self) -> bytes:
        """Diagnostic bytes: stdout followed by stderr (not interleaved by time)."""
        return self.stdout + self.stderr


def _drain(stream: IO[bytes], sink: Dict[str, bytes], name: str) -> None:
    with stream:
        sink[name] = stream.read()


def run_command(
    command: str,
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Run an external command to completion and capture its output.

    Standard input is a pipe closed right after launch, so a tool that tries
    to read from it sees end-of-input instead of waiting for a terminal.
    Returns only once both output streams are at end-of-stream and the
    process has exited.

    Args:
        command: Executable name or path
        args: Arguments (not including the command itself)
        env: Full environment for the child (None inherits the current one)
        cwd: Working directory for the child
        timeout: Seconds before the child is killed (None waits forever)

    Returns:
        CommandResult with exit status and both captured streams

    Raises:
        ToolLaunchError: If the command cannot be started
        ToolTimeoutError: If the timeout expired and the child was killed
    """
    argv: List[str] = [command, *args]
    try:
        process = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(env) if env is not None else None,
            cwd=cwd,
        )
    except OSError as e:
        raise ToolLaunchError(command, e) from e

    process.stdin.close()

    output: Dict[str, bytes] = {}
    readers = [
        threading.Thread(target=_drain, args=(process.stdout, output, "stdout"), daemon=True),
        threading.Thread(target=_drain, args=(process.stderr, output, "stderr"), daemon=True),
    ]
    for reader in readers:
        reader.start()

    timed_out = threading.Event()
    streams_closed = threading.Event()
    lock = threading.Lock()

    def _kill() -> None:
        # Once both streams are closed the remaining wait has its own deadline
        with lock:
            if streams_closed.is_set() or process.poll() is not None:
                return
            timed_out.set()
            process.kill()

    watchdog = None
    deadline = None
    if timeout is not None:
        deadline = time.monotonic() + timeout
        watchdog = threading.Timer(timeout, _kill)
        watchdog.daemon = True
        watchdog.start()

    try:
        # Both readers must hit end-of-stream before we wait on the exit
        for reader in readers:
            reader.join()
        with lock:
            streams_closed.set()
        if watchdog is not None:
            watchdog.cancel()

        if deadline is None or timed_out.is_set():
            returncode = process.wait()
        else:
            try:
                returncode = process.wait(timeout=max(0.0, deadline - time.monotonic()))
            except subprocess.TimeoutExpired:
                timed_out.set()
                process.kill()
                returncode = process.wait()
    finally:
        if watchdog is not None:
            watchdog.cancel()

    stdout = output.get("stdout", b"")
    stderr = output.get("stderr", b"")

    if timed_out.is_set():
        raise ToolTimeoutError(command, timeout, stdout, stderr)

    return CommandResult(returncode=returncode, stdout=stdout, stderr=stderr)
