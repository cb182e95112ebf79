"""Exceptions for the rendering context, one per way a TeX run can fail."""

from typing import Optional

from texforge.contexts.rendering.diagnostics import decode_log


class TexError(Exception):
    """Base class for failures producing a PDF."""

    pass


class ToolLaunchError(TexError):
    """
    Exception raised when the TeX engine cannot be started at all.

    Attributes:
        command: The executable that was requested
        original_error: The OSError raised by the process launch
    """

    def __init__(self, command: str, original_error: Optional[OSError] = None):
        self.command = command
        self.original_error = original_error

        parts = [f"Could not run '{command}'."]
        if isinstance(original_error, FileNotFoundError):
            parts.append(f"Is {command} installed and on the PATH?")
        elif original_error is not None:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class ToolTimeoutError(TexError):
    """
    Exception raised when the watchdog kills a TeX engine that ran too long.

    Attributes:
        command: The executable that was killed
        timeout: Seconds allowed before the kill
        stdout: Output drained before the kill
        stderr: Error output drained before the kill
    """

    def __init__(self, command: str, timeout: float, stdout: bytes = b"", stderr: bytes = b""):
        self.command = command
        self.timeout = timeout
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"'{command}' timed out after {timeout:g} seconds and was killed.")


class ToolExitError(TexError):
    """
    Exception raised when the final pass exits with a non-zero status.

    Attributes:
        returncode: Exit status of the final pass
        log: Combined stdout and stderr of the final pass
        excerpt: Error excerpt extracted from the log
    """

    def __init__(self, returncode: int, log: bytes, excerpt: bytes):
        self.returncode = returncode
        self.log = log
        self.excerpt = excerpt

        parts = [f"TeX engine exited with status {returncode}."]
        if excerpt:
            parts.append(decode_log(excerpt).rstrip("\n"))

        super().__init__("\n".join(parts))


class NoArtifactError(TexError):
    """Exception raised when the engine exits cleanly but no PDF was written."""

    def __init__(self, expected_path):
        self.expected_path = expected_path
        super().__init__(f"TeX engine succeeded but produced no PDF at {expected_path}.")
