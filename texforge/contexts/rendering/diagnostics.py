"""
TeX log diagnostics

Pulls a readable excerpt out of the combined output of a failed TeX run, and
collects error/warning lines for logging. TeX logs are unstructured, so both
are best-effort and never raise on unexpected input.
"""

import re
from typing import List, Tuple

ERROR_MARKER = b"!"
LINE_NUMBER_MARKER = b"l."


def extract_message(log: bytes) -> bytes:
    """
    Extract the first TeX error and its line-number context from a log.

    Takes the lines from the first one starting with "!" up to and including
    the first following line starting with "l." (the "l.<n> <source>"
    context line TeX prints after an error). Without a "!" line the log is
    returned unchanged so the caller still has the full context.

    Args:
        log: Combined stdout and stderr of the TeX run

    Returns:
        The excerpt, one newline-terminated line per log line

    Example:
        >>> extract_message(b"This is TeX\\n! Undefined control sequence.\\nl.5 \\\\foo\\nmore\\n")
        b'! Undefined control sequence.\\nl.5 \\\\foo\\n'
    """
    lines = log.splitlines()

    start = next((i for i, line in enumerate(lines) if line.startswith(ERROR_MARKER)), None)
    if start is None:
        return log

    excerpt = []
    for line in lines[start:]:
        excerpt.append(line)
        if line.startswith(LINE_NUMBER_MARKER):
            break

    return b"".join(line + b"\n" for line in excerpt)


def parse_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse TeX output for errors and warnings.

    Args:
        log_content: Decoded log text

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    # TeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]

    for pattern in warning_patterns:
        compiled = re.compile(pattern, re.MULTILINE)
        for match in compiled.finditer(log_content):
            warnings.append(match.group(1).strip())

    return errors, warnings


def decode_log(log: bytes) -> str:
    """Decode TeX output for display; TeX logs are not reliably UTF-8."""
    try:
        return log.decode("utf-8")
    except UnicodeDecodeError:
        # pdflatex writes font metadata in latin-1
        return log.decode("latin-1")
