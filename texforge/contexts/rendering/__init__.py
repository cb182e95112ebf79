"""
Rendering Context

Responsibilities:
- Runs the TeX engine as an external process, draining both output streams
- Decides the pass count and drives the multi-pass compilation
- Recovers the produced PDF from the working directory
- Extracts a readable error excerpt from the TeX log

Owns: Temporary working directories, engine invocation, PDF retrieval
Never: Parses or typesets LaTeX itself
"""

from texforge.contexts.rendering.compiler import passes_for, run_tex_program
from texforge.contexts.rendering.diagnostics import extract_message
from texforge.contexts.rendering.exceptions import (
    NoArtifactError,
    TexError,
    ToolExitError,
    ToolLaunchError,
    ToolTimeoutError,
)
from texforge.contexts.rendering.pdf import PdfResult, make_pdf
from texforge.contexts.rendering.process import CommandResult, run_command

__all__ = [
    "CommandResult",
    "NoArtifactError",
    "PdfResult",
    "TexError",
    "ToolExitError",
    "ToolLaunchError",
    "ToolTimeoutError",
    "extract_message",
    "make_pdf",
    "passes_for",
    "run_command",
    "run_tex_program",
]
