"""
Multi-pass TeX compilation

Runs a TeX engine a fixed number of times over the same source so that
cross-references, bookmarks and the table of contents settle. The pass count
is decided once, up front, from the source text:

- 2 passes by default (one pass never resolves forward references)
- 3 passes when the source asks for a table of contents (page numbers in the
  contents need one more round)

This is a heuristic, not a guarantee of a stable document. Only the final
pass's exit status and output are reported; earlier passes are discarded, so
a failure that clears up by the last pass goes unnoticed.
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from texforge.contexts.rendering.logger import log_pass
from texforge.contexts.rendering.process import CommandResult, run_command

TOC_MARKER = "\\tableofcontents"
INPUT_NAME = "input.tex"
OUTPUT_EXTENSION = ".pdf"
SEARCH_PATH_VARIABLE = "TEXINPUTS"

Runner = Callable[..., CommandResult]


@dataclass
class TexRunResult:
    """
    Result of a complete multi-pass run.

    Attributes:
        returncode: Exit status of the final pass
        log: Combined stdout and stderr of the final pass
        pdf: Contents of the produced PDF, or None if none was found
        num_passes: Number of passes that were run
    """

    returncode: int
    log: bytes
    pdf: Optional[bytes]
    num_passes: int


def passes_for(source: str) -> int:
    """Number of engine passes needed for a source text."""
    return 3 if TOC_MARKER in source else 2


def tex_environment(work_dir: Path, base_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Environment for the engine with the working directory on the TeX search path.

    Returns a new mapping; the process environment is never modified. The
    working directory is prepended to TEXINPUTS followed by a path separator,
    so the default search path still applies (an empty trailing entry means
    "system directories" to TeX) and any previous value is kept.

    Args:
        work_dir: Directory holding the source and materialized media
        base_env: Environment to start from (default: os.environ)

    Returns:
        Amended copy of the environment
    """
    env = dict(os.environ if base_env is None else base_env)
    previous = env.get(SEARCH_PATH_VARIABLE, "")
    env[SEARCH_PATH_VARIABLE] = f"{work_dir}{os.pathsep}{previous}"
    return env


def tex_arguments(work_dir: Path, input_file: Path) -> List[str]:
    """Engine arguments: no prompting, stop at the first error, output into work_dir."""
    return [
        "-halt-on-error",
        "-interaction",
        "nonstopmode",
        "-output-directory",
        str(work_dir),
        str(input_file),
    ]


def output_path(input_file: Path) -> Path:
    """Where the engine writes the PDF for an input file."""
    return input_file.with_suffix(OUTPUT_EXTENSION)


def _write_source(path: Path, source: str) -> None:
    path.write_text(source, encoding="utf-8")


def run_pass(
    program: str,
    source: str,
    work_dir: Path,
    env: Mapping[str, str],
    timeout: Optional[float] = None,
    runner: Runner = run_command,
) -> CommandResult:
    """
    Run the engine once.

    Writes the source file first if, and only if, it is not already there.

    Raises:
        ToolLaunchError: If the engine cannot be started
        ToolTimeoutError: If the engine was killed by the watchdog
    """
    input_file = work_dir / INPUT_NAME
    if not input_file.exists():
        _write_source(input_file, source)

    return runner(
        program,
        tex_arguments(work_dir, input_file),
        env=env,
        cwd=str(work_dir),
        timeout=timeout,
    )


def run_tex_program(
    program: str,
    source: str,
    work_dir: Path,
    num_passes: Optional[int] = None,
    timeout: Optional[float] = None,
    runner: Runner = run_command,
    base_env: Optional[Mapping[str, str]] = None,
) -> TexRunResult:
    """
    Compile TeX source into a PDF with a fixed number of engine passes.

    Pure compilation function - assumes work_dir exists and is private to
    this run.

    Args:
        program: TeX engine (pdflatex, lualatex, xelatex)
        source: LaTeX source text
        work_dir: Working directory for source, auxiliary files and output
        num_passes: Override the pass count (default: passes_for(source))
        timeout: Per-pass watchdog in seconds (default: none)
        runner: Process runner (default: run_command)
        base_env: Environment to amend (default: os.environ)

    Returns:
        TexRunResult of the final pass, with the PDF if one was produced

    Raises:
        ToolLaunchError: If the engine cannot be started (remaining passes are skipped)
        ToolTimeoutError: If a pass was killed (remaining passes are skipped)
    """
    work_dir = Path(work_dir)
    if num_passes is None:
        num_passes = passes_for(source)
    if num_passes < 1:
        raise ValueError(f"num_passes must be at least 1, got {num_passes}")

    env = tex_environment(work_dir, base_env)

    result = None
    for pass_number in range(1, num_passes + 1):
        start_time = time.time()
        result = run_pass(program, source, work_dir, env, timeout=timeout, runner=runner)
        log_pass(pass_number, num_passes, result.returncode, time.time() - start_time)

    # The PDF is only looked for after the last pass
    pdf_file = output_path(work_dir / INPUT_NAME)
    pdf = pdf_file.read_bytes() if pdf_file.exists() else None

    return TexRunResult(
        returncode=result.returncode,
        log=result.log,
        pdf=pdf,
        num_passes=num_passes,
    )
