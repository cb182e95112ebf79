"""
PDF production

Entry point of the rendering context: document in, PDF bytes or an error
message out. Each call gets its own temporary directory, which holds the
materialized images, the LaTeX source, the engine's auxiliary files and the
PDF, and is removed however the call ends.
"""

import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from dotenv import load_dotenv

from texforge.contexts.document.model import Document
from texforge.contexts.document.writer import WriterOptions
from texforge.contexts.media.fetcher import fetch_item
from texforge.contexts.media.materializer import Fetcher, handle_images
from texforge.contexts.rendering.compiler import (
    INPUT_NAME,
    Runner,
    output_path,
    passes_for,
    run_tex_program,
)
from texforge.contexts.rendering.diagnostics import decode_log, extract_message, parse_log
from texforge.contexts.rendering.exceptions import (
    NoArtifactError,
    TexError,
    ToolExitError,
    ToolLaunchError,
    ToolTimeoutError,
)
from texforge.contexts.rendering.logger import (
    _log_debug,
    log_compilation_result,
    log_compilation_start,
)
from texforge.contexts.rendering.process import run_command
from texforge.utils.pdf_processing import page_count

load_dotenv()

_timeout = os.getenv("TEX_TIMEOUT")
TEX_TIMEOUT = float(_timeout) if _timeout else None

ERROR_PREFIX = b"Error producing PDF from TeX source."

Writer = Callable[[WriterOptions, Document], str]


@dataclass
class PdfResult:
    """
    Result of producing a PDF.

    Exactly one of ``pdf`` (success) or ``message`` (failure) is set.

    Attributes:
        success: Whether a PDF was produced
        pdf: The PDF bytes (None on failure)
        message: Failure text: a fixed prefix plus an excerpt of the TeX log when relevant
        log: Combined stdout and stderr of the final engine pass
        error: Typed failure (None on success)
        num_passes: Number of engine passes run
        warnings: TeX warnings found in the final log
        page_count: Pages in the PDF (None if unavailable)
        work_dir: The temporary directory used (already removed when returned)
    """

    success: bool
    pdf: Optional[bytes] = None
    message: Optional[bytes] = None
    log: bytes = b""
    error: Optional[TexError] = None
    num_passes: int = 0
    warnings: List[str] = field(default_factory=list)
    page_count: Optional[int] = None
    work_dir: Optional[Path] = None

    def raise_for_status(self) -> None:
        """Raise the typed error if the PDF could not be produced."""
        if self.error is not None:
            raise self.error


def make_pdf(
    program: str,
    writer: Writer,
    options: WriterOptions,
    document: Document,
    fetch: Fetcher = fetch_item,
    timeout: Optional[float] = TEX_TIMEOUT,
    verbose: bool = False,
    runner: Runner = run_command,
) -> PdfResult:
    """
    Produce a PDF from a document with a TeX engine.

    Steps, all inside a fresh temporary directory:
    1. Materialize images the engine could not otherwise find
    2. Render the document to LaTeX with ``writer``
    3. Run the engine (2 passes, 3 with a table of contents)
    4. Map the outcome to a PdfResult

    Failures map to messages as follows:
    - engine missing or killed: prefix + the launch/timeout error
    - non-zero exit on the final pass: prefix + the first error in the log
    - clean exit but no PDF: prefix alone

    Args:
        program: TeX engine (pdflatex, lualatex, xelatex)
        writer: Renders (options, document) to LaTeX source
        options: Writer options; ``source_directory`` resolves relative images
        document: Document to typeset
        fetch: Image fetch collaborator (default: fetch_item)
        timeout: Per-pass watchdog in seconds (default: TEX_TIMEOUT env, none if unset)
        verbose: Log every warning and the raw TeX output
        runner: Process runner (default: run_command)

    Returns:
        PdfResult with the PDF bytes or the failure message
    """
    start_time = time.time()

    with tempfile.TemporaryDirectory(prefix="tex2pdf.") as tmp:
        work_dir = Path(tmp)
        materialized = handle_images(options.source_directory, work_dir, document, fetch=fetch)
        source = writer(options, materialized)

        result = _compile(program, source, work_dir, timeout, runner)
        result.work_dir = work_dir

    log_compilation_result(result, time.time() - start_time, verbose=verbose)
    return result


def _compile(
    program: str, source: str, work_dir: Path, timeout: Optional[float], runner: Runner
) -> PdfResult:
    log_compilation_start(program, passes_for(source), work_dir)

    try:
        run = run_tex_program(program, source, work_dir, timeout=timeout, runner=runner)
    except (ToolLaunchError, ToolTimeoutError) as e:
        log = getattr(e, "stdout", b"") + getattr(e, "stderr", b"")
        return PdfResult(
            success=False,
            message=ERROR_PREFIX + b"\n" + str(e).encode("utf-8"),
            log=log,
            error=e,
        )

    _, warnings = parse_log(decode_log(run.log))

    if run.returncode != 0:
        excerpt = extract_message(run.log)
        return PdfResult(
            success=False,
            message=ERROR_PREFIX + b"\n" + excerpt,
            log=run.log,
            error=ToolExitError(run.returncode, run.log, excerpt),
            num_passes=run.num_passes,
            warnings=warnings,
        )

    if run.pdf is None:
        expected = output_path(work_dir / INPUT_NAME)
        _log_debug(f"No output at {expected}")
        return PdfResult(
            success=False,
            message=ERROR_PREFIX,
            log=run.log,
            error=NoArtifactError(expected),
            num_passes=run.num_passes,
            warnings=warnings,
        )

    return PdfResult(
        success=True,
        pdf=run.pdf,
        log=run.log,
        num_passes=run.num_passes,
        warnings=warnings,
        page_count=page_count(run.pdf),
    )
