"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from texforge.contexts.rendering.diagnostics import decode_log
from texforge.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, engine: str = None, console_level: str = "INFO") -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session
        engine: TeX engine recorded in the provenance header (default: LATEX_COMPILER)
        console_level: Minimum level shown on the console

    Returns:
        Path to log file

    Example:
        from texforge.contexts.rendering.logger import setup_rendering_logger

        log_file = setup_rendering_logger(log_dir)
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"TeX engine": engine or os.getenv("LATEX_COMPILER", "pdflatex")},
        console_level=console_level,
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compilation_start(program: str, num_passes: int, work_dir: Path) -> None:
    """Log start of compilation with context."""
    _log_info(f"Starting compilation with {program}")
    _log_debug(f"  Working directory: {work_dir}")
    _log_debug(f"  Passes: {num_passes}")


def log_pass(pass_number: int, num_passes: int, returncode: int, elapsed_time: float) -> None:
    """Log the outcome of a single engine pass."""
    _log_debug(f"  Pass {pass_number}/{num_passes}: exit {returncode} ({elapsed_time:.2f}s)")


def log_compilation_result(result, elapsed_time: float, verbose: bool = False) -> None:
    """
    Log compilation result with diagnostics.

    Args:
        result: PdfResult from make_pdf()
        elapsed_time: Time taken to compile
        verbose: Show detailed warnings and the raw TeX output (default: False)
    """
    if result.success:
        _log_success("Compilation succeeded.")
        pages = f", {result.page_count} pages" if result.page_count is not None else ""
        _log_success(
            f"{len(result.pdf)} bytes{pages}, {len(result.warnings)} warnings ({elapsed_time:.2f}s)"
        )
    else:
        _log_error(f"Compilation failed ({elapsed_time:.2f}s)")
        for line in decode_log(result.message).splitlines():
            _log_error(f"  {line}")

    if result.warnings:
        _log_warning(f"{len(result.warnings)} warnings detected")
        warning_limit = 10 if verbose else 3
        for i, warn in enumerate(result.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(result.warnings) > warning_limit:
            _log_debug(f"  ... and {len(result.warnings) - warning_limit} more warnings")

    # Raw output bypasses the format template so multi-line TeX logs stay readable
    if (verbose or not result.success) and result.log:
        text = decode_log(result.log)
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nTEX OUTPUT:\n{'=' * 80}\n{text}\n")
