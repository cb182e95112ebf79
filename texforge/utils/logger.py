"""
Generic logger setup utilities.

One loguru configuration per run: a DEBUG file sink inside the session
directory, a coloured console sink on stderr (stdout is reserved for command
output such as excerpts), and a provenance header identifying the run.
Context-specific wrappers should be defined in contexts/{context}/logger.py.
"""

import platform
import sys
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from loguru import logger

from texforge import __version__

load_dotenv()

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "SUCCESS": "<green>",
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Mapping[str, object]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Configure loguru for one session of a context.

    Replaces any existing sinks, so calling it again starts a new session
    rather than duplicating output.

    Args:
        context_name: Context identifier, also the log file stem (e.g. "render")
        log_dir: Session directory; created if missing
        extra_provenance: Additional key-value pairs for the provenance header
        console_level: Minimum level shown on the console (file always gets DEBUG)

    Returns:
        Path to the session's log file

    Example:
        log_file = setup_logger(
            context_name="render",
            log_dir=Path("outs/logs/render_20251114_123456"),
            extra_provenance={"TeX engine": "xelatex"},
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    # File sink keeps everything, including raw TeX output
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    provenance = {"Session": log_dir.name, "Log file": log_file}
    provenance.update(extra_provenance or {})
    log_provenance(provenance)

    return log_file


def log_provenance(extra_context: Optional[Mapping[str, object]] = None) -> None:
    """
    Log a header describing the run: texforge and Python versions, platform,
    command line and working directory, then any extra key-value pairs.
    """
    logger.debug("=" * 80)
    logger.info(f"texforge {__version__} (Python {platform.python_version()}, {platform.system()})")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")

    for key, value in (extra_context or {}).items():
        logger.info(f"{key}: {value}")

    logger.debug("=" * 80)
