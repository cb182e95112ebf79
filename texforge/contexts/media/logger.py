"""
Media context logger.

Provides logging interface for media context with automatic [media] prefix.
All media modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[media]"


def _log_info(message: str) -> None:
    """Log info message with [media] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [media] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [media] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
